"""
This module contains functionality for reading and using configuration
of programming languages (toolchains).

A toolchain knows which file extensions it handles, which commands compile
a source file, and which command runs the result.  Compile and run commands
are executed in the same working directory, so a compiled language can run
a fixed relative binary name produced by its compile step.
"""
import os
import re
from abc import ABC, abstractmethod

from . import config
from .run.program import CommandStep


class LanguageConfigError(Exception):
    """Exception class for errors in language configuration."""
    pass


class NoLanguageDetected(LanguageConfigError):
    """No language in a set handles a given file extension."""
    pass


class InvalidCustomToolchain(LanguageConfigError):
    """A custom toolchain specification could not be used."""
    pass


TARGET_VARIABLE = 'target'
_VARIABLE_RE = re.compile(r'%\(([^)]*)\)')


def expand_command(template: str, target) -> list[str]:
    """Expand a command template and split it into an argument vector.

    Every occurrence of %(target) is replaced by the canonical absolute
    path of the target file.  The result is split on single spaces; there
    is no shell quoting, so an argument can not contain a space.  Runs of
    spaces do not produce empty arguments.

    Args:
        template (str): command template, e.g. "g++ -O2 %(target)"
        target (str): path of the source file

    Returns:
        list of str, the program followed by its arguments.
    """
    expanded = template.replace('%%(%s)' % TARGET_VARIABLE, os.path.realpath(target))
    return [token for token in expanded.split(' ') if token]


def _command_step(template, target, ignore_additional_args=False):
    argv = expand_command(template, target)
    return CommandStep(argv[0], argv[1:], ignore_additional_args)


def _variables_in_command(cmd):
    """List all meta-variables appearing in a string."""
    return set(_VARIABLE_RE.findall(cmd))


class Language(ABC):
    """
    Interface of a toolchain for one kind of source file.
    """
    lang_id: str
    name: str

    @abstractmethod
    def is_valid_ext(self, ext: str) -> bool:
        """Check if the toolchain handles files with extension ext (without dot)."""

    @abstractmethod
    def compile(self, target) -> list[CommandStep]:
        """Compile steps for target, in execution order (may be empty)."""

    @abstractmethod
    def run(self, target) -> CommandStep:
        """Step running the (compiled) program."""

    def __str__(self) -> str:
        return self.name


class BuiltinLanguage(Language):
    """
    Class representing a single language from the language configuration.
    """

    __KEYS = ['name', 'extensions', 'compile', 'run', 'ignore_additional_args']

    def __init__(self, lang_id, lang_spec):
        """Construct language object

        Args:
            lang_id (str): language identifier
            lang_spec (dict): dictionary containing the specification
                of the language.
        """
        if not re.match('[a-z][a-z0-9]*$', lang_id):
            raise LanguageConfigError('Invalid language ID "%s"' % lang_id)
        self.lang_id = lang_id
        self.name = None
        self.extensions = None
        self.compile_commands = []
        self.run_command = None
        self.ignore_additional_args = False
        self.update(lang_spec)

    def is_valid_ext(self, ext):
        return ext in self.extensions

    def compile(self, target):
        return [_command_step(cmd, target) for cmd in self.compile_commands]

    def run(self, target):
        return _command_step(self.run_command, target, self.ignore_additional_args)

    def update(self, values):
        """Update a language specification with new values.

        Args:
            values (dict): dictionary containing new values for some
                subset of the language properties.
        """

        # Check that all provided values are known keys
        for unknown in set(values)-set(BuiltinLanguage.__KEYS):
            raise LanguageConfigError(
                'Unknown key "%s" specified for language %s'
                % (unknown, self.lang_id))

        for (key, value) in values.items():
            if key == 'compile':
                if value is None:
                    value = []
                if (not isinstance(value, list)
                        or not all(isinstance(cmd, str) for cmd in value)):
                    raise LanguageConfigError(
                        'Language %s: compile must be a list of strings but is %s.'
                        % (self.lang_id, value))
                self.compile_commands = list(value)
            elif key == 'ignore_additional_args':
                if not isinstance(value, bool):
                    raise LanguageConfigError(
                        'Language %s: ignore_additional_args must be boolean but is %s.'
                        % (self.lang_id, type(value)))
                self.ignore_additional_args = value
            else:
                if not isinstance(value, str):
                    raise LanguageConfigError(
                        'Language %s: %s must be string but is %s.'
                        % (self.lang_id, key, type(value)))
                if key == 'extensions':
                    self.extensions = value.split()
                elif key == 'run':
                    self.run_command = value
                else:
                    self.name = value

        self.__check()

    def __check(self):
        """Check that the language specification is valid (all mandatory
        fields provided, all metavariables used in commands valid).
        """
        if self.name is None:
            raise LanguageConfigError(
                'Language %s has no name' % self.lang_id)
        if not self.extensions:
            raise LanguageConfigError(
                'Language %s has no extensions' % self.lang_id)
        if not self.run_command or not self.run_command.strip():
            raise LanguageConfigError(
                'Language %s has no run command' % self.lang_id)
        for cmd in self.compile_commands:
            if not cmd.strip():
                raise LanguageConfigError(
                    'Language %s has an empty compile command' % self.lang_id)

        variables = _variables_in_command(self.run_command)
        for cmd in self.compile_commands:
            variables |= _variables_in_command(cmd)
        for unknown in variables - {TARGET_VARIABLE}:
            raise LanguageConfigError(
                'Unknown variable "%%(%s)" used for language %s'
                % (unknown, self.lang_id))


class CustomLanguage(Language):
    """
    Toolchain given by the user as an extension pattern and a list of
    command templates.  The last template runs the program, all others
    compile it, in order.
    """

    def __init__(self, pattern: str, commands: list[str]):
        if not commands:
            raise InvalidCustomToolchain(
                'Custom language for "%s" needs at least a run command' % pattern)
        if any(not cmd.strip() for cmd in commands):
            raise InvalidCustomToolchain(
                'Custom language for "%s" has an empty command' % pattern)
        try:
            self.pattern = re.compile('^(%s)$' % pattern)
        except re.error as err:
            raise InvalidCustomToolchain(
                'Custom language pattern "%s" is not a valid regex: %s' % (pattern, err))
        self.lang_id = 'custom'
        self.name = 'custom (%s)' % pattern
        self.compile_commands = list(commands[:-1])
        self.run_command = commands[-1]

    def is_valid_ext(self, ext):
        return self.pattern.match(ext) is not None

    def compile(self, target):
        return [_command_step(cmd, target) for cmd in self.compile_commands]

    def run(self, target):
        return _command_step(self.run_command, target)


def parse_custom_language(spec) -> CustomLanguage:
    """Create a custom language from "PATTERN,CMD,...,RUNCMD" or a list of
    the same fields.
    """
    if isinstance(spec, str):
        spec = spec.split(',')
    if not isinstance(spec, list) or not all(isinstance(field, str) for field in spec):
        raise InvalidCustomToolchain(
            'Custom language must be a list of strings, got %s' % (spec,))
    if len(spec) == 0:
        raise InvalidCustomToolchain('Custom language without extension pattern')
    return CustomLanguage(spec[0], spec[1:])


class Languages(object):
    """An ordered set of languages.  Detection is first match."""

    def __init__(self, data=None):
        """Create a set of languages from a dict.

        Args:
            data (dict): dictonary containing configuration.
                If None, resulting set of languages is empty.
                See documentation of update() method below for details.
        """
        self.languages: list[Language] = []
        if data is not None:
            self.update(data)

    def __iter__(self):
        return iter(self.languages)

    def __len__(self):
        return len(self.languages)

    def detect_language(self, ext: str) -> Language:
        """Find the language for a file extension.

        Args:
            ext (str): file extension, without leading dot

        Returns:
            the first Language in the set whose is_valid_ext(ext) holds.

        Raises:
            NoLanguageDetected: no language handles ext
        """
        for lang in self.languages:
            if lang.is_valid_ext(ext):
                return lang
        raise NoLanguageDetected('No language detected for extension "%s"' % ext)

    def get(self, lang_id):
        return next((lang for lang in self.languages if lang.lang_id == lang_id), None)

    def update(self, data):
        """Update the set with language configuration data from a dict.

        Args:
            data (dict): dictionary containing configuration.
                If this dictionary contains (possibly partial) configuration
                for a language already in the set, the configuration
                for that language will be overridden and updated.
                New languages are added last, in dictionary order.
        """
        if not isinstance(data, dict):
            raise LanguageConfigError(
                'Config file error: content must be a dictionary, but is %s.'
                % (type(data)))

        for (lang_id, lang_spec) in data.items():
            if not isinstance(lang_id, str):
                raise LanguageConfigError(
                    'Config file error: language IDs must be strings, but %s is %s.'
                    % (lang_id, type(lang_id)))

            if not isinstance(lang_spec, dict):
                raise LanguageConfigError(
                    'Config file error: language spec must be a dictionary, but spec of language %s is %s.'
                    % (lang_id, type(lang_spec)))

            existing = self.get(lang_id)
            if existing is None:
                self.languages.append(BuiltinLanguage(lang_id, lang_spec))
            else:
                existing.update(lang_spec)

    def with_custom(self, customs: list[Language]) -> 'Languages':
        """New set with customs in front of the languages of this set, so
        that they take precedence for overlapping extensions.
        """
        res = Languages()
        res.languages = list(customs) + self.languages
        return res


def load_language_config(priority_dirs=[]):
    """Load language configuration.

    Returns:
        Languages object for the set of languages.
    """
    return Languages(config.load_config('languages.yaml', priority_dirs))
