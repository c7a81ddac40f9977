"""Exception classes for the run package."""


class ProgramError(Exception):
    """Base class for errors when preparing or running a program."""
    pass


class SpawnFailure(ProgramError):
    """The process could not be started at all (missing or unexecutable binary)."""

    def __init__(self, argv, reason):
        super().__init__('Failed to execute %s: %s' % (' '.join(argv), reason))
        self.argv = argv
        self.reason = reason


class CompileFailure(ProgramError):
    """A compile step did not finish successfully."""

    def __init__(self, target, step, status):
        super().__init__('Compile step "%s" for %s finished with status %s'
                         % (step, target, status))
        self.target = target
        self.step = step
        self.status = status
