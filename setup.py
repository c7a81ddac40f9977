#!/usr/bin/env python3

import setuptools


setuptools.setup(
    name='kuroe',
    version='0.1.0',
    description='Compile and run generators, validators, solvers and checkers for competitive programming problems',
    python_requires='>=3.11',
    packages=setuptools.find_packages(include=['kuroe', 'kuroe.*']),
    # Base configuration files, see kuroe/config.py
    package_data={'kuroe': ['config/*.yaml']},
    install_requires=[
        'PyYAML',
        'colorlog',
        'pydantic>=2',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'kuroe=kuroe.main:main',
        ],
    },
)
