"""kuroe: compile and run generators, validators, solvers and checkers for
competitive programming problems."""
