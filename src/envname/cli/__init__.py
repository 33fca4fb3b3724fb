"""envname command line interface."""
