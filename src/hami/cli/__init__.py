"""hami command-line interface."""
