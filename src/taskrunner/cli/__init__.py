"""CLI layer for the taskrunner command-line interface."""

__all__ = ["main", "parser", "run", "config_print", "results_display"]
