"""Command line entry point: ``python -m schedule_import.cli``."""
