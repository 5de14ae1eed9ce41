"""Logging setup for the command-line layer."""
