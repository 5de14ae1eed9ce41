"""Data loading and schema configuration."""
