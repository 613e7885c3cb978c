"""Core constants and errors."""
