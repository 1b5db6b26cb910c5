"""Logging and trace correlation."""
