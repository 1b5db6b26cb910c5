"""Evaluation domain: progress, transcript and lifecycle."""
