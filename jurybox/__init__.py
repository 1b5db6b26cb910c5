"""JuryBox multi-agent consensus evaluation and monthly quota gate."""

__version__ = "1.0.0"
