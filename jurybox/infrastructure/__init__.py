"""Infrastructure layer: persistence, logging and wiring."""
