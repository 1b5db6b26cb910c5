"""Application layer: orchestration and quota services."""
