"""Settings schema and persistence."""
