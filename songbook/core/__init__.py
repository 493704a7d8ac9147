"""Core utilities: configuration, logging, errors and fuzzy matching."""
