"""songbook - live-ranked song catalog browser."""
