"""HTTP client and session runtime."""
