"""Market data polling."""
