"""Alert storage and matching."""
