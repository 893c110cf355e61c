"""Upload API schemas."""
