"""Service marketplace backend."""
