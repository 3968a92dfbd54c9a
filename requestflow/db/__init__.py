"""Database layer for RequestFlow."""
