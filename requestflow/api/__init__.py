"""HTTP surface for RequestFlow."""
