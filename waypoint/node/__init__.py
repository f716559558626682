"""Node identity."""
