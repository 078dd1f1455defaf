"""Application state, lifecycle and error handling."""
