"""Session-scoped services used by UI handlers."""
