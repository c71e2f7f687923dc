"""Core infrastructure: configuration, storage, events, errors."""
