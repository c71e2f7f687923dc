"""Use cases spanning several services."""
