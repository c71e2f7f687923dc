"""External collaborators: storage-backed cart, payments, REST API."""
