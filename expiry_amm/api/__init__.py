"""HTTP API for the expiry pool."""
