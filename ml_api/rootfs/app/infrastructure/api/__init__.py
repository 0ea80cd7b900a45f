"""Flask HTTP API."""
