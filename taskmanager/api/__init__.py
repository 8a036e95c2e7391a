"""HTTP API for taskmanager."""
