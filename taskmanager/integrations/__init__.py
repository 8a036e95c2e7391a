"""External service integrations for taskmanager."""
