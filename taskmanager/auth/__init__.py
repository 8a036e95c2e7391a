"""Authentication for taskmanager."""
