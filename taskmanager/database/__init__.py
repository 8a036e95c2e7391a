"""Persistence layer for taskmanager."""
