"""Core infrastructure: configuration, logging, errors, time."""
