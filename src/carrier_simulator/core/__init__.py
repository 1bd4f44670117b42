"""Core infrastructure: configuration, errors, logging and result types."""
