"""Core application infrastructure: configuration, exceptions, lifecycle."""
