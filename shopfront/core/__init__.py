"""Core infrastructure: configuration, constants, exceptions and timers."""
