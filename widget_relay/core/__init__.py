"""Core configuration, errors and concurrency primitives."""
