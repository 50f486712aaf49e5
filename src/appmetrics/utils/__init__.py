"""Shared helpers: property lookup, bean wiring, configuration validation."""
