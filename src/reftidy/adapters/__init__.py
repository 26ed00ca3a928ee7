"""Adapters binding the domain ports to external services."""
