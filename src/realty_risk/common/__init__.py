"""Shared models, configuration, logging and validation."""
