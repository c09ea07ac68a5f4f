"""Helpers shared by the store and its callers (validation, CLI output)."""
