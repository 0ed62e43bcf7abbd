"""Packaged static resources (HTML report template)."""
