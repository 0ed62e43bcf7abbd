"""Core models, logging and filesystem helpers for balscan."""
