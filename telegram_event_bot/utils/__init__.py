"""Helpers for parsing, formatting, locking and metrics."""
