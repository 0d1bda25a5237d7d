"""Inline keyboards attached to announcements."""
