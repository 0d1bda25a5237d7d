"""Telegram bot that announces community events and reminds participants."""

__version__ = "1.0.0"
