from .messages import DEFAULT_LANGUAGE, MESSAGES, get_text

__all__ = ["DEFAULT_LANGUAGE", "MESSAGES", "get_text"]
