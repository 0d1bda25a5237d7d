"""Message and callback handlers."""
