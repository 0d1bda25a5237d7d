"""Services used by the handlers and the reminder worker."""
