"""Middlewares registered on the dispatcher."""

from .callback_guard import CallbackGuardMiddleware
from .context import ContextMiddleware

__all__ = ["CallbackGuardMiddleware", "ContextMiddleware"]
