from async_mdc.core.errors import MDCError, NoActiveContext
from async_mdc.core.mdc import MDC, get_mdc
from async_mdc.core.storage import ContextStorage

__all__ = ["MDC", "MDCError", "NoActiveContext", "ContextStorage", "get_mdc"]
