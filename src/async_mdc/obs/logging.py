from __future__ import annotations

import logging
from typing import Any, Callable, MutableMapping, Optional

import structlog

from async_mdc.core.config import settings
from async_mdc.core.mdc import MDC, get_mdc

EventDict = MutableMapping[str, Any]


def merge_mdc(mdc: Optional[MDC] = None) -> Callable[[Any, str, EventDict], EventDict]:
    """structlog processor: merge the current context into each event dict.

    Keys bound on the logger or passed to the call take precedence.
    """
    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in (mdc or get_mdc()).get_copy_of_store().items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def boot_structlog(mdc: Optional[MDC] = None, *, json: bool = True) -> None:
    # Structlog JSON logs
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            merge_mdc(mdc),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ]
    )
