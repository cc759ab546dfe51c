# src/async_mdc/core/logging.py
from __future__ import annotations

import datetime as dt
import logging
import re
import sys
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from async_mdc.core.config import settings
from async_mdc.core.mdc import MDC, get_mdc

# Attribute holding the context snapshot on every LogRecord
RECORD_ATTR = "mdc"

# Factory in place before we first wrapped it; reinstalling wraps this again
# instead of stacking wrappers.
_base_factory: Optional[Callable[..., logging.LogRecord]] = None
_installed: Optional[Callable[..., logging.LogRecord]] = None

# LogRecord attributes never filled from the context
_RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}
_PLACEHOLDER = re.compile(r"%\((\w+)\)")


def _fields(fields: Optional[Iterable[str]]) -> Tuple[str, ...]:
    return tuple(fields) if fields is not None else settings.log_fields


def _snapshot(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, RECORD_ATTR, None) or {}


def _fill(record: logging.LogRecord, fields: Tuple[str, ...]) -> None:
    # Values passed via `extra=` win over the context.
    snapshot = _snapshot(record)
    for f in fields:
        if not hasattr(record, f):
            record.__dict__[f] = snapshot.get(f)


def install_record_factory(mdc: Optional[MDC] = None) -> None:
    """
    Global LogRecord factory that snapshots the current context onto *every*
    record (``record.mdc``), third-party loggers included.

    Only the snapshot is attached here: ``Logger.makeRecord`` refuses `extra=`
    keys that already exist on the record, so individual fields are spread by
    ``SafeFormatter``/``MDCFilter`` afterwards.
    """
    global _base_factory, _installed
    if _base_factory is None:
        _base_factory = logging.getLogRecordFactory()
    base = _base_factory

    def _record_factory(*args, **kwargs):
        rec: logging.LogRecord = base(*args, **kwargs)
        rec.__dict__[RECORD_ATTR] = (mdc or get_mdc()).get_copy_of_store()
        return rec

    _installed = _record_factory
    logging.setLogRecordFactory(_record_factory)


def uninstall_record_factory() -> None:
    global _base_factory, _installed
    # A factory installed on top of ours stays in place.
    if _installed is None or logging.getLogRecordFactory() is not _installed:
        return
    logging.setLogRecordFactory(_base_factory)
    _base_factory = None
    _installed = None


class MDCFilter(logging.Filter):
    """Per-handler alternative to the record factory."""

    def __init__(self, mdc: Optional[MDC] = None, fields: Optional[Iterable[str]] = None, name: str = "") -> None:
        super().__init__(name)
        self._mdc = mdc
        self._fields = _fields(fields)

    def filter(self, record: logging.LogRecord) -> bool:
        if RECORD_ATTR not in record.__dict__:
            record.__dict__[RECORD_ATTR] = (self._mdc or get_mdc()).get_copy_of_store()
        _fill(record, self._fields)
        return True


class SafeFormatter(logging.Formatter):
    """ISO8601 UTC timestamps and resilience to missing context fields."""

    def __init__(self, fmt: Optional[str] = None, fields: Optional[Iterable[str]] = None) -> None:
        super().__init__(fmt)
        # Every custom placeholder in the format must exist on the record.
        wanted = _fields(fields)
        extra = [p for p in _PLACEHOLDER.findall(fmt or "") if p not in _RESERVED and p not in wanted]
        self._fields = wanted + tuple(dict.fromkeys(extra))

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        if datefmt:
            return super().formatTime(record, datefmt)
        ts = dt.datetime.fromtimestamp(record.created, tz=dt.timezone.utc)
        return ts.isoformat(timespec="seconds").replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        # Guarantee all context fields exist (even if None)
        _fill(record, self._fields)
        return super().format(record)


def _build_handler(fields: Tuple[str, ...]) -> logging.Handler:
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(SafeFormatter(settings.LOG_FORMAT, fields))
    return h


def configure_root(mdc: Optional[MDC] = None, fields: Optional[Iterable[str]] = None) -> None:
    install_record_factory(mdc)

    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(_build_handler(_fields(fields)))
    root.setLevel(settings.LOG_LEVEL.upper())

    # Calm down noisy libs
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
