from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(eq=False)
class MDCError(Exception):
    title: str = "Context store operation failed"
    detail: str = ""
    code: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"title": self.title, "detail": self.detail}
        if self.code is not None:
            data["code"] = self.code
        if self.meta is not None:
            data["meta"] = self.meta
        return data

    def __str__(self) -> str:
        return self.detail or self.title


@dataclass(eq=False)
class NoActiveContext(MDCError):
    """Raised by the strict accessors when no scope is active."""
    title: str = "No active context"
    detail: str = "async-mdc: context store is not available"
    code: Optional[str] = "E_NO_ACTIVE_CONTEXT"
