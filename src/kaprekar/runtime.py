# runtime.py
from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Runtime:
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False  # full tracebacks and [debug] lines

    def apply(self, settings: Any) -> None:
        """Install a profile (a config.Settings or a plain nested dict)."""
        data = settings.as_dict() if hasattr(settings, "as_dict") else settings
        self.settings = dict(data or {})
        if self.get("BEHAVIOUR.DEBUG") is True:
            self.debug = True

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. 'ROUTINE.ITERATIONS'."""
        cur: Any = self.settings
        for part in key.split("."):
            if not isinstance(cur, dict) or part not in cur:
                return default
            cur = cur[part]
        return cur


_current_runtime: ContextVar[Runtime | None] = ContextVar("kaprekar_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = reset()
    return rt


def reset() -> Runtime:
    """Install a fresh Runtime (tests)."""
    rt = Runtime()
    _current_runtime.set(rt)
    return rt


def APPLY(settings: Any) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)
