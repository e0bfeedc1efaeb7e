from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Outcome:
    """Result of an operation that degrades instead of raising.

    `value` is always usable: on failure it carries the fallback the
    caller would otherwise have received silently, and `reason` says why.
    """
    ok: bool
    value: Any = None
    reason: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str, value: Any = None) -> "Outcome":
        return cls(ok=False, value=value, reason=reason)
