"""Mask wallet secrets before values reach DEBUG logs.

The wallet document carries the ``nsec`` and payment results can carry
preimages or ecash proofs; both are logged through :func:`redact_for_log`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_SECRET_KEYS: frozenset[str] = frozenset({"nsec", "secret", "preimage", "proofs", "token", "privkey", "private_key"})
_MASK = "<redacted>"


def _scrub_text(text: str, max_string: int) -> str:
    if text.startswith("nsec1"):
        return f"nsec1{_MASK}"
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a log-safe copy of *value*.

    Pydantic models are dumped with their wire (camelCase) keys first.
    Values under a secret key are masked whatever their type, and any
    string that looks like an ``nsec`` is masked wherever it appears.
    Other objects are shown by type name only.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)
    if isinstance(value, str):
        return _scrub_text(value, max_string)
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return {
            str(key): _MASK if str(key).lower() in _SECRET_KEYS else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return f"<{type(value).__name__}>"
