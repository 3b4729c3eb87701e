"""Mint information document (Cashu NUT-06)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MintContact(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    method: str = ""
    info: str = ""


class MintInfo(BaseModel):
    """Response of ``GET /v1/info``.

    Keys are snake_case on the wire, so no alias generator is used.
    Unknown keys are preserved (``extra="allow"``) and written back to
    the cache unchanged.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str | None = None
    pubkey: str | None = None
    version: str | None = None
    description: str | None = None
    description_long: str | None = None
    contact: list[MintContact] = Field(default_factory=list)
    motd: str | None = None
    nuts: dict[str, Any] = Field(default_factory=dict)
    """Supported NUTs keyed by NUT number (as a string)."""

    def supports_minting(self, method: str, unit: str) -> bool:
        """Whether NUT-04 advertises *method*/*unit* and is not disabled.

        Mints that omit NUT-04 from their info are given the benefit of
        the doubt.
        """
        nut4 = self.nuts.get("4")
        if not isinstance(nut4, dict):
            return True
        if nut4.get("disabled") is True:
            return False
        methods = nut4.get("methods")
        if not isinstance(methods, list) or not methods:
            return True
        return any(
            isinstance(entry, dict) and entry.get("method") == method and entry.get("unit") == unit
            for entry in methods
        )
