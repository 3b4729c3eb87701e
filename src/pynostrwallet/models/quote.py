"""Mint quote model (Cashu NUT-04)."""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pynostrwallet._constants import PAID_QUOTE_STATES


class QuoteState(StrEnum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    PENDING = "PENDING"
    ISSUED = "ISSUED"
    UNKNOWN = "UNKNOWN"


class MintQuote(BaseModel):
    """A bolt11 mint quote as returned by ``/v1/mint/quote/bolt11``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    quote: str
    """Quote id used to poll the quote state."""
    request: str
    """The bolt11 invoice the payer must settle."""
    state: QuoteState = QuoteState.UNPAID
    expiry: int | None = None
    """Unix timestamp (seconds) after which the invoice is void."""
    amount: int | None = None
    unit: str | None = None
    paid: bool | None = Field(default=None, exclude=True)
    """Pre-NUT-04 v1 mints only report this flag instead of ``state``."""

    @field_validator("state", mode="before")
    @classmethod
    def _coerce_state(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return QuoteState(value.upper())
            except ValueError:
                return QuoteState.UNKNOWN
        return value

    @property
    def is_paid(self) -> bool:
        if self.paid:
            return True
        return self.state.value in PAID_QUOTE_STATES

    def is_expired(self, now: float | None = None) -> bool:
        if self.expiry is None:
            return False
        current = time.time() if now is None else now
        return current >= self.expiry
