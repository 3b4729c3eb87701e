"""Base models shared by the persisted document and result types.

:class:`WalletBaseModel` maps snake_case fields to the camelCase keys
used in ``.wallet.json`` and the tool surface, so files written by
earlier versions of the wallet load unchanged.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WalletBaseModel(BaseModel):
    """Base for persisted and outward-facing models.

    * camelCase aliases via ``alias_generator=to_camel``
    * population by field name for code that builds models directly
    * unknown keys ignored so newer files still load
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
