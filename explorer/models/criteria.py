from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

UNKNOWN_TOKEN_NAME = "Unknown Token"

ActionType = Literal["", "send", "receive"]


class FilterCriteria(BaseModel):
    token: str = ""
    action: ActionType = ""
    type: str = ""
    destination: str = ""
    source: str = ""
    amount: float | None = None
    date_start: datetime | None = None
    date_end: datetime | None = None

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return not (
            self.token
            or self.action
            or self.type
            or self.destination
            or self.source
            or self.amount is not None
            or self.date_start is not None
            or self.date_end is not None
        )

    def has_transfer_fields(self) -> bool:
        """Fields that can only be checked against an individual token transfer."""
        return bool(
            self.token
            or self.action
            or self.destination
            or self.source
            or self.amount is not None
        )


class TokenMetadata(BaseModel):
    name: str = UNKNOWN_TOKEN_NAME
    image: str = ""

    model_config = {"frozen": True}
