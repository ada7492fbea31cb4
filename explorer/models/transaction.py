from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

UNKNOWN_TYPE = "UNKNOWN"


class TokenTransfer(BaseModel):
    mint: str
    token_amount: float = Field(default=0.0, alias="tokenAmount", ge=0)
    from_user_account: str | None = Field(default=None, alias="fromUserAccount")
    to_user_account: str | None = Field(default=None, alias="toUserAccount")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("token_amount", mode="before")
    @classmethod
    def _null_amount(cls, value):
        return 0.0 if value is None else value

    @field_validator("from_user_account", "to_user_account", mode="before")
    @classmethod
    def _blank_account(cls, value):
        return value or None

    def involves(self, account: str) -> bool:
        return account in (self.from_user_account, self.to_user_account)


class Transaction(BaseModel):
    signature: str
    type: str = UNKNOWN_TYPE
    source: str = UNKNOWN_TYPE
    destination: str = ""
    description: str = ""
    timestamp: int | None = None
    token_transfers: tuple[TokenTransfer, ...] = Field(default=(), alias="tokenTransfers")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("type", "source", mode="before")
    @classmethod
    def _null_label(cls, value):
        return value or UNKNOWN_TYPE

    @field_validator("destination", "description", mode="before")
    @classmethod
    def _null_text(cls, value):
        return value or ""

    @field_validator("token_transfers", mode="before")
    @classmethod
    def _null_transfers(cls, value):
        return () if value is None else value

    def touches(self, account: str) -> bool:
        """True when any token transfer has ``account`` as sender or receiver."""
        return any(transfer.involves(account) for transfer in self.token_transfers)
