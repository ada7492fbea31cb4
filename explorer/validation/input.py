import base58
from fastapi import HTTPException

SOLANA_ADDRESS_BYTES = 32


def validate_account(account: str) -> str:
    account = (account or "").strip()
    if not account:
        raise HTTPException(status_code=400, detail="Please enter a wallet address")

    try:
        decoded = base58.b58decode(account)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="Invalid Solana address. Must be a valid base58 string.",
        )
    if len(decoded) != SOLANA_ADDRESS_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid Solana address. Expected {SOLANA_ADDRESS_BYTES} bytes, got {len(decoded)}.",
        )

    return account
