"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.auth.jwt import verify_token
from tq.database import get_session
from tq.db.models import Account

_bearer = HTTPBearer()


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Account:
    """
    Extract and verify the bearer JWT, return the Account it names.

    Raises 401 on a bad token or unknown account.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
        account_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise HTTPException(status_code=401, detail=str(e) or "Invalid token") from e

    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    if account is None:
        raise HTTPException(status_code=401, detail="Account not found")
    return account
