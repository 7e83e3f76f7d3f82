from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt, ExpiredSignatureError
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from app.config import settings
from app.database import get_db
from app.exceptions import AuthenticationError
from app.models.user import User
import logging

logger = logging.getLogger(__name__)

# Tokens are issued by the account service; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (user id) in token data.")

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "sub": str(to_encode["sub"])})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id carried in the token's 'sub' claim."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning("JWT decoding failed: %s", e)
        raise AuthenticationError("Invalid token")

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        logger.warning("Token carries no usable 'sub' claim")
        raise AuthenticationError("Token does not identify a user")


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not token:
        raise AuthenticationError("Not authenticated")

    user_id = decode_access_token(token)
    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Token subject %s does not match any user", user_id)
        raise AuthenticationError()

    request.state.user_id = user.id
    return user
