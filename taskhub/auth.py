"""
Authentication adapter.

Password hashing and token mechanics stay thin here: the rest of the code
only consumes the resulting Principal.
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.config import settings
from taskhub.core.principal import Principal
from taskhub.database import get_db
from taskhub.exceptions import AuthenticationError
from taskhub.middleware.logging import bind_log_context
from taskhub.models.tenant import Tenant, TenantStatus
from taskhub.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode = {
        "sub": user.id,
        "tenant_id": user.tenant_id,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        raise AuthenticationError("Invalid token")
    if not payload.get("sub"):
        raise AuthenticationError("Token does not contain 'sub' field.")
    return payload


async def get_current_principal(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """
    Resolve the bearer token into a Principal.

    The user row is re-read so deactivated users and users of suspended
    tenants are rejected even while their token is still valid.
    """
    if not token:
        raise AuthenticationError("Not authenticated")
    payload = decode_access_token(token)

    user = await db.get(User, payload["sub"])
    if user is None or not user.is_active:
        logger.warning("Token subject not found or inactive: %s", payload["sub"])
        raise AuthenticationError()

    if user.tenant_id is not None:
        tenant = await db.get(Tenant, user.tenant_id)
        if tenant is None or tenant.status == TenantStatus.suspended.value:
            raise AuthenticationError("Tenant account is suspended")

    principal = Principal.from_user(user)
    request.state.principal = principal
    bind_log_context(user_id=principal.user_id, tenant_id=principal.tenant_id)
    return principal
