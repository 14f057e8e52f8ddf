import os
from datetime import datetime, timedelta, timezone
import jwt

from hostel.models.users import User, UserRole
from hostel.utils.request_context import Caller, parse_role

SECRET_KEY = os.environ.get("JWT_SECRET")
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24


def create_jwt(user: User):
    if not SECRET_KEY:
        raise RuntimeError("JWT_SECRET environment variable is not set")

    payload = {
        "user_id": user.user_id,
        "email": user.email,
        "role": user.role.value,
        "exp": datetime.now(timezone.utc)
        + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_caller(token: str) -> Caller:
    """Verify ``token`` and return who it was issued to.

    Raises a ``jwt.InvalidTokenError`` subclass for bad, expired or
    incomplete tokens. Tokens issued without a role belong to students.
    """
    claims = jwt.decode(
        token,
        SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"require": ["exp", "user_id"]},
    )
    return Caller(
        user_id=claims["user_id"],
        email=claims.get("email", ""),
        role=parse_role(claims.get("role") or UserRole.STUDENT.value),
    )
