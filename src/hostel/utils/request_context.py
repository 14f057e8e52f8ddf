from dataclasses import dataclass
from typing import Optional

from hostel.models.users import UserRole


@dataclass
class Caller:
    user_id: str
    email: str
    role: Optional[UserRole]


def parse_role(raw: Optional[str]) -> Optional[UserRole]:
    if not raw:
        return None
    try:
        return UserRole(raw.upper())
    except ValueError:
        return None


def get_caller(event: dict) -> Optional[Caller]:
    """Identity placed on the request by the JWT authorizer, or None."""
    try:
        authorizer = event["requestContext"]["authorizer"]
        user_id = authorizer["user_id"]
    except (KeyError, TypeError):
        return None

    return Caller(
        user_id=user_id,
        email=authorizer.get("email", ""),
        role=parse_role(authorizer.get("role")),
    )


def path_param(event: dict, name: str) -> Optional[str]:
    return (event.get("pathParameters") or {}).get(name)
