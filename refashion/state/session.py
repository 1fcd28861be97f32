"""Cookie-backed session: the server's only trusted record of who is signed in."""
import json
from urllib.parse import quote, unquote

from fastapi import Request, Response
from pydantic import ValidationError as PydanticValidationError

from refashion.config import Settings
from refashion.errors import ValidationError
from refashion.models.schemas import Session

COOKIE_NAME = "session"


def encode_session(session: Session) -> str:
    return quote(json.dumps(session.model_dump(), separators=(",", ":")), safe="")


def decode_session(raw: str | None) -> Session | None:
    """Parse a cookie value. Anything malformed means signed out."""
    if not raw:
        return None
    try:
        data = json.loads(unquote(raw))
        if not isinstance(data, dict):
            return None
        return Session(**data)
    except (ValueError, TypeError, PydanticValidationError):
        return None


def set_session(response: Response, identity: dict | Session, settings: Settings) -> Session:
    if isinstance(identity, Session):
        identity = identity.model_dump()
    uid = identity.get("uid")
    email = identity.get("email")
    name = identity.get("name")
    if not (uid and isinstance(uid, str) and email and isinstance(email, str)):
        raise ValidationError("Invalid user data")
    if name is not None and not isinstance(name, str):
        raise ValidationError("Invalid user data")

    session = Session(uid=uid, name=name or email.split("@")[0], email=email)
    response.set_cookie(
        COOKIE_NAME,
        encode_session(session),
        max_age=settings.SESSION_MAX_AGE,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.SESSION_COOKIE_SAMESITE,
    )
    return session


def get_session(request: Request) -> Session | None:
    return decode_session(request.cookies.get(COOKIE_NAME))


def clear_session(response: Response, settings: Settings):
    response.delete_cookie(
        COOKIE_NAME,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.SESSION_COOKIE_SAMESITE,
    )
