from fastapi import APIRouter, Depends, Response

from refashion.config import Settings
from refashion.dependencies import current_session, get_remote_store, get_settings
from refashion.errors import ValidationError
from refashion.logger import get_logger
from refashion.models.schemas import AuthRequest, Session
from refashion.services.remote_store import RemoteStore
from refashion.state.session import clear_session, set_session

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("")
async def read_session(session: Session | None = Depends(current_session)):
    return {"user": session.model_dump() if session else None}


@router.post("")
async def auth_action(
    body: AuthRequest,
    response: Response,
    remote: RemoteStore = Depends(get_remote_store),
    settings: Settings = Depends(get_settings),
):
    if body.action == "signup":
        if not (body.name and body.email and body.password):
            raise ValidationError("Name, email and password are required")
        identity = await remote.register(body.name, body.email, body.password)
        session = set_session(response, identity, settings)
        logger.info("Account created for %s", session.email)
        return {"user": session.model_dump()}

    if body.action == "login":
        if not (body.email and body.password):
            raise ValidationError("Email and password are required")
        identity = await remote.login(body.email, body.password)
        session = set_session(response, identity, settings)
        return {"user": session.model_dump()}

    if body.action == "setSession":
        # Identity established by a client-side sign in; the cookie becomes authoritative
        session = set_session(response, body.user or {}, settings)
        return {"user": session.model_dump()}

    if body.action == "logout":
        clear_session(response, settings)
        return {"ok": True}

    raise ValidationError("Invalid action")
