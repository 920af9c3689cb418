"""
Session API Routes
Bearer credential parsing, the current-diner dependency and logout.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from pizza_service.database import get_session
from pizza_service.domain import Diner
from pizza_service.services.token_store import lookup_session, revoke_session

router = APIRouter()


class LogoutResponse(BaseModel):
    message: str


def get_bearer_credential(authorization: Optional[str] = Header(None)) -> str:
    """Pull the credential out of an `Authorization: Bearer ...` header."""
    if not authorization:
        raise HTTPException(status_code=401, detail="unauthorized")
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credential.strip():
        raise HTTPException(status_code=401, detail="unauthorized")
    return credential.strip()


def get_current_diner(
    credential: str = Depends(get_bearer_credential), session: Session = Depends(get_session)
) -> Diner:
    """Resolve the caller from the session allow-list; unknown credentials are 401."""
    record = lookup_session(session, credential)
    if record is None:
        raise HTTPException(status_code=401, detail="unauthorized")
    return Diner(id=record.user_id)


@router.delete("/auth", response_model=LogoutResponse)
def logout(
    credential: str = Depends(get_bearer_credential),
    diner: Diner = Depends(get_current_diner),
    session: Session = Depends(get_session),
):
    """
    Revoke the presented credential.

    Other sessions held by the same diner stay valid.
    """
    revoke_session(session, credential)
    return LogoutResponse(message="logout successful")
