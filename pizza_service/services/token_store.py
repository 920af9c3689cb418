"""
Session allow-list for bearer credentials.

Only the signature fragment (third dot-separated segment) of a credential is
stored. A credential is valid while at least one row carries its fragment.
Lifecycle per credential: anonymous -> issued (valid) -> revoked (terminal).
"""
import logging
from typing import Optional

from sqlmodel import Session, select

from pizza_service.database import translate_db_errors
from pizza_service.domain import SessionRecord
from pizza_service.errors import MalformedCredential
from pizza_service.models.auth_session import AuthSession

logger = logging.getLogger(__name__)


def extract_signature(credential) -> str:
    """
    Return the signature fragment of a `header.payload.signature` credential.

    Anything that does not split into exactly three segments yields "".
    """
    if not isinstance(credential, str):
        return ""
    parts = credential.split(".")
    if len(parts) == 3:
        return parts[2]
    return ""


def _short(signature: str) -> str:
    return signature[:6] + "..." if len(signature) > 6 else signature


def issue_session(session: Session, user_id: int, credential: str) -> SessionRecord:
    """
    Record a freshly issued credential for user_id.

    Rows are appended, never deduplicated: one user may hold several sessions.

    Raises:
        MalformedCredential: if no signature fragment can be extracted
    """
    signature = extract_signature(credential)
    if not signature:
        raise MalformedCredential("Credential has no signature fragment")

    with translate_db_errors("issue_session"):
        try:
            session.add(AuthSession(token=signature, user_id=user_id))
            session.commit()
        except Exception:
            session.rollback()
            raise

    logger.info(f"Issued session for user {user_id} ({_short(signature)})")
    return SessionRecord(user_id=user_id, signature=signature)


def lookup_session(session: Session, credential: str) -> Optional[SessionRecord]:
    """Return the session row for credential, or None. Empty fragments never query."""
    signature = extract_signature(credential)
    if not signature:
        return None

    with translate_db_errors("lookup_session"):
        row = session.exec(
            select(AuthSession).where(AuthSession.token == signature).order_by(AuthSession.id)
        ).first()

    if row is None:
        return None
    return SessionRecord(user_id=row.user_id, signature=row.token)


def validate_session(session: Session, credential: str) -> bool:
    """True iff at least one active session carries the credential's fragment."""
    return lookup_session(session, credential) is not None


def revoke_session(session: Session, credential: str) -> int:
    """
    Delete every session row carrying the credential's fragment.

    Revoking an unknown credential is a no-op. Returns the number of rows removed.

    Raises:
        MalformedCredential: if no signature fragment can be extracted
    """
    signature = extract_signature(credential)
    if not signature:
        raise MalformedCredential("Credential has no signature fragment")

    with translate_db_errors("revoke_session"):
        try:
            rows = session.exec(select(AuthSession).where(AuthSession.token == signature)).all()
            for row in rows:
                session.delete(row)
            session.commit()
        except Exception:
            session.rollback()
            raise

    removed = len(rows)
    logger.info(f"Revoked {removed} session(s) for {_short(signature)}")
    return removed
