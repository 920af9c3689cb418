from typing import Optional

from sqlmodel import Field, SQLModel


class AuthSession(SQLModel, table=True):
    """One row per active credential. A user may hold several."""

    __tablename__ = "auth"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Signature fragment of the credential; indexed lookup key, not unique
    token: str = Field(index=True)
    user_id: int = Field(index=True)
