"""DTOs for identity and user records (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """Authenticated identity from the identity provider's token.

    subject is the provider's stable id (token `sub`); name and picture_url
    come from the token claims and are copied onto the user record.
    """

    subject: str
    name: str
    picture_url: str | None = None


@dataclass(frozen=True)
class UserResult:
    """User read-model (result of get_by_token_identifier, save_user, etc.)."""

    id: str
    token_identifier: str
    name: str
    picture_url: str | None
