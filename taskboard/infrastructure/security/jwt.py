"""Identity token creation and verification.

The identity provider signs tokens with the shared SECRET_KEY. `sub` is the
stable subject; `name` and `picture` are profile claims copied onto the user
record by saveUser. create_identity_token is used by tests and local tooling.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from taskboard.application.dtos.user import Principal
from taskboard.core.config import get_settings


def create_identity_token(
    subject: str,
    name: str,
    picture_url: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed identity token for subject.

    Args:
        subject: Identity-provider subject (becomes the user's token_identifier).
        name: Display name claim.
        picture_url: Optional avatar URL claim.
        expires_delta: Optional TTL; else uses settings.identity_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.identity_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": subject,
        "name": name,
        "exp": datetime.now(UTC) + expires_delta,
    }
    if picture_url:
        claims["picture"] = picture_url
    encoded = jwt.encode(
        claims,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> Principal:
    """Verify and decode an identity token.

    Raises:
        ValueError: If token is invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ValueError("Token missing required claim: sub")
    name = payload.get("name")
    picture = payload.get("picture")
    return Principal(
        subject=subject,
        name=name if isinstance(name, str) and name else subject,
        picture_url=picture if isinstance(picture, str) else None,
    )
