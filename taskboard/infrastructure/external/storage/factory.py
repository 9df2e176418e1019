"""Storage service construction from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskboard.application.interfaces.storage import IStorageService

if TYPE_CHECKING:
    from taskboard.core.config import Settings


def create_storage_service(settings: Settings | None = None) -> IStorageService:
    """Create the attachment store.

    Raises:
        ValueError: STORAGE_ROOT is empty.
    """
    from taskboard.core.config import get_settings
    from taskboard.infrastructure.external.storage.local_storage import LocalStorageService

    s = settings or get_settings()
    if not s.storage_root:
        raise ValueError("STORAGE_ROOT is required for attachment storage")
    return LocalStorageService(storage_root=s.storage_root)
