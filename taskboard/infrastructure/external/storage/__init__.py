"""Attachment storage. LocalStorageService implements IStorageService."""

from taskboard.infrastructure.external.storage.factory import create_storage_service
from taskboard.infrastructure.external.storage.local_storage import LocalStorageService

__all__ = ["LocalStorageService", "create_storage_service"]
