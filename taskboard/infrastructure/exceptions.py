"""Storage backend errors.

They extend TaskboardException so the API maps them through the same error
code table as domain errors. Every error carries the attachment's storage_ref.
"""

from typing import Any

from taskboard.domain.exceptions import TaskboardException


class StorageException(TaskboardException):
    """Base exception for attachment storage."""

    def __init__(self, storage_ref: str, message: str, error_code: str, **extra: Any) -> None:
        self.storage_ref = storage_ref
        super().__init__(message, error_code, {"storage_ref": storage_ref, **extra})


class StorageNotFoundError(StorageException):
    def __init__(self, storage_ref: str) -> None:
        super().__init__(storage_ref, f"No stored object at {storage_ref}", "STORAGE_NOT_FOUND")


class StorageUploadError(StorageException):
    def __init__(self, storage_ref: str, reason: str) -> None:
        super().__init__(
            storage_ref, f"Could not store {storage_ref}", "STORAGE_UPLOAD_ERROR", reason=reason
        )


class StorageDownloadError(StorageException):
    def __init__(self, storage_ref: str, reason: str) -> None:
        super().__init__(
            storage_ref, f"Could not read {storage_ref}", "STORAGE_DOWNLOAD_ERROR", reason=reason
        )


class StorageDeleteError(StorageException):
    def __init__(self, storage_ref: str, reason: str) -> None:
        super().__init__(
            storage_ref, f"Could not remove {storage_ref}", "STORAGE_DELETE_ERROR", reason=reason
        )


class StorageChecksumMismatchError(StorageException):
    """Written bytes differ from the checksum computed before upload."""

    def __init__(self, storage_ref: str, expected: str, actual: str) -> None:
        super().__init__(
            storage_ref,
            f"Stored bytes of {storage_ref} do not match their checksum",
            "STORAGE_CHECKSUM_ERROR",
            expected=expected,
            actual=actual,
        )


class StoragePermissionError(StorageException):
    """storage_ref resolves outside the storage root."""

    def __init__(self, storage_ref: str, operation: str) -> None:
        super().__init__(
            storage_ref,
            f"{storage_ref} is outside the storage root",
            "STORAGE_PERMISSION_ERROR",
            operation=operation,
        )
