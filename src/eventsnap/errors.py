"""Domain errors raised by the services and mapped to HTTP responses in ``eventsnap.main``."""

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NO_FILES_PROVIDED = "NO_FILES_PROVIDED"
    TOO_MANY_FILES = "TOO_MANY_FILES"
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_STATUS = "INVALID_STATUS"
    NOT_FOUND = "NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    PHOTO_NOT_FOUND = "PHOTO_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    CONFLICT = "CONFLICT"
    GENERATION_EXHAUSTED = "GENERATION_EXHAUSTED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    QR_RENDER_FAILED = "QR_RENDER_FAILED"
    PHOTO_SAVE_FAILED = "PHOTO_SAVE_FAILED"


class EventSnapError(Exception):
    """Base domain error with a stable code and a user-safe message."""

    status_code = 500
    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, *, code: ErrorCode | None = None, field: str | None = None, filename: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.field = field
        self.filename = filename

    def to_dict(self) -> dict[str, str]:
        payload = {"detail": self.message, "code": self.code.value}
        if self.field:
            payload["field"] = self.field
        if self.filename:
            payload["filename"] = self.filename
        return payload

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationFailed(EventSnapError):
    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR


class NoFilesProvided(ValidationFailed):
    default_code = ErrorCode.NO_FILES_PROVIDED

    def __init__(self) -> None:
        super().__init__("No photos were uploaded", field="files")


class TooManyFiles(ValidationFailed):
    default_code = ErrorCode.TOO_MANY_FILES

    def __init__(self, limit: int, received: int) -> None:
        super().__init__(f"Maximum {limit} photos allowed per upload, got {received}", field="files")
        self.limit = limit
        self.received = received


class UnsupportedFileType(ValidationFailed):
    default_code = ErrorCode.UNSUPPORTED_FILE_TYPE

    def __init__(self, filename: str, mime_type: str | None) -> None:
        super().__init__(f"File type {mime_type or 'unknown'} is not allowed for {filename}", field="files", filename=filename)


class FileTooLarge(ValidationFailed):
    default_code = ErrorCode.FILE_TOO_LARGE

    def __init__(self, filename: str, size: int, limit: int) -> None:
        super().__init__(
            f"File too large: {filename} is {size / (1024 * 1024):.1f}MB (max {limit / (1024 * 1024):.1f}MB)",
            field="files",
            filename=filename,
        )


class InvalidEmail(ValidationFailed):
    default_code = ErrorCode.INVALID_EMAIL

    def __init__(self, field: str = "uploader_email") -> None:
        super().__init__("Please provide a valid email address", field=field)


class InvalidStatus(ValidationFailed):
    default_code = ErrorCode.INVALID_STATUS

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid status {value!r}. Must be approved, rejected, or pending", field="status")


class NotFound(EventSnapError):
    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class EventNotFound(NotFound):
    default_code = ErrorCode.EVENT_NOT_FOUND

    def __init__(self, event_ref: str) -> None:
        super().__init__("Event not found")
        self.event_ref = event_ref


class PhotoNotFound(NotFound):
    default_code = ErrorCode.PHOTO_NOT_FOUND

    def __init__(self, photo_ref: str) -> None:
        super().__init__("Photo not found")
        self.photo_ref = photo_ref


class AccessDenied(EventSnapError):
    status_code = 403
    default_code = ErrorCode.ACCESS_DENIED

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class Conflict(EventSnapError):
    status_code = 409
    default_code = ErrorCode.CONFLICT


class GenerationExhausted(Conflict):
    default_code = ErrorCode.GENERATION_EXHAUSTED

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Failed to generate unique event ID after {attempts} attempts. Please try again.")
        self.attempts = attempts


class PhotoSaveFailed(EventSnapError):
    status_code = 500
    default_code = ErrorCode.PHOTO_SAVE_FAILED

    def __init__(self, filename: str) -> None:
        super().__init__(f"Could not save {filename}, please try again", filename=filename)


class UpstreamUnavailable(EventSnapError):
    status_code = 502
    default_code = ErrorCode.UPSTREAM_UNAVAILABLE


class StorageUnavailable(UpstreamUnavailable):
    default_code = ErrorCode.STORAGE_UNAVAILABLE


class QRRenderFailed(UpstreamUnavailable):
    default_code = ErrorCode.QR_RENDER_FAILED
