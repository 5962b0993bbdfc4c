from enum import StrEnum


class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class UpstreamError(AppError):
    """Any failure obtaining usable data from the market data provider."""

    def __init__(self, message: str, code: str = "UPSTREAM_ERROR"):
        super().__init__(message, code=code)


class TransportError(UpstreamError):
    def __init__(self, message: str):
        super().__init__(message, code="UPSTREAM_TRANSPORT")


class PayloadError(UpstreamError):
    def __init__(self, message: str):
        super().__init__(message, code="UPSTREAM_PAYLOAD")


class SignalKind(StrEnum):
    error_message = "error_message"
    rate_limit_note = "rate_limit_note"
    information = "information"


class UpstreamSignalError(UpstreamError):
    """The provider answered 200 but the body carries an error, note or notice."""

    def __init__(self, kind: SignalKind, message: str):
        self.kind = kind
        super().__init__(f"{kind}: {message}", code="UPSTREAM_SIGNAL")


class StorageError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")
