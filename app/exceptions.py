class AuditWorkerError(Exception):
    """Base exception for all audit worker errors."""


class TransportError(AuditWorkerError):
    """Raised when a download, upload, or payload delivery fails."""


class ContentValidationError(AuditWorkerError):
    """Raised when an archive or report has malformed content."""


class StateError(AuditWorkerError):
    """Raised when required context is missing from the result bag."""


class ProviderError(AuditWorkerError):
    """Raised when the document store or a storage provider fails."""


class FilesystemError(AuditWorkerError):
    """Raised when a local disk operation fails."""


class SendCancelledError(AuditWorkerError):
    """Raised when a payload send is abandoned through its cancel signal."""
