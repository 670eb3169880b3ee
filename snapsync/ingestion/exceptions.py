class IngestionError(Exception):
    """Base exception for all ingestion-related errors."""


class TransientSourceError(IngestionError):
    """Raised when an image cannot be retrieved this pass. The item is retried next pass."""


class EmptyPayloadError(TransientSourceError):
    """Raised when the image source returns a zero-length body."""


class MetadataWriteError(IngestionError):
    """Raised when a published item cannot be recorded in the metadata store."""
