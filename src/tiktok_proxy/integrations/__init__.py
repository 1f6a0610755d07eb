"""External service integrations."""

from .document_merge import DocumentMergeClient

__all__ = ["DocumentMergeClient"]
