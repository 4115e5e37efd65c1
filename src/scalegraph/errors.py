"""
Error kinds for the scale version graph.

Every failure the engine can report carries an ErrorKind so that callers
(UI, CLI, tests) can branch on the category without parsing messages.

Fatal conditions are exceptions. Non-fatal structural drift of an
adaptation is a warning and uses the category at the bottom of this module.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Categories of failure surfaced to callers."""

    VALIDATION_ERROR = "validation_error"
    STRUCTURAL_WARNING = "structural_warning"
    TRANSPORT_OFFLINE = "transport_offline"
    TRANSPORT_TIMEOUT = "transport_timeout"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    NOT_FOUND = "not_found"
    ROOT_PROTECTED = "root_protected"

    # Store-level invariant violations
    NODE_INVALID = "node_invalid"
    IMMUTABLE_FIELD = "immutable_field"
    ROOT_CONFLICT = "root_conflict"
    PARTIAL_CASCADE = "partial_cascade"
    DUPLICATE_NODE = "duplicate_node"

    # Orchestration
    OPERATION_IN_PROGRESS = "operation_in_progress"
    STALE_RESULT = "stale_result"
    INGEST_REJECTED = "ingest_rejected"
    INGEST_ERROR = "ingest_error"


class ScaleGraphError(Exception):
    """Base class for every error raised by scalegraph."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FieldError(ScaleGraphError):
    """An error tied to one named field of a payload or node."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class AdaptationValidationError(FieldError):
    """Raised when an adaptation payload does not match the required shape."""

    kind = ErrorKind.VALIDATION_ERROR


class StructuringValidationError(FieldError):
    """Raised when an ingest structuring payload is malformed."""

    kind = ErrorKind.VALIDATION_ERROR


class NodeValidationError(FieldError):
    """Raised by the store when a node fails shape validation."""

    kind = ErrorKind.NODE_INVALID


class ImmutableFieldError(FieldError):
    """Raised when an update targets a lineage or layout field."""

    kind = ErrorKind.IMMUTABLE_FIELD


class NodeNotFoundError(ScaleGraphError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, node_id: str):
        super().__init__(f"Scale not found: {node_id}")
        self.node_id = node_id


class RootProtectedError(ScaleGraphError):
    kind = ErrorKind.ROOT_PROTECTED

    def __init__(self, node_id: str):
        super().__init__(f"Root scale cannot be deleted: {node_id}")
        self.node_id = node_id


class RootConflictError(ScaleGraphError):
    """Raised when a second root is added to a populated family."""

    kind = ErrorKind.ROOT_CONFLICT


class PartialCascadeError(ScaleGraphError):
    """Raised when a removal set is not closed over descendants."""

    kind = ErrorKind.PARTIAL_CASCADE


class DuplicateNodeError(ScaleGraphError):
    kind = ErrorKind.DUPLICATE_NODE

    def __init__(self, node_id: str, retired: bool = False):
        reason = "was removed and cannot be reused" if retired else "already exists"
        super().__init__(f"Scale id {node_id!r} {reason}")
        self.node_id = node_id
        self.retired = retired


class OperationInProgressError(ScaleGraphError):
    kind = ErrorKind.OPERATION_IN_PROGRESS

    def __init__(self, operation: str):
        super().__init__(f"Cannot start {operation} while another {operation} is in progress")
        self.operation = operation


class StaleResultError(ScaleGraphError):
    """The context a call was started in changed before its result arrived."""

    kind = ErrorKind.STALE_RESULT


class IngestError(ScaleGraphError):
    """Raised when ingest records cannot be produced from the input text."""

    kind = ErrorKind.INGEST_ERROR


class IngestRejectedError(ScaleGraphError):
    """The structuring service judged the input not to be a scale."""

    kind = ErrorKind.INGEST_REJECTED


# =============================================================================
# TRANSPORT FAILURES
# =============================================================================
# Raised by the (external) generative-service client. Each kind has its own
# class and a default message that is fit to show to a person.


class TransportError(ScaleGraphError):
    kind = ErrorKind.CLIENT_ERROR
    default_message = "The generative service request failed."

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.status = status


class TransportOffline(TransportError):
    kind = ErrorKind.TRANSPORT_OFFLINE
    default_message = "No network connection."


class TransportTimeout(TransportError):
    kind = ErrorKind.TRANSPORT_TIMEOUT
    default_message = "The generative service took too long to respond."


class RateLimited(TransportError):
    kind = ErrorKind.RATE_LIMITED
    default_message = "Usage limit reached. Try again in a few minutes."


class ServerError(TransportError):
    kind = ErrorKind.SERVER_ERROR
    default_message = "The generative service is busy. Try again later."


class ClientError(TransportError):
    kind = ErrorKind.CLIENT_ERROR
    default_message = "The generative service rejected the request."


# =============================================================================
# WARNING CATEGORIES
# =============================================================================


class StructuralWarning(UserWarning):
    """An adaptation's structure differs from its source node."""


__all__ = [
    "ErrorKind",
    "ScaleGraphError",
    "FieldError",
    "AdaptationValidationError",
    "StructuringValidationError",
    "NodeValidationError",
    "ImmutableFieldError",
    "NodeNotFoundError",
    "RootProtectedError",
    "RootConflictError",
    "PartialCascadeError",
    "DuplicateNodeError",
    "OperationInProgressError",
    "StaleResultError",
    "IngestError",
    "IngestRejectedError",
    "TransportError",
    "TransportOffline",
    "TransportTimeout",
    "RateLimited",
    "ServerError",
    "ClientError",
    "StructuralWarning",
]
