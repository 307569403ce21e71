"""Custom exceptions for the stream relay."""


class RelayError(Exception):
    """Base exception for all dynamo_search_relay errors."""


# Record format errors
class RecordFormatError(RelayError):
    """Base exception for change records that cannot be turned into a
    document."""


class InvalidRecordFormatError(RecordFormatError):
    """Raised when a change record carries no NewImage."""


class EmptyRecordError(RecordFormatError):
    """Raised when flattening produced no fields at all."""


class MissingPrimaryKeyError(RecordFormatError):
    """Raised when a flattened record has no usable ``pk`` value."""


# Routing errors
class RoutingError(RelayError):
    """Base exception for routing a record to its index and queue."""


class TableNameExtractionError(RoutingError):
    """Raised when the table name cannot be read from the stream ARN."""


class NoChannelForTableError(RoutingError):
    """Raised when no configured queue URL matches the source table."""


# Collaborator errors
class GatewayError(RelayError):
    """
    Base exception for failures reported by the document store or the
    message queue.
    """


class IndexingError(GatewayError):
    """Raised when an OpenSearch request fails."""


class AcknowledgementError(GatewayError):
    """
    Raised when an SQS request fails.

    Deleting with a stale or expired receipt handle lands here as well; the
    message simply becomes visible again and is redelivered.
    """


class ConfigurationError(RelayError):
    """Raised when required configuration is missing at bootstrap."""
