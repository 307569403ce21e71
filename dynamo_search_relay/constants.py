"""
Fixed values shared by the stream relay.
"""

# Value of ``eventSource`` on every DynamoDB stream record
DYNAMODB_EVENT_SOURCE = "aws:dynamodb"

# ``arn:aws:dynamodb:<region>:<account>:table/<name>/stream/<label>``
TABLE_NAME_PATTERN = r"table/([^/]+)"

# Documents older than this are removed by the purge job
RETENTION_MONTHS = 6

# Field the purge range query filters on; set at flatten time
EVENT_TIMESTAMP_FIELD = "event_timestamp"

# Field used as the document id in the destination index
PRIMARY_KEY_FIELD = "pk"

# Characters of a raw message body kept in parse failure logs
BODY_SNIPPET_LENGTH = 100

__all__ = [
    "BODY_SNIPPET_LENGTH",
    "DYNAMODB_EVENT_SOURCE",
    "EVENT_TIMESTAMP_FIELD",
    "PRIMARY_KEY_FIELD",
    "RETENTION_MONTHS",
    "TABLE_NAME_PATTERN",
]
