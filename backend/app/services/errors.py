"""
Service-level exceptions, mapped to HTTP responses at the route boundary.
"""


class RecordNotFoundError(LookupError):
    """A record addressed by id does not exist."""

    def __init__(self, record_type: str, record_id):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"{record_type} {record_id} not found")


class InvalidRecordError(ValueError):
    """The supplied data cannot be stored as-is."""
