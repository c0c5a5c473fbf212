"""Exceptions raised at the collector boundary.

Bad product data never raises: each pipeline stage returns a typed failure
(``dealnorm.schemas.outcome``) instead. What remains here are integration
errors a caller has to handle, such as an unreachable source or an unknown
source id.
"""


class DealNormException(Exception):
    """Base class; ``message`` holds the text shown to operators."""

    def __init__(self, message: str = "dealnorm failed"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(DealNormException):
    """A lookup by id (collector registry, source table) found nothing."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"No {resource.lower()} registered as '{identifier}'")


class CollectorError(DealNormException):
    """A source could not be fetched, or its payload had the wrong shape."""

    def __init__(self, source_id: str, message: str):
        self.source_id = source_id
        super().__init__(f"[{source_id}] {message}")
