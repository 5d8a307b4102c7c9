"""Errors raised by the graph client."""


class GraphClientError(Exception):
    """Base error for graph service calls."""


class RemoteError(GraphClientError):
    """The service answered with a non-2xx status."""

    def __init__(self, path: str, status_code: int, body: str = "") -> None:
        super().__init__(f"Graphiti {path} returned {status_code}: {body}")
        self.path = path
        self.status_code = status_code
        self.body = body


class UnreachableError(GraphClientError):
    """The service could not be reached or did not answer in time."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Graphiti {path} unreachable: {reason}")
        self.path = path
        self.reason = reason
