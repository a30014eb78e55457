"""Exceptions raised by the postman engine."""


class PostmanError(Exception):
    """Base exception for graph and route operations."""


class GraphDisconnectedError(PostmanError):
    """Raised when an algorithm needs a connected graph and gets more than one component."""


class NotEulerianError(PostmanError):
    """Raised when an Eulerian trail is requested on a graph with more than two odd nodes."""


class MatchingLimitExceededError(PostmanError):
    """Raised when exhaustive matching is asked to pair more odd nodes than allowed."""


class GraphInvariantError(PostmanError):
    """Raised when the graph model is internally inconsistent."""


class DotFormatError(PostmanError):
    """Raised when a DOT description cannot be read."""
