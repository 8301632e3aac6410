"""
Base exceptions for routeopt.

Every error raised by routeopt derives from RouteoptError, which carries a
human-readable message plus a keyword context dictionary. The CLI renders
the context when reporting the failure.

Exception Hierarchy:
    RouteoptError (base)
    ├── RoutingError (routing document, change sets, apply)
    ├── ApprovalError (approval batch store)
    ├── PricingError (pricing collaborator)
    ├── ClassificationError (task classifier)
    └── NotificationError (chat delivery)

Example:
    >>> try:
    ...     raise RouteoptError("Something failed", path="/tmp/SOUL.md")
    ... except RouteoptError as e:
    ...     print(e.context["path"])
    /tmp/SOUL.md
"""


class RouteoptError(Exception):
    """
    Base exception for all routeopt errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class ClassificationError(RouteoptError):
    """Raised when the external task classifier cannot produce a result."""


class NotificationError(RouteoptError):
    """Raised when a chat message cannot be delivered."""


__all__ = [
    "RouteoptError",
    "ClassificationError",
    "NotificationError",
]
