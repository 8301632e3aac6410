"""
Exceptions for routing document handling.

Exception Hierarchy:
    RoutingError (base)
    ├── ParseError (document could not be read)
    ├── ValidationError (change set failed structural checks)
    ├── StaleDocumentError (live document drifted since the diff was built)
    └── PostWriteVerificationError (written document failed verification)
"""

from routeopt.core.exceptions import RouteoptError


class RoutingError(RouteoptError):
    """Base exception for routing document errors."""


class ParseError(RoutingError):
    """
    Raised when a routing document cannot be read.

    Attributes:
        path: Path of the document that failed
    """

    def __init__(self, path: str, message: str, **context: object) -> None:
        super().__init__(message, path=path, **context)
        self.path = path

    def __str__(self) -> str:
        return f"[{self.path}] {self.message}"


class ValidationError(RoutingError):
    """
    Raised when a change set fails validation.

    Attributes:
        errors: Every violated check, in the order they were found
    """

    def __init__(self, errors: list[str], message: str = "Change validation failed") -> None:
        super().__init__(f"{message}: {' | '.join(errors)}", violations=len(errors))
        self.errors = list(errors)


class StaleDocumentError(RoutingError):
    """Raised when the live document no longer matches the change set's original content."""

    def __init__(self, path: str) -> None:
        super().__init__(
            "Routing document changed since diff generation. Re-run before applying.",
            path=path,
        )
        self.path = path


class PostWriteVerificationError(RoutingError):
    """Raised when the written document does not verify; the apply is rolled back."""


__all__ = [
    "RoutingError",
    "ParseError",
    "ValidationError",
    "StaleDocumentError",
    "PostWriteVerificationError",
]
