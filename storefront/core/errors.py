from typing import Any, Iterable, Optional


class AppError(Exception):
    """Base for errors that map onto an HTTP status and the response envelope."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, errors: Any = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = 400
    default_message = "Invalid input"


class OutOfStock(InvalidInput):
    def __init__(self, names: Iterable[str]):
        self.names = list(names)
        super().__init__(
            f"The following products are out of stock: {', '.join(self.names)}",
            errors={"products": self.names},
        )


class Unauthorized(AppError):
    status_code = 401
    default_message = "Token not provided"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class InvalidToken(Forbidden):
    default_message = "Invalid or expired token"


class InvalidCredentials(Forbidden):
    default_message = "Invalid credentials"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Duplicate value"
