"""Domain exceptions raised by the service layer.

Each class carries the HTTP status the API boundary answers with; the
FastAPI exception handler in ``moneymanager.main`` does the mapping.
"""


class MoneyManagerError(Exception):
    """Base class for business rule failures."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ConflictError(MoneyManagerError):
    """Raised when a unique value (email, category name) is already taken."""

    status_code = 409
    default_detail = "Resource already exists"


class NotFoundError(MoneyManagerError):
    """Raised when a profile, category, transaction or activation token cannot be found."""

    status_code = 404
    default_detail = "Resource not found"


class ForbiddenError(MoneyManagerError):
    """Raised when the caller does not own the resource it tries to change."""

    status_code = 403
    default_detail = "Not allowed to modify this resource"


class AuthenticationError(MoneyManagerError):
    """Raised for bad credentials or an invalid, expired or mismatched token."""

    status_code = 401
    default_detail = "Could not validate credentials"


class InactiveAccountError(MoneyManagerError):
    status_code = 403
    default_detail = "Account not active. Please activate your account first"


class ValidationError(MoneyManagerError):
    """Raised when request values pass schema validation but violate a business rule."""

    status_code = 400
    default_detail = "Invalid request"


class DeliveryError(MoneyManagerError):
    """Raised when an outbound mail the caller explicitly asked for cannot be sent."""

    status_code = 500
    default_detail = "Internal server error"
