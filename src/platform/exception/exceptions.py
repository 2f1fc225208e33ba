from enum import StrEnum


class ConflictReason(StrEnum):
    SOLD_OUT = 'SoldOut'
    ALREADY_LISTED = 'AlreadyListed'
    ALREADY_HOLDING = 'AlreadyHolding'
    WRONG_STATE = 'WrongState'
    LISTING_STALE = 'ListingStale'
    HOLD_EXPIRED = 'HoldExpired'
    NOT_REDEEMABLE = 'NotRedeemable'


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    code: str = 'Error'

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(CustomBaseError):
    code = 'ValidationError'

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class NotFoundError(CustomBaseError):
    code = 'NotFound'

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str, reason: ConflictReason = ConflictReason.WRONG_STATE) -> None:
        super().__init__(message, 409)
        self.reason = reason
        self.code = reason.value


class AuthenticationError(CustomBaseError):
    code = 'AuthenticationError'

    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class AuthorizationError(CustomBaseError):
    code = 'AuthorizationError'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class SignatureInvalidError(CustomBaseError):
    code = 'SignatureInvalid'

    def __init__(self, message: str = 'Invalid payment signature') -> None:
        super().__init__(message, 400)


class GatewayError(CustomBaseError):
    code = 'GatewayError'

    def __init__(self, message: str) -> None:
        super().__init__(message, 502)


class InternalConsistencyError(CustomBaseError):
    """An atomic unit could not be applied and was rolled back. Safe to retry."""

    code = 'InternalConsistencyError'

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)
