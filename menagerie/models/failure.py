"""
Game Errors: Tagged Failure Classification.

Every rejected operation raises a GameError subclass. The error carries:
- a category (validation, authorization, state, arithmetic, external)
- a stable, tagged error code
- a human-readable message

INVARIANT: A GameError aborts the enclosing transaction. There is no local
recovery or retry; the caller decides whether to resubmit.

The HTTP layer renders every GameError through `ErrorResponse`, so clients
always receive `{"error": {"code", "category", "message"}}`.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    """Top-level classification of a failure."""

    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    STATE = "state"
    ARITHMETIC = "arithmetic"
    EXTERNAL = "external"


class ErrorCode(str, Enum):
    """Tagged error codes."""

    # Bad input
    EMPTY_STRING = "empty_string"
    STRING_TOO_LONG = "string_too_long"
    INVALID_RARITY = "invalid_rarity"
    INVALID_STAT_RANGE = "invalid_stat_range"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_PRICE = "invalid_price"
    INVALID_DECK_INDEX = "invalid_deck_index"
    TOO_MANY_CARDS_IN_DECK = "too_many_cards_in_deck"
    POOL_FULL = "pool_full"
    INVALID_MATCH = "invalid_match"

    # Caller is not allowed
    UNAUTHORIZED = "unauthorized"

    # Wrong lifecycle state
    DUPLICATE_RECORD = "duplicate_record"
    NOT_FOUND = "not_found"
    STARTER_ALREADY_CLAIMED = "starter_already_claimed"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_TICKETS = "insufficient_tickets"
    EMPTY_RARITY_POOL = "empty_rarity_pool"
    LISTING_NOT_ACTIVE = "listing_not_active"
    CANNOT_BUY_OWN_CARD = "cannot_buy_own_card"
    CARD_CREATORS_FULL = "card_creators_full"
    ROLL_MISMATCH = "roll_mismatch"

    # Checked arithmetic
    NUMERICAL_OVERFLOW = "numerical_overflow"

    # Collaborators
    EXTERNAL_SERVICE_FAILED = "external_service_failed"


class ErrorDetail(BaseModel):
    """Serialized form of a GameError."""

    code: ErrorCode = Field(..., description="Tagged error code")
    category: ErrorCategory = Field(..., description="Failure category")
    message: str = Field(..., description="Human-readable explanation")


class ErrorResponse(BaseModel):
    """Envelope returned by the API for every rejected operation."""

    error: ErrorDetail


class GameError(Exception):
    """
    Base class for every failure the core can raise.

    Subclasses fix the category and default HTTP status.
    """

    category: ErrorCategory = ErrorCategory.STATE
    status_code: int = 400

    def __init__(self, code: ErrorCode, message: str, status_code: int | None = None):
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to an ErrorResponse."""
        return ErrorResponse(
            error=ErrorDetail(code=self.code, category=self.category, message=self.message)
        )

    def to_dict(self) -> dict[str, Any]:
        return self.to_response().model_dump(mode="json")


class ValidationError(GameError):
    """Bad input: empty or oversized strings, zero amounts, bad discriminants."""

    category = ErrorCategory.VALIDATION
    status_code = 400


class AuthorizationError(GameError):
    """Caller is not the authority, creator, owner or seller."""

    category = ErrorCategory.AUTHORIZATION
    status_code = 403

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(ErrorCode.UNAUTHORIZED, message)


class StateError(GameError):
    """Operation is not valid in the record's current lifecycle state."""

    category = ErrorCategory.STATE
    status_code = 409


class NotFoundError(StateError):
    """A referenced record does not exist."""

    def __init__(self, record: str, key: object):
        self.record = record
        self.key = key
        super().__init__(ErrorCode.NOT_FOUND, f"{record} not found: {key}", status_code=404)


class DuplicateRecordError(StateError):
    """A record already exists at the derived address."""

    def __init__(self, record: str, key: object):
        self.record = record
        self.key = key
        super().__init__(ErrorCode.DUPLICATE_RECORD, f"{record} already exists: {key}")


class NumericalOverflowError(GameError):
    """Checked arithmetic left the representable range."""

    category = ErrorCategory.ARITHMETIC
    status_code = 422

    def __init__(self, operation: str, left: int, right: int):
        self.operation = operation
        self.left = left
        self.right = right
        super().__init__(
            ErrorCode.NUMERICAL_OVERFLOW,
            f"Numerical overflow: {left} {operation} {right}",
        )


class ExternalServiceError(GameError):
    """A collaborator (token transfer, mint) rejected or failed the call."""

    category = ErrorCategory.EXTERNAL
    status_code = 502

    def __init__(self, service: str, detail: str):
        self.service = service
        self.detail = detail
        super().__init__(
            ErrorCode.EXTERNAL_SERVICE_FAILED,
            f"{service} failed: {detail}",
        )
