"""Input validation shared by every service."""

from menagerie.config import MAX_IDENTITY_LEN
from menagerie.models.failure import ErrorCode, ValidationError
from menagerie.models.numeric import U32_MAX, U64_MAX


def validate_non_empty_string(value: str, field_name: str) -> None:
    """Reject empty or whitespace-only strings."""
    if not value or not value.strip():
        raise ValidationError(ErrorCode.EMPTY_STRING, f"{field_name} cannot be empty")


def validate_string_length(value: str, max_len: int, field_name: str) -> None:
    """Reject strings longer than `max_len` bytes (UTF-8)."""
    if len(value.encode("utf-8")) > max_len:
        raise ValidationError(
            ErrorCode.STRING_TOO_LONG,
            f"{field_name} exceeds maximum length of {max_len}",
        )


def validate_identity(value: str, field_name: str = "identity") -> None:
    validate_non_empty_string(value, field_name)
    validate_string_length(value, MAX_IDENTITY_LEN, field_name)


def validate_positive_amount(value: int, field_name: str = "amount", limit: int = U64_MAX) -> None:
    """Reject zero, negative and out-of-range amounts."""
    if value <= 0 or value > limit:
        raise ValidationError(
            ErrorCode.INVALID_AMOUNT,
            f"Invalid {field_name} (must be between 1 and {limit})",
        )


def validate_card_type_id(card_type_id: int) -> None:
    """Card type ids are u32 address keys."""
    if not 0 <= card_type_id <= U32_MAX:
        raise ValidationError(ErrorCode.INVALID_AMOUNT, f"Invalid card type id: {card_type_id}")
