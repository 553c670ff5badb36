"""
Split policy applied before an expense and its shares are persisted.

Two methods are supported:

- Equal split: the total is divided by the number of members and each
  share is rounded to cents independently. The rounding remainder is not
  redistributed, so the shares may add up to a few cents more or less than
  the total (at most half a cent per member).
- Custom split: the caller supplies one amount per member. Every amount
  must be a finite, non-negative number of whole cents and the amounts
  must add up to the total within one cent.

Example Usage:
    from app.utils.splits import equal_split, validate_custom_split

    equal_split(Decimal("100"), ["alice", "bob", "carol"])
    # {"alice": Decimal("33.33"), "bob": Decimal("33.33"), "carol": Decimal("33.33")}

    validate_custom_split(Decimal("100"), {"alice": "70", "bob": 30})
    # {"alice": Decimal("70.00"), "bob": Decimal("30.00")}
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Sequence

CENT = Decimal('0.01')
SPLIT_TOLERANCE = Decimal('0.01')


class SplitValidationError(ValueError):
    """Raised when a split cannot be turned into a valid set of shares"""


def round_to_cents(value: Decimal) -> Decimal:
    """
    Round a Decimal to cents, half away from zero.

    Example:
        >>> round_to_cents(Decimal("33.335"))
        Decimal('33.34')
    """
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: Any) -> Decimal:
    """
    Parse a user-supplied amount into a Decimal.

    Raises:
        SplitValidationError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise SplitValidationError(f"Invalid share amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise SplitValidationError(f"Invalid share amount: {value!r}")
    if not amount.is_finite():
        raise SplitValidationError(f"Invalid share amount: {value!r}")
    return amount


def equal_split(total: Decimal, member_ids: Sequence[str]) -> Dict[str, Decimal]:
    """
    Divide a total evenly across members.

    Each member's share is round(total / N, 2), computed independently.

    Raises:
        SplitValidationError: If there are no members or the total is not positive
    """
    if not member_ids:
        raise SplitValidationError("Cannot split an expense across zero members")
    total = parse_amount(total)
    if total <= 0:
        raise SplitValidationError("Expense amount must be greater than zero")

    share = round_to_cents(total / Decimal(len(member_ids)))
    return {member_id: share for member_id in member_ids}


def validate_custom_split(total: Decimal, shares: Mapping[str, Any],
                          tolerance: Decimal = SPLIT_TOLERANCE) -> Dict[str, Decimal]:
    """
    Validate caller-supplied share amounts against the expense total.

    Args:
        total: The expense amount
        shares: Mapping of user_id -> amount (number or numeric string)
        tolerance: Maximum allowed |sum(shares) - total| (default: 0.01)

    Returns:
        Mapping of user_id -> share amount in cents

    Raises:
        SplitValidationError: If a share is non-numeric, negative or finer than
            a cent, or the shares do not add up to the total within tolerance
    """
    if not shares:
        raise SplitValidationError("At least one share is required for a custom split")
    total = parse_amount(total)

    parsed: Dict[str, Decimal] = {}
    for user_id, raw_amount in shares.items():
        amount = parse_amount(raw_amount)
        if amount < 0:
            raise SplitValidationError(f"Share amount for {user_id} cannot be negative")
        if amount != round_to_cents(amount):
            raise SplitValidationError(f"Share amount for {user_id} cannot have more than 2 decimal places")
        parsed[user_id] = amount

    share_sum = sum(parsed.values(), Decimal('0'))
    if abs(share_sum - total) > tolerance:
        raise SplitValidationError(
            f"The sum of all shares ({share_sum}) must equal the total expense amount ({total})"
        )

    return {user_id: amount.quantize(CENT) for user_id, amount in parsed.items()}
