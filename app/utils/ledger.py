"""
Ledger Engine

Derives balances from a snapshot of a group's expenses. Every function in
this module is pure: it never mutates its input, never touches the
database and returns the same result for the same snapshot. Callers
refetch the whole expense list and recompute when anything changes.

Only unpaid shares count. A share held by the expense's payer is the
payer's own portion and is never treated as owed to anyone.

Balances between two members are netted directly: if A owes B and B owes
C, nothing is simplified through B.

Example Usage:
    from app.utils.ledger import snapshot_expenses, total_owed_by, net_balance

    ledger = snapshot_expenses(expenses)
    total_owed_by(ledger, "bob")            # what Bob still owes others
    net_balance(ledger, "alice", "bob")     # > 0 means Bob owes Alice
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from app.utils.splits import round_to_cents

ZERO = Decimal('0')

OWES_YOU = "owes you"
YOU_OWE = "you owe"
SETTLED_UP = "settled up"


@dataclass(frozen=True)
class LedgerShare:
    user_id: str
    amount: Decimal
    is_paid: bool = False
    id: str = ""


@dataclass(frozen=True)
class LedgerExpense:
    paid_by: str
    amount: Decimal
    shares: Tuple[LedgerShare, ...] = ()
    id: str = ""
    currency: str = "INR"


def snapshot_expenses(expenses: Iterable) -> Tuple[LedgerExpense, ...]:
    """
    Freeze ORM rows (or anything shaped like them) into an immutable snapshot.

    Each expense must expose id, paid_by, amount, currency and shares; each
    share must expose id, user_id, amount and is_paid.
    """
    return tuple(
        LedgerExpense(
            id=expense.id,
            paid_by=expense.paid_by,
            amount=Decimal(expense.amount),
            currency=expense.currency,
            shares=tuple(
                LedgerShare(
                    id=share.id,
                    user_id=share.user_id,
                    amount=Decimal(share.amount),
                    is_paid=bool(share.is_paid),
                )
                for share in (expense.shares or ())
            ),
        )
        for expense in expenses
    )


def _unpaid_share_of(expense, user_id: str) -> Decimal:
    for share in expense.shares or ():
        if share.user_id == user_id:
            return ZERO if share.is_paid else Decimal(share.amount)
    return ZERO


def total_owed_by(expenses: Iterable, user_id: str) -> Decimal:
    """
    Total the user still owes on expenses someone else paid.

    Only the user's own unpaid share on each foreign-paid expense counts;
    other members' shares are ignored. An expense with no share for the user
    contributes nothing.
    """
    total = ZERO
    for expense in expenses:
        if expense.paid_by == user_id:
            continue
        total += _unpaid_share_of(expense, user_id)
    return round_to_cents(total)


def total_owed_to(expenses: Iterable, user_id: str) -> Decimal:
    """
    Total other members still owe the user on expenses the user paid.

    Sums every unpaid share held by someone other than the payer.
    """
    total = ZERO
    for expense in expenses:
        if expense.paid_by != user_id:
            continue
        for share in expense.shares or ():
            if share.user_id != user_id and not share.is_paid:
                total += Decimal(share.amount)
    return round_to_cents(total)


def net_balance(expenses: Iterable, user_a: str, user_b: str) -> Decimal:
    """
    Signed pairwise balance between two members.

    (B's unpaid shares on expenses paid by A) - (A's unpaid shares on
    expenses paid by B). Positive means B owes A, negative means A owes B,
    zero means the pair is settled. Antisymmetric in its two users.
    """
    if user_a == user_b:
        return round_to_cents(ZERO)

    balance = ZERO
    for expense in expenses:
        if expense.paid_by == user_a:
            balance += _unpaid_share_of(expense, user_b)
        elif expense.paid_by == user_b:
            balance -= _unpaid_share_of(expense, user_a)
    return round_to_cents(balance)


def balance_label(balance: Decimal) -> str:
    """Side label for a balance seen from the first user of net_balance()"""
    if balance > 0:
        return OWES_YOU
    if balance < 0:
        return YOU_OWE
    return SETTLED_UP


def pairwise_balances(expenses: Sequence, user_id: str,
                      member_ids: Iterable[str]) -> List[Tuple[str, Decimal]]:
    """net_balance() of the user against every other member, in member order"""
    return [
        (member_id, net_balance(expenses, user_id, member_id))
        for member_id in member_ids
        if member_id != user_id
    ]


def ledger_participants(expenses: Iterable) -> List[str]:
    """Every payer and share holder in the snapshot, in order of first appearance"""
    seen: List[str] = []
    for expense in expenses:
        for user_id in [expense.paid_by] + [share.user_id for share in expense.shares or ()]:
            if user_id not in seen:
                seen.append(user_id)
    return seen
