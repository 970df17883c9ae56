"""
boardgame.engine.budget — Donation Split Calculation
=====================================================

Pure calculation: no DB I/O.  Given the donations made to a session, the
prize-pool ratio, and the number of participants, produce the prize pool
and the operating budget shares.

    total ──► prize_pool = total × ratio
          └─► operating  = total − prize_pool
                  ├─► per_role   = operating ÷ roles in the catalog
                  └─► per_player = operating ÷ participants
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from boardgame.catalog import ROLE_IDS

DEFAULT_PRIZE_POOL_RATIO = 0.5


def _check(total: float, ratio: float) -> None:
    if not math.isfinite(total):
        raise ValueError("Total donations must be a finite number")
    if total < 0:
        raise ValueError("Total donations cannot be negative")
    if not 0.0 <= ratio <= 1.0:
        raise ValueError("Prize pool ratio must be between 0 and 1")


def prize_pool(total: float, ratio: float = DEFAULT_PRIZE_POOL_RATIO) -> float:
    _check(total, ratio)
    return round(total * ratio, 2)


def operating_budget(total: float, ratio: float = DEFAULT_PRIZE_POOL_RATIO) -> float:
    # Derived from the rounded pool so the two always add back up to total.
    return round(total - prize_pool(total, ratio), 2)


def budget_per_role(
    total: float,
    role_count: int = len(ROLE_IDS),
    ratio: float = DEFAULT_PRIZE_POOL_RATIO,
) -> float:
    if role_count <= 0:
        _check(total, ratio)
        return 0.0
    return round(operating_budget(total, ratio) / role_count, 2)


def budget_per_player(
    total: float,
    participant_count: int,
    ratio: float = DEFAULT_PRIZE_POOL_RATIO,
) -> float:
    if participant_count <= 0:
        _check(total, ratio)
        return 0.0
    return round(operating_budget(total, ratio) / participant_count, 2)


@dataclass(frozen=True, slots=True)
class BudgetSplit:
    """Result of splitting a session's donations."""

    total: float
    prize_pool: float
    operating: float
    per_role: float
    per_player: float

    def to_dict(self) -> dict:
        return {
            "total_donations": self.total,
            "prize_pool": self.prize_pool,
            "operating_budget": self.operating,
            "budget_per_role": self.per_role,
            "budget_per_player": self.per_player,
        }


def split_donations(
    amounts: Iterable[float],
    participant_count: int,
    ratio: float = DEFAULT_PRIZE_POOL_RATIO,
    role_count: int = len(ROLE_IDS),
) -> BudgetSplit:
    """Sum *amounts* and split the total.

    Raises
    ------
    ValueError
        If any amount is negative or *ratio* lies outside ``[0, 1]``.
    """
    values = list(amounts)
    if any(a < 0 for a in values):
        raise ValueError("Donation amounts cannot be negative")
    total = round(sum(values), 2)

    return BudgetSplit(
        total=total,
        prize_pool=prize_pool(total, ratio),
        operating=operating_budget(total, ratio),
        per_role=budget_per_role(total, role_count, ratio),
        per_player=budget_per_player(total, participant_count, ratio),
    )


def can_spend(allocated: float, spent: float, amount: float) -> bool:
    """True when *amount* fits in what is left of a role's budget."""
    if amount < 0:
        return False
    return round(spent + amount, 2) <= round(allocated, 2)
