"""
AmarGolpo Backend — Book Rating Aggregation
=============================================

What:  Pure functions that fold one user's rating into a book's ratings list
       and recompute the mean.
Who:   BookService.rate_book(); no I/O happens here.

Algorithm:
    1. Absent ratings → empty list.
    2. Entry with the same userId exists → overwrite its rating in place.
    3. Otherwise append {userId, rating}.
    4. mean = sum(ratings) / count, with the empty-list case decided by the
       empty-rating policy ("unset" → None, "zero" → 0.0).
    5. Stored form of the mean: one decimal place, half-up ("2.25" → "2.3").

Only the latest rating per user counts: re-rating overwrites, it never
accumulates.
"""

import math
from dataclasses import dataclass
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Context, Decimal, localcontext
from typing import List, Optional, Sequence

from amargolpo.config import EmptyRatingPolicy
from amargolpo.models.book import RatingEntry


@dataclass(frozen=True)
class RatingOutcome:
    ratings: List[RatingEntry]
    average: Optional[float]
    formatted: Optional[str]


# Wide enough to hold any finite float exactly, so quantizing never overflows.
_RATING_CONTEXT = Context(prec=800, Emax=MAX_EMAX, Emin=MIN_EMIN, rounding=ROUND_HALF_UP)


def average_rating(
    ratings: Sequence[RatingEntry],
    empty_policy: EmptyRatingPolicy = "unset",
) -> Optional[float]:
    """Arithmetic mean of the rating values; see module docstring for empty lists."""
    if not ratings:
        return 0.0 if empty_policy == "zero" else None
    with localcontext(_RATING_CONTEXT):
        total = sum((Decimal(entry.rating) for entry in ratings), Decimal(0))
        return float(total / len(ratings))


def format_rating(average: Optional[float]) -> Optional[str]:
    if average is None:
        return None
    if not math.isfinite(average):
        raise ValueError(f"Cannot format non-finite rating {average!r}")
    with localcontext(_RATING_CONTEXT):
        return str(Decimal(str(average)).quantize(Decimal("0.1")))


def apply_rating(
    ratings: Optional[Sequence[RatingEntry]],
    user_id: str,
    rating: float,
    empty_policy: EmptyRatingPolicy = "unset",
) -> RatingOutcome:
    """
    Record `rating` for `user_id` and recompute the aggregate.

    The input sequence is not mutated; the outcome holds a new list in which
    an existing entry for the user keeps its position.
    """
    updated = [entry.model_copy() for entry in (ratings or [])]

    for entry in updated:
        if entry.user_id == user_id:
            entry.rating = float(rating)
            break
    else:
        updated.append(RatingEntry(user_id=user_id, rating=float(rating)))

    average = average_rating(updated, empty_policy)
    return RatingOutcome(ratings=updated, average=average, formatted=format_rating(average))
