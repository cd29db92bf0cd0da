"""
AmarGolpo Backend — Quote Like Toggling
=========================================

What:  Pure function flipping one user's membership in a quote's like set.
Who:   QuoteService.toggle_like().

Present → removed (unlike). Absent → appended (like). Unliking drops every
occurrence of the user, so a list that somehow holds duplicates is repaired
on the next unlike. Order of the remaining members is not significant.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class LikeToggle:
    likes: List[str]
    liked: bool

    @property
    def count(self) -> int:
        return len(self.likes)


def toggle_like(likes: Optional[Sequence[str]], user_id: str) -> LikeToggle:
    current = list(likes or [])
    if user_id in current:
        return LikeToggle(likes=[uid for uid in current if uid != user_id], liked=False)
    return LikeToggle(likes=current + [user_id], liked=True)
