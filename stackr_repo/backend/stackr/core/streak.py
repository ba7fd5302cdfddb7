from datetime import tzinfo
from typing import Iterable, Optional

from ..schemas.challenges import Challenge
from .helpers.date_helpers import DateHelper


class StreakCalculator:
    """Consecutive calendar days with at least one savings entry"""

    @staticmethod
    def current_streak(active_challenges: Iterable[Challenge], tz: Optional[tzinfo] = None) -> int:
        """
        Count back from the most recent entry day while each earlier entry day
        is exactly one day before the last counted one. Repeated days count once.
        Days are calendar days in tz (the stored zone, UTC, when None).
        """
        entries = [entry for challenge in active_challenges for entry in challenge.entries]
        if not entries:
            return 0

        entries.sort(key=lambda e: e.date, reverse=True)

        streak = 1
        anchor = DateHelper.day_of(entries[0].date, tz)

        for entry in entries[1:]:
            entry_day = DateHelper.day_of(entry.date, tz)
            gap = DateHelper.days_between(anchor, entry_day)

            if gap == 1:
                streak += 1
                anchor = entry_day
            elif gap > 1:
                break

        return streak
