import logging
import random
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from ..schemas.challenges import (
    Challenge, ChallengeNotice, ChallengeStats, ChallengeStatus,
    ChallengeTemplate, ClaimedMilestone, MilestoneClaim, NoticeType, SavingsEntry,
)
from .catalog import ChallengeCatalog, default_catalog
from .config import settings
from .exceptions import InvalidAmount, NotFound
from .helpers.date_helpers import DateHelper
from .helpers.formatting_helpers import FormattingHelper
from .helpers.math_helpers import FinancialMathHelper
from .helpers.validation_helpers import ValidationHelper
from .milestones import MilestoneEvaluator
from .persistence import ChallengeStore
from .streak import StreakCalculator

logger = logging.getLogger(__name__)


class ChallengeLifecycle:
    """Owns one user's active and completed savings challenges"""

    def __init__(
        self,
        user_id: str,
        store: ChallengeStore,
        catalog: Optional[ChallengeCatalog] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        notifier: Optional[Callable[[ChallengeNotice], None]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.user_id = user_id
        self.store = store
        self.catalog = catalog or default_catalog
        self.clock = clock or DateHelper.utc_now
        self.rng = rng
        self.notifier = notifier
        # Calendar days for streaks are taken in the user's zone, UTC when unset
        self.tz = tz
        self.milestones = MilestoneEvaluator()

        self._active: List[Challenge] = []
        self._completed: List[Challenge] = []
        self._suggested: List[ChallengeTemplate] = []

    def load(self) -> "ChallengeLifecycle":
        """Replace in-memory collections with the persisted copy, if any"""
        collections = self.store.load(self.user_id)
        if collections is not None:
            self._active = collections.active
            self._completed = collections.completed
        logger.debug(
            "Loaded %d active / %d completed challenges for user %s",
            len(self._active), len(self._completed), self.user_id,
        )
        return self

    # ==================== CHALLENGE MANAGEMENT ====================

    def start_challenge(self, template_id: str) -> Challenge:
        """Create an active challenge from a catalog template"""
        template = self.catalog.get_template(template_id)

        existing = self._find_active(template_id)
        if existing is not None:
            logger.warning("Challenge %s already active for user %s", template_id, self.user_id)
            return existing

        challenge = self._create_challenge(template)
        self._active.append(challenge)
        self._persist()

        logger.info("User %s started challenge %s", self.user_id, challenge.id)
        return challenge

    def _create_challenge(self, template: ChallengeTemplate) -> Challenge:
        now = self.clock()

        # model_dump gives a fresh copy, later template edits never leak in
        fields = template.model_dump()
        return Challenge(
            **fields,
            start_date=now,
            end_date=DateHelper.add_days(now, template.duration_days),
            current_amount=Decimal("0.00"),
            progress=0,
            entries=[],
            last_updated=now,
            status=ChallengeStatus.ACTIVE,
            milestones_claimed=[
                MilestoneClaim(progress_threshold=m.progress_threshold, reward=m.reward)
                for m in template.milestones
            ],
        )

    def record_savings(self, challenge_id: str, amount, notes: str = "") -> Challenge:
        """Add a savings entry; completes the challenge once the target is reached"""
        challenge = self._find_active(challenge_id)
        if challenge is None:
            raise NotFound("Active challenge", challenge_id)

        if not ValidationHelper.is_valid_amount(amount):
            raise InvalidAmount(amount, challenge_id)

        # Money is kept as Decimal cents, sub-cent amounts round to nothing
        amount = FinancialMathHelper.to_money(amount)
        if amount <= 0:
            raise InvalidAmount(amount, challenge_id)

        now = self.clock()
        challenge.entries.append(SavingsEntry(
            date=now,
            amount=amount,
            notes=ValidationHelper.sanitize_input(notes),
        ))

        challenge.current_amount += amount
        challenge.progress = FinancialMathHelper.calculate_progress(
            challenge.current_amount, challenge.target_amount
        )
        challenge.last_updated = now

        logger.info(
            "User %s saved %s toward %s (%s)",
            self.user_id,
            FormattingHelper.format_currency(amount),
            challenge.id,
            FormattingHelper.format_percentage(challenge.progress),
        )

        # Milestones first so the 100% reward is claimed even when completing now
        for claimed in self.milestones.evaluate(challenge):
            self._notify_milestone(claimed)

        if challenge.current_amount >= challenge.target_amount:
            return self.complete_challenge(challenge_id)

        self._persist()
        return challenge

    def complete_challenge(self, challenge_id: str) -> Challenge:
        """Move an active challenge to the completed collection"""
        index = self._active_index(challenge_id)

        challenge = self._active.pop(index)
        challenge.status = ChallengeStatus.COMPLETED
        challenge.completed_date = self.clock()
        self._completed.append(challenge)

        self._persist()

        logger.info("User %s completed challenge %s", self.user_id, challenge_id)
        self.send_notice(
            "Challenge Completed!",
            f"Congratulations! You've completed the {challenge.title} challenge.",
            duration_ms=7000,
        )
        return challenge

    def cancel_challenge(self, challenge_id: str) -> Challenge:
        """Discard an active challenge; it is not kept anywhere"""
        index = self._active_index(challenge_id)

        challenge = self._active.pop(index)
        challenge.status = ChallengeStatus.CANCELLED

        self._persist()

        logger.info("User %s cancelled challenge %s", self.user_id, challenge_id)
        self.send_notice(
            "Challenge Cancelled",
            "The challenge has been cancelled.",
            notice_type=NoticeType.INFO,
            duration_ms=3000,
        )
        return challenge

    # ==================== QUERIES ====================

    def get_active_challenges(self) -> Tuple[Challenge, ...]:
        return tuple(self._active)

    def get_completed_challenges(self) -> Tuple[Challenge, ...]:
        return tuple(self._completed)

    def get_challenge_by_id(self, challenge_id: str) -> Challenge:
        for challenge in self._active + self._completed:
            if challenge.id == challenge_id:
                return challenge
        raise NotFound("Challenge", challenge_id)

    def get_challenge_stats(self) -> ChallengeStats:
        # Streak only looks at active challenges, completed entries drop out
        return ChallengeStats(
            total_active=len(self._active),
            total_completed=len(self._completed),
            total_saved=sum((c.current_amount for c in self._active + self._completed), Decimal("0.00")),
            streak_days=StreakCalculator.current_streak(self._active, tz=self.tz),
        )

    def get_suggested_challenges(self) -> List[ChallengeTemplate]:
        if not self._suggested:
            self.refresh_suggestions()
        return list(self._suggested)

    def refresh_suggestions(self) -> List[ChallengeTemplate]:
        self._suggested = self.catalog.sample_suggestions(settings.SUGGESTION_COUNT, rng=self.rng)
        return list(self._suggested)

    # ==================== NOTICES ====================

    def send_notice(
        self,
        title: str,
        message: str,
        notice_type: NoticeType = NoticeType.SUCCESS,
        duration_ms: int = 5000,
    ) -> ChallengeNotice:
        notice = ChallengeNotice(title=title, message=message, type=notice_type, duration_ms=duration_ms)
        if self.notifier is not None:
            self.notifier(notice)
        else:
            logger.info("%s %s", notice.title, notice.message)
        return notice

    def _notify_milestone(self, claimed: ClaimedMilestone) -> None:
        self.send_notice("Milestone Achieved!", f"You've earned: {claimed.reward}")

    # ==================== HELPER METHODS ====================

    def _find_active(self, challenge_id: str) -> Optional[Challenge]:
        return next((c for c in self._active if c.id == challenge_id), None)

    def _active_index(self, challenge_id: str) -> int:
        for index, challenge in enumerate(self._active):
            if challenge.id == challenge_id:
                return index
        raise NotFound("Active challenge", challenge_id)

    def _persist(self) -> None:
        try:
            self.store.save(self.user_id, self._active, self._completed)
        except Exception:
            # In-memory state is kept as is, the caller decides what to do
            logger.exception("Failed to save challenges for user %s", self.user_id)
            raise
