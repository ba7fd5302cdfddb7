import logging
from typing import List

from ..schemas.challenges import Challenge, ClaimedMilestone

logger = logging.getLogger(__name__)


class MilestoneEvaluator:
    """Claims milestones whose threshold the challenge's progress has reached"""

    def evaluate(self, challenge: Challenge) -> List[ClaimedMilestone]:
        """
        Claim every unclaimed milestone with threshold <= progress, in template order.
        Returns only the milestones claimed by this call.
        """
        if len(challenge.milestones) != len(challenge.milestones_claimed):
            raise AssertionError(
                f"Challenge {challenge.id} has {len(challenge.milestones)} milestones "
                f"but {len(challenge.milestones_claimed)} claim slots"
            )

        newly_claimed = []
        for index, (milestone, claim) in enumerate(zip(challenge.milestones, challenge.milestones_claimed)):
            if claim.claimed or challenge.progress < milestone.progress_threshold:
                continue

            claim.claimed = True
            newly_claimed.append(ClaimedMilestone(threshold_index=index, reward=milestone.reward))
            logger.info(
                "Challenge %s reached %d%% milestone: %s",
                challenge.id, milestone.progress_threshold, milestone.reward,
            )

        return newly_claimed
