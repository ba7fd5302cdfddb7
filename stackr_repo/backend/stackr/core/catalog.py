import logging
import random
from typing import Iterable, List, Optional, Tuple

from ..schemas.challenges import ChallengeTemplate
from .exceptions import NotFound

logger = logging.getLogger(__name__)


def _milestones(*pairs) -> List[dict]:
    return [{"progress_threshold": threshold, "reward": reward} for threshold, reward in pairs]


CHALLENGE_TEMPLATES = [
    {
        "id": "coffee_break",
        "title": "Coffee Break Challenge",
        "description": "Skip your daily coffee shop visit and save that money instead",
        "duration_days": 30,
        "target_amount": 150,
        "difficulty": "easy",
        "category": "daily_habits",
        "savings_frequency": "daily",
        "tip_amount": 5,
        "image": "☕",
        "rewards": ["Coffee Break Badge", "10% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "One week streak badge"),
            (50, "Two week streak badge"),
            (75, "Coffee Connoisseur badge"),
            (100, "Challenge Complete badge + 50 points"),
        ),
    },
    {
        "id": "lunch_master",
        "title": "Lunch Master Challenge",
        "description": "Bring lunch from home instead of eating out for a month",
        "duration_days": 30,
        "target_amount": 300,
        "difficulty": "medium",
        "category": "daily_habits",
        "savings_frequency": "daily",
        "tip_amount": 10,
        "image": "🍱",
        "rewards": ["Meal Prep Master Badge", "15% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "One week streak badge"),
            (50, "Two week streak badge"),
            (75, "Home Chef badge"),
            (100, "Challenge Complete badge + 100 points"),
        ),
    },
    {
        "id": "no_spend",
        "title": "No-Spend Weekend Challenge",
        "description": "Go an entire weekend without spending any money",
        "duration_days": 60,  # across multiple weekends
        "target_amount": 500,
        "difficulty": "hard",
        "category": "lifestyle",
        "savings_frequency": "weekly",
        "tip_amount": 125,
        "image": "💰",
        "rewards": ["Frugal Master Badge", "20% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "One month badge"),
            (50, "Halfway Hero badge"),
            (75, "Almost There badge"),
            (100, "Challenge Complete badge + 200 points"),
        ),
    },
    {
        "id": "52_week",
        "title": "52-Week Savings Challenge",
        "description": "Save an increasing amount each week for a year",
        "duration_days": 365,
        "target_amount": 1378,  # sum of 1..52
        "difficulty": "expert",
        "category": "long_term",
        "savings_frequency": "weekly",
        "tip_amount": "26.50",
        "image": "📅",
        "rewards": ["Savings Superstar Badge", "30% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "3-month milestone badge"),
            (50, "6-month milestone badge"),
            (75, "9-month milestone badge"),
            (100, "Challenge Complete badge + 500 points"),
        ),
    },
    {
        "id": "1000_steps",
        "title": "$1000 in 100 Days Challenge",
        "description": "Save $10 every day for 100 days to reach $1000",
        "duration_days": 100,
        "target_amount": 1000,
        "difficulty": "hard",
        "category": "goal_based",
        "savings_frequency": "daily",
        "tip_amount": 10,
        "image": "🔢",
        "rewards": ["Consistent Saver Badge", "25% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "$250 milestone badge"),
            (50, "$500 milestone badge"),
            (75, "$750 milestone badge"),
            (100, "Challenge Complete badge + 350 points"),
        ),
    },
    {
        "id": "spare_change",
        "title": "Spare Change Challenge",
        "description": "Save all your spare change and small bills for a month",
        "duration_days": 30,
        "target_amount": 100,
        "difficulty": "easy",
        "category": "beginner",
        "savings_frequency": "daily",
        "tip_amount": "3.33",
        "image": "🪙",
        "rewards": ["Coin Collector Badge", "10% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "Week 1 complete badge"),
            (50, "Halfway Hero badge"),
            (75, "Almost There badge"),
            (100, "Challenge Complete badge + 75 points"),
        ),
    },
    {
        "id": "subscription_detox",
        "title": "Subscription Detox Challenge",
        "description": "Cancel unused subscriptions and save that money instead",
        "duration_days": 90,
        "target_amount": 200,
        "difficulty": "medium",
        "category": "smart_spending",
        "savings_frequency": "monthly",
        "tip_amount": "66.67",
        "image": "📺",
        "rewards": ["Subscription Slasher Badge", "15% progress toward Financial Freedom achievement"],
        "milestones": _milestones(
            (25, "1-month milestone badge"),
            (50, "2-month milestone badge"),
            (75, "Almost There badge"),
            (100, "Challenge Complete badge + 150 points"),
        ),
    },
]


class ChallengeCatalog:
    """Immutable, ordered collection of challenge templates"""

    def __init__(self, templates: Optional[Iterable] = None, rng: Optional[random.Random] = None):
        raw = CHALLENGE_TEMPLATES if templates is None else templates

        # Dicts are validated here so authoring mistakes fail at load time
        self._templates: Tuple[ChallengeTemplate, ...] = tuple(
            t if isinstance(t, ChallengeTemplate) else ChallengeTemplate.model_validate(t)
            for t in raw
        )
        self._by_id = {}
        for template in self._templates:
            if template.id in self._by_id:
                raise ValueError(f"Duplicate challenge template id: {template.id}")
            self._by_id[template.id] = template

        self.rng = rng or random.Random()
        logger.debug("Loaded %d challenge templates", len(self._templates))

    def list_templates(self) -> Tuple[ChallengeTemplate, ...]:
        """All templates in catalog order"""
        return self._templates

    def get_template(self, template_id: str) -> ChallengeTemplate:
        template = self._by_id.get(template_id)
        if template is None:
            raise NotFound("Challenge template", template_id)
        return template

    def sample_suggestions(self, n: int, rng: Optional[random.Random] = None) -> List[ChallengeTemplate]:
        """Pick n distinct templates: shuffle a copy, take the first n"""
        if n <= 0:
            return []

        shuffled = list(self._templates)
        (rng or self.rng).shuffle(shuffled)
        return shuffled[:n]


default_catalog = ChallengeCatalog()
