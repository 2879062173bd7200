"""Badge rule evaluation and achievement recording"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from donor_badges.metrics import compute_donation_metrics
from donor_badges.models.badges import (
    AchievedBadge, BadgeRule, Donation, DonationMetrics, RuleType
)

logger = logging.getLogger(__name__)

class BadgeStore(Protocol):
    """Persistence collaborator used by the evaluator"""

    def load_badge_rules(self) -> List[BadgeRule]:
        ...

    def load_donor_donations(self, donor_id: str) -> List[Donation]:
        ...

    def persist_achievements(self, donor_id: str, achieved: Sequence[AchievedBadge]) -> None:
        """Insert achievements, leaving pairs the donor already holds untouched"""
        ...

# RuleType.UNKNOWN has no getter, so such rules never pass
METRIC_GETTERS: Dict[RuleType, Callable[[DonationMetrics], object]] = {
    RuleType.DONATION_COUNT: lambda m: m.donation_count,
    RuleType.DISTINCT_SCHOOLS: lambda m: m.distinct_schools,
    RuleType.STREAK_DAYS: lambda m: m.best_streak_days,
    RuleType.TOTAL_AMOUNT: lambda m: m.total_amount,
}

def rule_passes(rule: BadgeRule, metrics: DonationMetrics) -> bool:
    """Check a single rule. Inert rules (bad threshold or unknown type) never pass."""
    threshold = rule.threshold
    if threshold is None:
        logger.debug(f"Skipping badge {rule.id}: invalid threshold {rule.rule_config!r}")
        return False

    getter = METRIC_GETTERS.get(rule.rule_type)
    if getter is None:
        logger.debug(f"Skipping badge {rule.id}: unsupported rule type")
        return False

    return getter(metrics) >= threshold

def decide_achievements(rules: Sequence[BadgeRule], metrics: DonationMetrics,
                        now: Optional[datetime] = None) -> List[AchievedBadge]:
    """
    Evaluate every rule against the metrics.

    Args:
        rules: Badge catalog
        metrics: Metrics of one donor
        now: Evaluation time stamped on every result, defaults to current UTC time

    Returns:
        Badges whose rule passed, in catalog order
    """
    achieved_at = now or datetime.now(timezone.utc)
    return [
        AchievedBadge(badge_id=rule.id, achieved_at=achieved_at)
        for rule in rules
        if rule_passes(rule, metrics)
    ]

class BadgeEvaluator:
    """Recomputes and records the badges a donor has earned"""

    def __init__(self, store: BadgeStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.last_metrics: Optional[DonationMetrics] = None

    def recompute(self, donor_id: str) -> List[AchievedBadge]:
        """
        Evaluate all badge rules for a donor and persist the passing ones.

        Returns every badge that passed, including badges the donor already
        held from earlier runs.

        Raises:
            BadgeLoadError: If rules or donations cannot be loaded
            AchievementPersistError: If achievements cannot be written
        """
        self.last_metrics = None
        rules = self.store.load_badge_rules()
        if not rules:
            logger.info("Badge catalog is empty, nothing to evaluate")
            return []

        donations = self.store.load_donor_donations(donor_id)
        metrics = compute_donation_metrics(donations)
        self.last_metrics = metrics
        logger.info(f"Donor {donor_id} metrics: {metrics}")

        achieved = decide_achievements(rules, metrics, now=self.clock())
        if not achieved:
            return []

        self.store.persist_achievements(donor_id, achieved)
        logger.info(f"Donor {donor_id} qualifies for {len(achieved)} badge(s): "
                    f"{[a.badge_id for a in achieved]}")
        return achieved

def recompute_and_persist_donor_badges(store: BadgeStore, donor_id: str) -> List[AchievedBadge]:
    """Evaluate and record badges for one donor using the given store"""
    return BadgeEvaluator(store).recompute(donor_id)
