"""Domain models for donations, badge rules and achievements"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Union

Identifier = Union[int, str]

class RuleType(str, Enum):
    """Metric a badge rule is checked against"""
    DONATION_COUNT = "donation_count"
    DISTINCT_SCHOOLS = "distinct_schools"
    STREAK_DAYS = "streak_days"
    TOTAL_AMOUNT = "total_amount"
    # Catalog entries with a tag this code does not know about
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

@dataclass
class Donation:
    """Donation fields needed for badge metrics"""
    amount: Optional[Decimal]
    school_id: Optional[Identifier]
    created_at: Union[datetime, str]

@dataclass
class BadgeRule:
    """Badge catalog entry with its achievement rule"""
    id: Identifier
    rule_type: RuleType
    rule_config: Optional[Dict[str, Any]] = None
    name: str = ""
    description: Optional[str] = None
    icon_url: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.rule_type, RuleType):
            self.rule_type = RuleType(self.rule_type)

    @property
    def threshold(self) -> Optional[Decimal]:
        """
        Rule threshold, or None when missing, non-numeric or non-finite.

        Parsed as Decimal so it compares exactly against Decimal totals.
        Values too large for a double count as infinite.
        """
        raw = (self.rule_config or {}).get("threshold")
        if raw is None or isinstance(raw, bool):
            return None
        if not isinstance(raw, (int, float, str, Decimal)):
            return None
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            return None
        if not value.is_finite() or not math.isfinite(float(value)):
            return None
        return value

@dataclass
class DonationMetrics:
    """Donation statistics badge rules are evaluated against"""
    donation_count: int = 0
    distinct_schools: int = 0
    best_streak_days: int = 0
    total_amount: Decimal = field(default_factory=Decimal)

@dataclass
class AchievedBadge:
    """A badge whose rule passed in an evaluation run"""
    badge_id: Identifier
    achieved_at: datetime
