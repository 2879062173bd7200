"""Response models for badge evaluation results"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union
from pydantic import BaseModel

class BadgeStatus(BaseModel):
    """
    A catalog badge as shown to a donor.

    Attributes:
        id: Badge identifier
        name: Display name
        description: Display description
        icon_url: Icon location, empty when the badge has none
        achieved: Whether the donor holds the badge
        achieved_at: When the badge was first recorded for the donor
    """
    id: Union[int, str]
    name: str
    description: Optional[str] = None
    icon_url: str = ""
    achieved: bool = False
    achieved_at: Optional[datetime] = None

class MetricsSummary(BaseModel):
    """Donation metrics computed for one evaluation"""
    donation_count: int = 0
    distinct_schools: int = 0
    best_streak_days: int = 0
    total_amount: Decimal = Decimal(0)

class AchievementEntry(BaseModel):
    badge_id: Union[int, str]
    achieved_at: datetime

class EvaluationResponse(BaseModel):
    """
    Result of evaluating one donor.

    achieved lists every badge whose rule passed in this run, including
    badges the donor already held before it.
    """
    donor_id: str
    metrics: MetricsSummary
    achieved: List[AchievementEntry] = []
    badges: List[BadgeStatus] = []
