"""In-memory badge store, for tests and dry runs"""
from typing import Dict, List, Sequence, Tuple
from datetime import datetime

from donor_badges.models.badges import AchievedBadge, BadgeRule, Donation

class InMemoryBadgeStore:
    """Keeps badges, donations and achievements in plain dicts"""

    def __init__(self, rules: Sequence[BadgeRule] = (),
                 donations: Dict[str, List[Donation]] = None):
        self.rules = list(rules)
        self.donations = {k: list(v) for k, v in (donations or {}).items()}
        self.achievements: Dict[Tuple[str, object], datetime] = {}

    def add_donation(self, donor_id: str, donation: Donation) -> None:
        self.donations.setdefault(donor_id, []).append(donation)

    def load_badge_rules(self) -> List[BadgeRule]:
        return sorted(self.rules, key=lambda r: str(r.id))

    def load_donor_donations(self, donor_id: str) -> List[Donation]:
        return list(self.donations.get(donor_id, []))

    def persist_achievements(self, donor_id: str, achieved: Sequence[AchievedBadge]) -> None:
        for a in achieved:
            self.achievements.setdefault((donor_id, a.badge_id), a.achieved_at)

    def held_badges(self, donor_id: str) -> Dict[object, datetime]:
        """Badge id to achieved_at for everything the donor holds"""
        return {
            badge_id: achieved_at
            for (owner, badge_id), achieved_at in self.achievements.items()
            if owner == donor_id
        }
