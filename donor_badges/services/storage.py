"""Database storage service for badges, donations and achievements"""
import logging
from typing import Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from donor_badges.errors import AchievementPersistError, BadgeLoadError
from donor_badges.models.badges import AchievedBadge, BadgeRule, Donation
from donor_badges.models.db import Badge, Donation as DonationRow, UserBadge
from donor_badges.models.response import BadgeStatus

logger = logging.getLogger(__name__)

UPSERT_INSERTS = {
    'postgresql': pg_insert,
    'sqlite': sqlite_insert,
}

class StorageService:
    """Handles all database operations for badge evaluation"""

    def __init__(self, session: Session):
        if not session:
            raise ValueError("Database session is required")
        self.session = session

    def load_badge_rules(self) -> List[BadgeRule]:
        """Load the full badge catalog ordered by id"""
        try:
            badges = self.session.execute(select(Badge).order_by(Badge.id)).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Database error loading badges: {e}")
            raise BadgeLoadError(f"Failed to load badges: {e}") from e

        return [
            BadgeRule(
                id=badge.id,
                rule_type=badge.rule_type,
                rule_config=badge.rule_config,
                name=badge.name,
                description=badge.description,
                icon_url=badge.icon_url
            )
            for badge in badges
        ]

    def load_donor_donations(self, donor_id: str) -> List[Donation]:
        """Load every donation made by a donor"""
        try:
            rows = self.session.execute(
                select(DonationRow.amount, DonationRow.school_id, DonationRow.created_at)
                .where(DonationRow.donor_id == donor_id)
                .order_by(DonationRow.created_at)
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Database error loading donations for {donor_id}: {e}")
            raise BadgeLoadError(f"Failed to load donations: {e}") from e

        return [
            Donation(amount=row.amount, school_id=row.school_id, created_at=row.created_at)
            for row in rows
        ]

    def persist_achievements(self, donor_id: str, achieved: Sequence[AchievedBadge]) -> None:
        """
        Record achievements in one batch.

        Pairs the donor already holds are skipped, so their original
        achieved_at is kept and re-running never duplicates rows.

        Raises:
            AchievementPersistError: If the write fails
        """
        if not achieved:
            return

        rows = [
            {'donor_id': donor_id, 'badge_id': a.badge_id, 'achieved_at': a.achieved_at}
            for a in achieved
        ]
        try:
            dialect = self.session.get_bind().dialect.name
            insert = UPSERT_INSERTS.get(dialect)
            if insert is not None:
                stmt = insert(UserBadge).values(rows).on_conflict_do_nothing(
                    index_elements=[UserBadge.donor_id, UserBadge.badge_id]
                )
                self.session.execute(stmt)
            else:
                self._insert_missing(donor_id, rows)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error storing achievements for {donor_id}: {e}")
            raise AchievementPersistError(f"Failed to upsert user_badges: {e}") from e

    def _insert_missing(self, donor_id: str, rows: List[Dict]) -> None:
        """Fallback for dialects without ON CONFLICT support"""
        held = set(self.session.execute(
            select(UserBadge.badge_id).where(UserBadge.donor_id == donor_id)
        ).scalars())
        for row in rows:
            if row['badge_id'] in held:
                continue
            held.add(row['badge_id'])
            self.session.add(UserBadge(**row))

    def list_donor_badges(self, donor_id: str) -> List[BadgeStatus]:
        """Badge catalog annotated with the donor's achievements"""
        try:
            badges = self.session.execute(select(Badge).order_by(Badge.id)).scalars().all()
            awarded = {
                row.badge_id: row.achieved_at
                for row in self.session.execute(
                    select(UserBadge.badge_id, UserBadge.achieved_at)
                    .where(UserBadge.donor_id == donor_id)
                )
            }
        except SQLAlchemyError as e:
            logger.error(f"Database error listing badges for {donor_id}: {e}")
            raise BadgeLoadError(f"Failed to list badges: {e}") from e

        return [
            BadgeStatus(
                id=badge.id,
                name=badge.name,
                description=badge.description,
                icon_url=badge.icon_url or "",
                achieved=badge.id in awarded,
                achieved_at=awarded.get(badge.id)
            )
            for badge in badges
        ]
