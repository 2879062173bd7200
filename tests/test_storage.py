"""pytest tests for the SQLAlchemy storage service"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from donor_badges.errors import AchievementPersistError, BadgeLoadError
from donor_badges.evaluator import BadgeEvaluator
from donor_badges.models.badges import AchievedBadge, RuleType
from donor_badges.models.db import Badge, Donation, UserBadge
from donor_badges.services.storage import StorageService

T1 = datetime(2024, 1, 10, 9, tzinfo=timezone.utc)
T2 = datetime(2024, 2, 10, 9, tzinfo=timezone.utc)


def add_donations(session, donor_id, rows):
    for amount, school_id, created_at in rows:
        session.add(Donation(donor_id=donor_id, amount=amount, school_id=school_id, created_at=created_at))
    session.commit()


def count_user_badges(session, donor_id):
    return session.execute(
        select(func.count()).select_from(UserBadge).where(UserBadge.donor_id == donor_id)
    ).scalar_one()


def test_session_required():
    with pytest.raises(ValueError):
        StorageService(None)

def test_load_badge_rules_ordered_by_id(storage):
    rules = storage.load_badge_rules()
    assert [r.id for r in rules] == ["explorer", "first-gift", "five-gifts", "hundred", "streak-3"]
    assert rules[0].rule_type is RuleType.DISTINCT_SCHOOLS
    assert rules[0].threshold == 2

def test_unknown_rule_type_from_database(storage, session):
    session.add(Badge(id="zzz", name="Mystery", rule_type="custom_xyz", rule_config={"threshold": 0}))
    session.commit()
    rule = storage.load_badge_rules()[-1]
    assert rule.rule_type is RuleType.UNKNOWN

def test_load_donor_donations_scoped_to_donor(storage, session):
    add_donations(session, "alice", [(Decimal("10.00"), 1, T1), (None, None, T2)])
    add_donations(session, "bob", [(Decimal("99.00"), 2, T1)])

    donations = storage.load_donor_donations("alice")
    assert len(donations) == 2
    assert donations[0].amount == Decimal("10.00")
    assert donations[1].amount is None
    assert storage.load_donor_donations("nobody") == []

def test_persist_twice_keeps_one_row_and_first_time(storage, session):
    storage.persist_achievements("alice", [AchievedBadge("first-gift", T1)])
    storage.persist_achievements("alice", [AchievedBadge("first-gift", T2), AchievedBadge("hundred", T2)])

    assert count_user_badges(session, "alice") == 2
    first = session.get(UserBadge, ("alice", "first-gift"))
    assert first.achieved_at.replace(tzinfo=None) == T1.replace(tzinfo=None)

def test_persist_empty_batch_is_noop(storage, session):
    storage.persist_achievements("alice", [])
    assert count_user_badges(session, "alice") == 0

def test_persist_fallback_for_other_dialects(storage, session, monkeypatch):
    monkeypatch.setattr("donor_badges.services.storage.UPSERT_INSERTS", {})
    storage.persist_achievements("alice", [AchievedBadge("first-gift", T1)])
    storage.persist_achievements("alice", [AchievedBadge("first-gift", T2), AchievedBadge("explorer", T2)])
    assert count_user_badges(session, "alice") == 2

def test_persist_failure_is_wrapped(storage, session, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(session, "execute", broken)
    with pytest.raises(AchievementPersistError):
        storage.persist_achievements("alice", [AchievedBadge("first-gift", T1)])

def test_load_failure_is_wrapped(storage, session, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(session, "execute", broken)
    with pytest.raises(BadgeLoadError):
        storage.load_badge_rules()
    with pytest.raises(BadgeLoadError):
        storage.load_donor_donations("alice")

def test_list_donor_badges(storage):
    storage.persist_achievements("alice", [AchievedBadge("hundred", T1)])
    statuses = {b.id: b for b in storage.list_donor_badges("alice")}

    assert len(statuses) == 5
    assert statuses["hundred"].achieved
    assert statuses["hundred"].achieved_at is not None
    assert not statuses["explorer"].achieved
    assert statuses["explorer"].achieved_at is None
    assert statuses["explorer"].icon_url == ""

def test_end_to_end_recompute(storage, session):
    add_donations(session, "alice", [
        (Decimal("25.00"), 1, datetime(2024, 1, 1, 8, tzinfo=timezone.utc)),
        (Decimal("25.00"), 2, datetime(2024, 1, 2, 8, tzinfo=timezone.utc)),
        (Decimal("25.00"), 2, datetime(2024, 1, 4, 8, tzinfo=timezone.utc)),
        (Decimal("15.00"), 3, datetime(2024, 1, 5, 8, tzinfo=timezone.utc)),
        (Decimal("10.00"), 3, datetime(2024, 1, 6, 8, tzinfo=timezone.utc)),
    ])

    evaluator = BadgeEvaluator(storage)
    first = evaluator.recompute("alice")
    second = evaluator.recompute("alice")

    expected = ["explorer", "first-gift", "five-gifts", "hundred", "streak-3"]
    assert [a.badge_id for a in first] == expected
    assert [a.badge_id for a in second] == expected
    assert evaluator.last_metrics.best_streak_days == 3
    assert count_user_badges(session, "alice") == 5
