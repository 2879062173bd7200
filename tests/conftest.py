"""Shared fixtures for badge evaluator tests"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from donor_badges.db import Database
from donor_badges.models.badges import BadgeRule, Donation, RuleType
from donor_badges.models.db import Badge
from donor_badges.services.memory import InMemoryBadgeStore
from donor_badges.services.storage import StorageService


def donation(amount, day, school_id=None, hour=12):
    """Donation on a day given as 'YYYY-MM-DD', at the given UTC hour"""
    y, m, d = (int(p) for p in day.split("-"))
    return Donation(
        amount=Decimal(str(amount)) if amount is not None else None,
        school_id=school_id,
        created_at=datetime(y, m, d, hour, tzinfo=timezone.utc),
    )


CATALOG = [
    BadgeRule(id="first-gift", rule_type=RuleType.DONATION_COUNT, rule_config={"threshold": 1}, name="First Gift"),
    BadgeRule(id="five-gifts", rule_type=RuleType.DONATION_COUNT, rule_config={"threshold": 5}, name="Five Gifts"),
    BadgeRule(id="explorer", rule_type=RuleType.DISTINCT_SCHOOLS, rule_config={"threshold": 2}, name="Explorer"),
    BadgeRule(id="streak-3", rule_type=RuleType.STREAK_DAYS, rule_config={"threshold": 3}, name="On a Roll"),
    BadgeRule(id="hundred", rule_type=RuleType.TOTAL_AMOUNT, rule_config={"threshold": 100}, name="Centurion"),
]


@pytest.fixture
def catalog():
    return list(CATALOG)


@pytest.fixture
def memory_store(catalog):
    return InMemoryBadgeStore(rules=catalog)


@pytest.fixture
def database(tmp_path):
    d = Database()
    d.init(f"sqlite:///{tmp_path / 'badges.db'}")
    yield d
    d.dispose()


@pytest.fixture
def session(database):
    s = database.get_session()
    yield s
    s.close()


@pytest.fixture
def storage(session, catalog):
    for rule in catalog:
        session.add(Badge(
            id=rule.id,
            name=rule.name,
            description=f"{rule.name} badge",
            rule_type=rule.rule_type.value,
            rule_config=rule.rule_config,
        ))
    session.commit()
    return StorageService(session)
