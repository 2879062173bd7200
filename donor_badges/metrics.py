"""Donation metrics used by badge rules"""
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Set

from donor_badges.models.badges import Donation, DonationMetrics

# Postgres renders timestamptz as "2024-06-01 10:00:00.12345+00"
TIMESTAMP_RE = re.compile(
    r'^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(?::\d{2})?)'
    r'(?:\.(?P<fraction>\d+))?'
    r'(?P<offset>[Zz]|[+-]\d{2}(?::?\d{2})?)?$'
)

def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601 / Postgres timestamp string.

    Fractions of any length and offsets written as Z, +HH, +HHMM or +HH:MM
    are rewritten into the form datetime.fromisoformat accepts on every
    supported Python version.
    """
    text = text.strip()
    match = TIMESTAMP_RE.match(text)
    if not match:
        return datetime.fromisoformat(text)

    normalized = match.group('base')
    fraction = match.group('fraction')
    if fraction:
        normalized += '.' + fraction[:6].ljust(6, '0')

    offset = match.group('offset')
    if offset:
        if offset in ('Z', 'z'):
            offset = '+00:00'
        else:
            digits = offset[1:].replace(':', '')
            offset = f"{offset[0]}{digits[:2]}:{digits[2:4] or '00'}"
        normalized += offset
    return datetime.fromisoformat(normalized)

def to_utc(timestamp) -> datetime:
    """Parse a donation timestamp and normalize it to UTC. Naive values are taken as UTC."""
    if isinstance(timestamp, str):
        timestamp = parse_timestamp(timestamp)
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)

def to_decimal(amount) -> Decimal:
    """Donation amount as Decimal, missing amounts count as zero"""
    if amount is None:
        return Decimal(0)
    if isinstance(amount, Decimal):
        return amount
    # str() keeps floats like 0.1 from dragging binary noise into the sum
    return Decimal(str(amount))

def utc_day(timestamp) -> date:
    return to_utc(timestamp).date()

def longest_consecutive_day_streak(days: Iterable[date]) -> int:
    """
    Length of the longest run of consecutive calendar days.

    Duplicate days count once. An empty input has a streak of 0.
    """
    ordinals: List[int] = sorted({d.toordinal() for d in days})
    if not ordinals:
        return 0

    best = current = 1
    for previous, day in zip(ordinals, ordinals[1:]):
        if day == previous + 1:
            current += 1
        else:
            current = 1
        best = max(best, current)
    return best

def compute_donation_metrics(donations: Iterable[Donation]) -> DonationMetrics:
    """
    Compute badge metrics from a donor's full donation history.

    The result does not depend on the order of donations. Streaks are
    measured on UTC calendar days.
    """
    donation_count = 0
    schools: Set = set()
    total_amount = Decimal(0)
    days: Set[date] = set()

    for donation in donations:
        donation_count += 1
        if donation.school_id is not None:
            schools.add(donation.school_id)
        total_amount += to_decimal(donation.amount)
        days.add(utc_day(donation.created_at))

    return DonationMetrics(
        donation_count=donation_count,
        distinct_schools=len(schools),
        best_streak_days=longest_consecutive_day_streak(days),
        total_amount=total_amount
    )
