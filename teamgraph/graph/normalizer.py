"""
Record Normalizer

Guards raw dependency snapshot rows before aggregation:
    - related teams reduced to non-empty strings (order preserved)
    - magnitudes coerced to non-negative integers
    - rows without an owner, without related teams, or with a negative or
      non-numeric magnitude are dropped

Never raises; dropped rows are logged at DEBUG level.
"""

import math
from collections.abc import Iterable
from numbers import Real

from teamgraph.core.logging_config import get_logger
from teamgraph.domain.dependency import DependencyRecord, RecordKind, as_team_tuple
from teamgraph.utils.rounding import round_half_up

logger = get_logger(__name__)


def _clean_team(team: object) -> str | None:
    if not isinstance(team, str):
        return None
    team = team.strip()
    return team or None


def coerce_magnitude(value: object) -> int | None:
    """
    Coerce a raw magnitude to a non-negative integer.

    Args:
        value: Raw value from the backend (None, int, float, numeric string)

    Returns:
        Integer magnitude, or None if the value is negative or unusable

    Example:
        >>> coerce_magnitude(None)
        0
        >>> coerce_magnitude("4")
        4
        >>> coerce_magnitude(2.5)
        3
        >>> coerce_magnitude(-1) is None
        True
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return None

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None

    if not isinstance(value, Real):
        return None

    number = float(value)
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None

    return round_half_up(number)


def normalize_record(raw: DependencyRecord | dict, kind: RecordKind) -> DependencyRecord | None:
    """
    Normalize a single row.

    Args:
        raw: DependencyRecord or backend row dict
        kind: Perspective the row came from (used for dict rows and re-tagging)

    Returns:
        Normalized DependencyRecord, or None if the row is malformed
    """
    if isinstance(raw, dict):
        record = DependencyRecord.from_api(raw, kind)
    elif isinstance(raw, DependencyRecord):
        record = raw
    else:
        logger.debug(f"Dropping {kind.value} row of unsupported type {type(raw).__name__}")
        return None

    owner = _clean_team(record.owner_team)
    if owner is None:
        logger.debug(f"Dropping {kind.value} row without owner team: {record!r}")
        return None

    cleaned = (_clean_team(team) for team in as_team_tuple(record.related_teams))
    related = tuple(team for team in cleaned if team is not None)
    if not related:
        logger.debug(f"Dropping {kind.value} row for {owner}: no related teams")
        return None

    magnitude = coerce_magnitude(record.magnitude)
    if magnitude is None:
        logger.debug(f"Dropping {kind.value} row for {owner}: invalid magnitude {record.magnitude!r}")
        return None

    return DependencyRecord(owner_team=owner, related_teams=related, magnitude=magnitude, kind=kind)


def normalize_records(raw_records: Iterable[DependencyRecord | dict] | None, kind: RecordKind) -> list[DependencyRecord]:
    """
    Normalize a collection of rows, dropping malformed ones.

    Args:
        raw_records: Rows from one perspective (None is treated as empty)
        kind: Perspective of every row in the collection

    Returns:
        Normalized records in input order
    """
    if not raw_records:
        return []

    normalized: list[DependencyRecord] = []
    dropped = 0
    for raw in raw_records:
        record = normalize_record(raw, kind)
        if record is None:
            dropped += 1
            continue
        normalized.append(record)

    if dropped:
        logger.debug(f"Normalized {kind.value} records: kept {len(normalized)}, dropped {dropped}")

    return normalized
