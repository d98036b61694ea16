"""
Dependency Aggregator

Converts normalized outbound and inbound records into one weighted edge map
keyed by (source team, target team).

Rules:
    - A record's magnitude is split evenly across its related teams, each share
      rounded half-up.
    - Outbound rows contribute (owner -> related), inbound rows (related -> owner).
    - Both perspectives are summed into the same key space.
    - Self pairs are skipped.

The result is a read-only mapping; iteration follows first-contribution order.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from teamgraph.domain.dependency import DependencyRecord, PerspectiveWeights, RecordKind, ZeroMagnitudePolicy
from teamgraph.utils.rounding import round_half_up

EdgeKey = tuple[str, str]


def share_per_team(magnitude: int, team_count: int, policy: ZeroMagnitudePolicy) -> int:
    """
    Weight each related team receives from one record.

    Args:
        magnitude: Non-negative record magnitude
        team_count: Number of related teams (>= 1)
        policy: Treatment of zero magnitude

    Returns:
        Per-team share

    Example:
        >>> share_per_team(4, 2, ZeroMagnitudePolicy.FLOOR_AT_ONE)
        2
        >>> share_per_team(0, 3, ZeroMagnitudePolicy.FLOOR_AT_ONE)
        1
        >>> share_per_team(0, 3, ZeroMagnitudePolicy.DROP)
        0
    """
    if magnitude == 0:
        return 1 if policy is ZeroMagnitudePolicy.FLOOR_AT_ONE else 0
    return round_half_up(magnitude / team_count)


def record_contributions(
    record: DependencyRecord, policy: ZeroMagnitudePolicy = ZeroMagnitudePolicy.FLOOR_AT_ONE
) -> list[tuple[EdgeKey, int]]:
    """
    Edge contributions of a single normalized record.

    Returns:
        (edge key, weight) pairs, self pairs excluded; empty when the record
        contributes nothing under the given policy
    """
    if record.magnitude == 0 and policy is ZeroMagnitudePolicy.DROP:
        return []

    share = share_per_team(record.magnitude, len(record.related_teams), policy)
    contributions: list[tuple[EdgeKey, int]] = []
    for team in record.related_teams:
        if team == record.owner_team:
            continue
        if record.kind is RecordKind.OUTBOUND:
            key = (record.owner_team, team)
        else:
            key = (team, record.owner_team)
        contributions.append((key, share))
    return contributions


def _add_contribution(current: PerspectiveWeights, kind: RecordKind, weight: int) -> PerspectiveWeights:
    if kind is RecordKind.OUTBOUND:
        return PerspectiveWeights(outbound=current.outbound + weight, inbound=current.inbound)
    return PerspectiveWeights(outbound=current.outbound, inbound=current.inbound + weight)


def aggregate_by_perspective(
    outbound_records: Iterable[DependencyRecord],
    inbound_records: Iterable[DependencyRecord],
    zero_magnitude_policy: ZeroMagnitudePolicy = ZeroMagnitudePolicy.FLOOR_AT_ONE,
) -> Mapping[EdgeKey, PerspectiveWeights]:
    """
    Aggregate records keeping the outbound and inbound contributions apart.

    Records are expected to be normalized; their kind is taken from the
    argument they are passed in, not from the record itself.

    Args:
        outbound_records: Normalized "teams I depend on" records
        inbound_records: Normalized "teams that depend on me" records
        zero_magnitude_policy: Treatment of zero-magnitude records

    Returns:
        Read-only mapping of (source, target) to PerspectiveWeights
    """
    tagged = [_as_kind(r, RecordKind.OUTBOUND) for r in outbound_records]
    tagged += [_as_kind(r, RecordKind.INBOUND) for r in inbound_records]

    # Local to this call; only the read-only view escapes
    edges: dict[EdgeKey, PerspectiveWeights] = {}
    for record in tagged:
        for key, weight in record_contributions(record, zero_magnitude_policy):
            edges[key] = _add_contribution(edges.get(key, PerspectiveWeights()), record.kind, weight)
    return MappingProxyType(edges)


def aggregate(
    outbound_records: Iterable[DependencyRecord],
    inbound_records: Iterable[DependencyRecord],
    zero_magnitude_policy: ZeroMagnitudePolicy = ZeroMagnitudePolicy.FLOOR_AT_ONE,
) -> Mapping[EdgeKey, int]:
    """
    Aggregate both perspectives into summed edge weights.

    Example:
        >>> outbound = [DependencyRecord("TeamA", ("TeamB", "TeamC"), 4, RecordKind.OUTBOUND)]
        >>> dict(aggregate(outbound, []))
        {('TeamA', 'TeamB'): 2, ('TeamA', 'TeamC'): 2}
    """
    by_perspective = aggregate_by_perspective(outbound_records, inbound_records, zero_magnitude_policy)
    return MappingProxyType({key: weights.total for key, weights in by_perspective.items()})


def _as_kind(record: DependencyRecord, kind: RecordKind) -> DependencyRecord:
    if record.kind is kind:
        return record
    return DependencyRecord(record.owner_team, record.related_teams, record.magnitude, kind)
