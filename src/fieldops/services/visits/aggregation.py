"""Region and agent rollups over flat visit records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ...models.domain import AgentSummary, RegionRollup, VisitRecord, VisitStats, VisitStatus
from ..identity import display_name, normalize_key


@dataclass(slots=True)
class _AgentBucket:
    name: str
    agent_id: Optional[int]
    stats: Optional[VisitStats]


def _group_agents(visits: Iterable[VisitRecord]) -> Dict[str, Dict[str, _AgentBucket]]:
    """region key -> agent key -> first-seen name, id and stats block."""

    regions: Dict[str, Dict[str, _AgentBucket]] = {}
    for visit in visits:
        region_key = normalize_key(visit.agent_region)
        agent_key = normalize_key(visit.agent_name)
        agents = regions.setdefault(region_key, {})
        bucket = agents.get(agent_key)
        if bucket is None:
            agents[agent_key] = _AgentBucket(name=visit.agent_name, agent_id=visit.agent_id, stats=visit.stats)
            continue
        if bucket.stats is None and visit.stats is not None:
            bucket.stats = visit.stats
        if bucket.agent_id is None and visit.agent_id is not None:
            bucket.agent_id = visit.agent_id
    return regions


def _completed(bucket: _AgentBucket) -> int:
    return bucket.stats.completed_visit_count if bucket.stats else 0


def aggregate(visits: Sequence[VisitRecord]) -> Dict[str, RegionRollup]:
    """Fold visit records into per-region rollups keyed by normalized region.

    An agent contributes only when its stats block reports at least one
    completed visit; the count comes from that block, not from a recount of
    the records. Regions without contributing agents are omitted. Output
    order is sorted by region key so that repeated calls are identical.
    """

    rollups: Dict[str, RegionRollup] = {}
    for region_key, agents in sorted(_group_agents(visits).items()):
        contributing = [bucket for bucket in agents.values() if _completed(bucket) > 0]
        if not contributing:
            continue
        rollups[region_key] = RegionRollup(
            region=region_key,
            agent_names=tuple(sorted({display_name(bucket.name) for bucket in contributing})),
            completed_visit_count=sum(_completed(bucket) for bucket in contributing),
        )
    return rollups


def region_roster(visits: Sequence[VisitRecord], region: str) -> List[AgentSummary]:
    """Agents of one region with their completed-visit counts, by display name."""

    agents = _group_agents(visits).get(normalize_key(region), {})
    summaries = [
        AgentSummary(
            agent_key=agent_key,
            agent_name=display_name(bucket.name),
            agent_id=bucket.agent_id,
            completed_visit_count=_completed(bucket),
        )
        for agent_key, bucket in agents.items()
        if _completed(bucket) > 0
    ]
    return sorted(summaries, key=lambda item: (item.agent_name.casefold(), item.agent_key))


def completed_visits(visits: Iterable[VisitRecord]) -> List[VisitRecord]:
    """Completed visits, newest first."""

    done = [visit for visit in visits if visit.status is VisitStatus.COMPLETED]
    return sorted(
        done,
        key=lambda visit: (visit.visit_date is not None, visit.visit_date, visit.checkin_time is not None, visit.checkin_time, visit.id),
        reverse=True,
    )


def status_breakdown(visits: Iterable[VisitRecord]) -> Dict[str, int]:
    counts = {status.value: 0 for status in VisitStatus}
    for visit in visits:
        counts[visit.status.value] += 1
    return counts


def region_label(region_key: str) -> str:
    return display_name(region_key, fallback="Unassigned")
