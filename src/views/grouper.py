"""TriggerGrouper — aggregate a flat alert list into per-trigger rows."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from src.core.types import AlertRecord, AlertState, TriggerGroup


def group_by_trigger(alerts: Sequence[AlertRecord]) -> list[TriggerGroup]:
    """Group alerts by trigger id.

    Trigger ids are globally unique, so the monitor id is not part of the
    key. Groups come out in the order their trigger was first seen. The
    latest alert is the one with the greatest start time; on a tie the
    earlier record in *alerts* wins.
    """
    buckets: dict[str, list[AlertRecord]] = {}
    for alert in alerts:
        buckets.setdefault(alert.trigger_id, []).append(alert)

    groups: list[TriggerGroup] = []
    for trigger_id, members in buckets.items():
        latest = members[0]
        for alert in members[1:]:
            if alert.start_time > latest.start_time:
                latest = alert

        state_counts = Counter(a.state for a in members)
        groups.append(TriggerGroup(
            trigger_id=trigger_id,
            monitor_id=latest.monitor_id,
            trigger_name=latest.trigger_name,
            total_alert_count=len(members),
            active_alert_count=state_counts.get(AlertState.ACTIVE, 0),
            state_counts=dict(state_counts),
            active_alert_ids=tuple(
                a.id for a in members if a.state == AlertState.ACTIVE
            ),
            latest_alert=latest,
        ))
    return groups


def referenced_monitor_ids(groups: Iterable[TriggerGroup]) -> list[str]:
    """Distinct monitor ids referenced by *groups*, first-seen order."""
    return list(dict.fromkeys(g.monitor_id for g in groups if g.monitor_id))
