#!/usr/bin/env python3
"""Alerts console — run one query against the alerting backend and print it.

Usage::

    # Default query (per-alert view, newest first)
    python scripts/alerts_console.py

    # Restore a shared link's query string
    python scripts/alerts_console.py --query "search=cpu&alertState=ACTIVE"

    # Aggregate by trigger
    python scripts/alerts_console.py --view per_trigger

    # JSON output
    python scripts/alerts_console.py --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import structlog

from src.backend.client import AlertBackendClient
from src.controller.context import ControllerContext, MemoryHistory
from src.controller.controller import AlertQueryController
from src.core.config import load_settings
from src.core.logging import setup_logging
from src.core.types import AlertRecord, TriggerGroup, ViewMode, ViewModel
from src.notify.factory import create_notifier
from src.query.state import ViewModeChanged, apply
from src.query.url_sync import from_query_string

logger = structlog.get_logger(__name__)


def _render_alerts(rows: list[AlertRecord]) -> list[str]:
    header = f"{'State':<13}  {'Sev':>3}  {'Monitor':<24}  {'Trigger':<24}  Start"
    lines = [header, "-" * len(header)]
    for alert in rows:
        lines.append(
            f"{alert.state.value:<13}  {alert.severity:>3}  "
            f"{alert.monitor_name[:24]:<24}  {alert.trigger_name[:24]:<24}  "
            f"{alert.start_time}"
        )
    return lines


def _render_triggers(rows: list[TriggerGroup], view_model: ViewModel) -> list[str]:
    header = f"{'Active':>6}  {'Total':>5}  {'Trigger':<24}  Monitor"
    lines = [header, "-" * len(header)]
    for group in rows:
        lines.append(
            f"{group.active_alert_count:>6}  {group.total_alert_count:>5}  "
            f"{group.trigger_name[:24]:<24}  {view_model.monitor_name(group.monitor_id)}"
        )
    return lines


def _render(view_model: ViewModel) -> str:
    if view_model.view_mode == ViewMode.PER_TRIGGER:
        lines = _render_triggers(view_model.rows, view_model)  # type: ignore[arg-type]
        lines.append(f"{view_model.total_count} trigger(s)")
    else:
        lines = _render_alerts(view_model.rows)  # type: ignore[arg-type]
        lines.append(
            f"page {view_model.query.page + 1}/{view_model.page_count} "
            f"of {view_model.pagination_total} alert(s)"
        )
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> int:
    """Fetch one view model for the requested query and print it."""
    settings = load_settings(args.config)
    setup_logging(settings.logging, level=args.log_level, fmt=args.log_format)

    state = from_query_string(args.query, settings.views)
    if args.view is not None:
        state = apply(state, ViewModeChanged(ViewMode(args.view)), settings.views)

    notifier = create_notifier(settings.notifications)
    history = MemoryHistory(args.query)

    async with AlertBackendClient(settings.backend) as backend:
        context = ControllerContext(
            backend=backend,
            notifier=notifier,
            history=history,
            views=settings.views,
        )
        controller = AlertQueryController(context, initial_state=state, config=settings.debounce)
        controller.refresh()
        await controller.wait_idle()
        await controller.close()

    await notifier.close()

    if controller.error_count:
        for note in notifier.recent:
            print(f"{note.title}: {note.body}", file=sys.stderr)
        return 1

    view_model = controller.view_model
    if args.json:
        print(json.dumps(view_model.model_dump(mode="json"), indent=2))
    else:
        print(_render(view_model))

    logger.info(
        "console_query_done",
        rows=len(view_model.rows),
        total=view_model.total_count,
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Query alerts from the alerting backend.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=None,
        help="Log renderer override",
    )
    parser.add_argument(
        "--query",
        default="",
        help="URL query string to restore (e.g. copied from a shared link)",
    )
    parser.add_argument(
        "--view",
        choices=[m.value for m in ViewMode],
        default=None,
        help="Override the view mode",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the view model as JSON",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
