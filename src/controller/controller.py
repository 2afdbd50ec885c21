"""AlertQueryController — owns the query state and drives fetch cycles."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum

import structlog

from src.backend.exceptions import BackendError
from src.controller.context import ControllerContext
from src.controller.debounce import DebounceWindow
from src.core.config import DebounceConfig, get_settings
from src.core.types import (
    AlertStateFilter,
    MonitorSummary,
    QueryState,
    SeverityFilter,
    SortDirection,
    SortField,
    ViewMode,
    ViewModel,
)
from src.notify.formatters import failure_kind, format_backend_error
from src.notify.types import Severity
from src.query.state import (
    AlertStateChanged,
    LocationChanged,
    MonitorScopeChanged,
    PageChanged,
    PageSizeChanged,
    QueryEvent,
    SearchChanged,
    SeverityChanged,
    SortChanged,
    TableChanged,
    ViewModeChanged,
    apply,
)
from src.query.translator import translate
from src.query.url_sync import from_query_string, to_query_string
from src.views.grouper import group_by_trigger, referenced_monitor_ids

logger = structlog.stdlib.get_logger()

ViewModelCallback = Callable[[ViewModel], Awaitable[None] | None]


class ControllerPhase(StrEnum):
    """Fetch lifecycle phase."""

    IDLE = "IDLE"
    DEBOUNCING = "DEBOUNCING"
    FETCHING = "FETCHING"


class AlertQueryController:
    """Single writer of the canonical QueryState and the current ViewModel.

    Every state change is applied synchronously through the reducer, written
    to the location history, and turns into a debounced fetch. Fetches read
    the live state when they fire, run one at a time and are never
    cancelled. Each carries a sequence number and only the newest issued
    fetch may replace the ViewModel. A failed fetch keeps the previous
    ViewModel and raises a notification instead.

    The setters must be called from inside a running event loop.

    Usage::

        controller = AlertQueryController(ControllerContext(backend, notifier))
        controller.on_view_model(render)
        controller.refresh()
        controller.set_search("cpu high")
        await controller.wait_idle()
    """

    def __init__(
        self,
        context: ControllerContext,
        initial_state: QueryState | None = None,
        config: DebounceConfig | None = None,
    ) -> None:
        cfg = config or get_settings().debounce
        self._context = context
        self._views = context.views or get_settings().views
        self._state = initial_state or from_query_string("", self._views)
        self._view_model = ViewModel(view_mode=self._state.view_mode, query=self._state)

        self._debounce = DebounceWindow(
            fire=self._fire,
            window_secs=cfg.window_secs,
            leading_edge=cfg.leading_edge,
            trailing_check=self._state_changed_since_fetch if cfg.trailing_reconcile else None,
            on_close=self._sync_idle,
            sleep=context.sleep,
        )
        self._fetch_task: asyncio.Task[None] | None = None
        self._pending_fetch = False
        self._issued_seq = 0
        self._applied_seq = 0
        self._last_fetched_state: QueryState | None = None
        self._listeners: list[ViewModelCallback] = []
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False
        self._fetch_count = 0
        self._error_count = 0

    # ── Properties ────────────────────────────────────────────────

    @property
    def context(self) -> ControllerContext:
        return self._context

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def view_model(self) -> ViewModel:
        return self._view_model

    @property
    def phase(self) -> ControllerPhase:
        if self._fetch_task is not None:
            return ControllerPhase.FETCHING
        if self._debounce.open:
            return ControllerPhase.DEBOUNCING
        return ControllerPhase.IDLE

    @property
    def fetch_count(self) -> int:
        """Number of alert fetches issued."""
        return self._fetch_count

    @property
    def error_count(self) -> int:
        return self._error_count

    def on_view_model(self, callback: ViewModelCallback) -> None:
        """Register a callback for each newly applied ViewModel."""
        self._listeners.append(callback)

    # ── State changes ────────────────────────────────────────────

    def dispatch(self, event: QueryEvent) -> QueryState:
        """Apply *event*; a changed state is written to the URL and fetched."""
        new_state = apply(self._state, event, self._views)
        if new_state == self._state:
            return self._state

        self._state = new_state
        self._context.history.replace(to_query_string(new_state))
        logger.debug(
            "query_state_changed",
            event_type=type(event).__name__,
            from_index=new_state.from_index,
            size=new_state.size,
            view_mode=new_state.view_mode,
        )
        self._request_fetch()
        return new_state

    def set_page(self, page: int) -> QueryState:
        return self.dispatch(PageChanged(page))

    def set_page_size(self, size: int) -> QueryState:
        return self.dispatch(PageSizeChanged(size))

    def set_sort(self, field: SortField, direction: SortDirection) -> QueryState:
        return self.dispatch(SortChanged(field, direction))

    def change_table(
        self,
        page: int,
        size: int,
        sort_field: SortField,
        sort_direction: SortDirection,
    ) -> QueryState:
        return self.dispatch(TableChanged(page, size, sort_field, sort_direction))

    def set_search(self, search: str) -> QueryState:
        return self.dispatch(SearchChanged(search))

    def set_severity(self, level: SeverityFilter) -> QueryState:
        return self.dispatch(SeverityChanged(level))

    def set_alert_state(self, state: AlertStateFilter) -> QueryState:
        return self.dispatch(AlertStateChanged(state))

    def set_monitor_ids(self, monitor_ids: Iterable[str]) -> QueryState:
        return self.dispatch(MonitorScopeChanged(tuple(monitor_ids)))

    def set_view_mode(self, view_mode: ViewMode) -> QueryState:
        return self.dispatch(ViewModeChanged(view_mode))

    def navigate(self, query_string: str) -> QueryState:
        """Follow a back/forward navigation to *query_string*."""
        return self.dispatch(LocationChanged(query_string))

    def refresh(self) -> None:
        """Re-fetch the current state without changing it."""
        self._request_fetch(force=True)

    # ── Lifecycle ────────────────────────────────────────────────

    async def wait_idle(self) -> None:
        """Wait until no window is open and no fetch is in flight."""
        while self.phase != ControllerPhase.IDLE:
            self._idle.clear()
            await self._idle.wait()

    async def close(self) -> None:
        """Stop scheduling fetches and let an in-flight one finish."""
        self._closed = True
        self._pending_fetch = False
        await self._debounce.cancel()
        if self._fetch_task is not None:
            await asyncio.gather(self._fetch_task, return_exceptions=True)
        self._sync_idle()

    # ── Fetch scheduling ─────────────────────────────────────────

    def _request_fetch(self, force: bool = False) -> None:
        if self._closed:
            return
        self._debounce.request(force=force)
        self._sync_idle()

    def _state_changed_since_fetch(self) -> bool:
        return self._state != self._last_fetched_state

    def _fire(self) -> None:
        if self._closed:
            return
        # A new request supersedes any fetch already in flight.
        self._issued_seq += 1
        if self._fetch_task is not None:
            # One fetch at a time; the queued one reads the state when it starts.
            self._pending_fetch = True
            return
        self._start_fetch()

    def _start_fetch(self) -> None:
        self._fetch_count += 1
        state = self._state
        self._last_fetched_state = state
        self._fetch_task = asyncio.create_task(self._run_fetch(self._issued_seq, state))
        self._fetch_task.add_done_callback(self._on_fetch_done)
        self._sync_idle()

    def _on_fetch_done(self, task: asyncio.Task[None]) -> None:
        self._fetch_task = None
        if not task.cancelled() and task.exception() is not None:
            logger.error("fetch_task_crashed", error=str(task.exception()))
        if self._pending_fetch and not self._closed:
            self._pending_fetch = False
            self._start_fetch()
        self._sync_idle()

    def _sync_idle(self) -> None:
        if self.phase == ControllerPhase.IDLE:
            self._idle.set()
        else:
            self._idle.clear()

    # ── Fetch cycle ──────────────────────────────────────────────

    async def _run_fetch(self, seq: int, state: QueryState) -> None:
        params = translate(state)
        log = logger.bind(seq=seq, view_mode=state.view_mode)
        log.debug("alerts_fetch_started", params=params.to_query())

        backend = self._context.backend
        try:
            page = await backend.fetch_alerts(params)
            if state.view_mode == ViewMode.PER_TRIGGER:
                groups = group_by_trigger(page.alerts)
                monitors = await self._fetch_monitors(referenced_monitor_ids(groups))
                view_model = ViewModel(
                    rows=groups,
                    total_count=len(groups),
                    monitors=monitors,
                    view_mode=state.view_mode,
                    query=state,
                )
            else:
                view_model = ViewModel(
                    rows=page.alerts,
                    total_count=page.total_count,
                    view_mode=state.view_mode,
                    query=state,
                )
        except BackendError as exc:
            self._error_count += 1
            log.warning("alerts_fetch_failed", kind=failure_kind(exc), error=str(exc))
            await self._notify_failure(seq, exc, Severity.ERROR)
            return
        except Exception as exc:
            self._error_count += 1
            log.exception("alerts_fetch_unexpected_error")
            await self._notify_failure(seq, exc, Severity.CRITICAL)
            return

        if seq < self._issued_seq or seq <= self._applied_seq:
            log.debug("stale_response_discarded", latest_seq=self._issued_seq)
            return

        self._view_model = view_model
        self._applied_seq = seq
        log.info(
            "alerts_fetched",
            rows=len(view_model.rows),
            total=view_model.total_count,
            monitors=len(view_model.monitors),
        )
        await self._emit(view_model)

    async def _notify_failure(self, seq: int, exc: BaseException, severity: Severity) -> None:
        if seq < self._issued_seq:
            logger.debug("stale_failure_suppressed", seq=seq, latest_seq=self._issued_seq)
            return
        await self._context.notifier.notify(
            format_backend_error("alerts", exc, severity=severity),
        )

    async def _fetch_monitors(self, monitor_ids: list[str]) -> dict[str, MonitorSummary]:
        """Look up monitor metadata; failures degrade to missing entries."""
        if not monitor_ids:
            return {}
        try:
            found = await self._context.backend.fetch_monitors_by_ids(monitor_ids)
        except BackendError as exc:
            logger.warning(
                "monitors_fetch_failed",
                kind=failure_kind(exc),
                error=str(exc),
                requested=len(monitor_ids),
            )
            await self._context.notifier.notify(
                format_backend_error("monitors", exc, severity=Severity.WARNING),
            )
            return {}

        monitors = {m.id: m for m in found}
        missing = [i for i in monitor_ids if i not in monitors]
        if missing:
            logger.info("monitors_missing", monitor_ids=missing)
        return monitors

    async def _emit(self, view_model: ViewModel) -> None:
        for cb in self._listeners:
            try:
                result = cb(view_model)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("view_model_callback_error")
