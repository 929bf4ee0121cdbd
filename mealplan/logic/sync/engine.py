"""Plan synchronization engine.

Owns the one actively edited plan of a session and everything about getting it
to and from the blob store:
  - which plan file is selected and whether a save is pending,
  - the debounced save after edits,
  - flush-then-load sequencing when switching, creating or deleting files,
  - refreshing recipe copies when the catalog is saved,
  - auto-fill of empty slots.

All public operations and the debounce callback run under one re-entrant lock,
so no two persistence operations ever overlap. Store failures are caught here,
logged and published on the event bus; callers get a bool/None outcome.
"""
import logging
import random
import threading
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from mealplan.domain.Catalog import RecipeCatalog
from mealplan.domain.FilterState import FilterState
from mealplan.domain.Plan import PlanRecord
from mealplan.events.Event_Bus import (
    GLOBAL_EVENT_BUS, EventBus,
    PLAN_SAVED, PLAN_CREATED, PLAN_SELECTED, PLAN_DELETED,
    PLAN_WRITE_FAILED, PLAN_NOT_FOUND, STORAGE_UNAVAILABLE, RECIPES_SAVED,
)
from mealplan.infra.Blob_Store import BlobStore
from mealplan.infra.errors import NotFound, StorageUnavailable, WriteFailed
from mealplan.logic.planning.autofill import auto_fill
from mealplan.logic.planning.filenames import (
    PLAN_FILENAME_RE, is_plan_filename, next_available, sort_newest_first, today,
)
from mealplan.logic.planning.reconcile import reconcile_plan, reconcile_plans
from mealplan.logic.sync.debounce import DelayedTask
from mealplan.utilities.constants import DEFAULT_MEALS, DEFAULT_SAVE_DEBOUNCE_MS

logger = logging.getLogger(__name__)


class SyncState(Enum):
    IDLE = "idle"
    DIRTY_DEBOUNCING = "dirty_debouncing"
    SWITCHING = "switching"
    SAVING = "saving"


class InvalidTransition(RuntimeError):
    pass


_TRANSITIONS = {
    SyncState.IDLE: {SyncState.DIRTY_DEBOUNCING, SyncState.SWITCHING, SyncState.SAVING},
    SyncState.DIRTY_DEBOUNCING: {SyncState.DIRTY_DEBOUNCING, SyncState.SAVING, SyncState.SWITCHING},
    SyncState.SAVING: {SyncState.IDLE},
    SyncState.SWITCHING: {SyncState.IDLE},
}


class ActivePlanState:
    """The selected file, its in-memory plan, the pending save and the last persisted snapshot."""

    def __init__(self, selected_filename: str, plan: PlanRecord, pending_save: DelayedTask,
                 last_persisted: Optional[Dict[str, Any]] = None):
        self.selected_filename = selected_filename
        self.plan = plan
        self.pending_save = pending_save
        self.last_persisted = last_persisted

    def is_dirty(self) -> bool:
        return self.last_persisted is None or self.plan.to_dict() != self.last_persisted

    def mark_persisted(self):
        self.last_persisted = self.plan.to_dict()


class PlanSyncEngine:
    def __init__(self, store: BlobStore, catalog: Optional[RecipeCatalog] = None,
                 meals: Sequence[str] = DEFAULT_MEALS,
                 debounce_seconds: float = DEFAULT_SAVE_DEBOUNCE_MS / 1000.0,
                 clock: Callable[[], date] = date.today,
                 event_bus: Optional[EventBus] = None,
                 timer_factory: Callable = threading.Timer,
                 rng: Optional[random.Random] = None):
        self._store = store
        self._catalog = catalog or RecipeCatalog()
        self._meals = tuple(meals)
        self._clock = clock
        self._event_bus = event_bus or GLOBAL_EVENT_BUS
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._state = SyncState.IDLE
        self._pending_save = DelayedTask(debounce_seconds, self._on_debounce, timer_factory)
        self._active: Optional[ActivePlanState] = None
        self._files: List[str] = []
        # Read-only plans viewed by the UI; refreshed on catalog save, never written
        self._held: Dict[str, PlanRecord] = {}
        self._storage_lost = False

    # --- Session lifecycle -------------------------------------------------
    def open(self) -> str:
        """Start the session: select the newest plan file, creating today's when none exist."""
        with self._lock:
            if self._active is None:
                self._refresh_listing()
                self._activate_newest_or_fresh()
                logger.info("Plan session opened on %s", self._active.selected_filename)
            return self._active.selected_filename

    def close(self) -> bool:
        """End the session: cancel the timer and write any unsaved edits."""
        with self._lock:
            if self._active is None:
                return True
            ok = self.flush()
            self._pending_save.cancel()
            logger.info("Plan session closed on %s", self._active.selected_filename)
            return ok

    # --- Read side ---------------------------------------------------------
    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def active_filename(self) -> Optional[str]:
        return self._active.selected_filename if self._active else None

    @property
    def catalog(self) -> RecipeCatalog:
        return self._catalog

    @property
    def meals(self) -> tuple:
        return self._meals

    @property
    def storage_available(self) -> bool:
        return not self._storage_lost

    def is_dirty(self) -> bool:
        with self._lock:
            return self._active is not None and (self._pending_save.pending or self._active.is_dirty())

    def get_active_plan(self) -> PlanRecord:
        with self._lock:
            self._require_open()
            return self._active.plan.copy()

    def list_plan_files(self) -> List[str]:
        """Plan filenames, newest first."""
        with self._lock:
            self._refresh_listing()
            return list(self._files)

    def view_plan_file(self, filename: str) -> Optional[PlanRecord]:
        """Read-only copy of any plan file; None (and a not-found report) for unknown files."""
        with self._lock:
            self._require_open()
            if filename == self._active.selected_filename:
                return self._active.plan.copy()
            if not self._is_listed(filename):
                self._report_not_found(filename, "not in plan listing")
                return None
            plan = self._held.get(filename)
            if plan is None:
                plan = PlanRecord.normalize(self._read(filename), self._meals)
                self._held[filename] = plan
            return plan.copy()

    # --- Mutations ---------------------------------------------------------
    def mutate_slot(self, day: str, meal: str, recipe=None) -> bool:
        """Assign (Recipe/dict) or clear (None) one slot of the active plan. Raises ValueError on a bad slot."""
        with self._lock:
            self._require_open()
            changed = self._active.plan.set(day, meal, recipe)
            if changed:
                self._mark_dirty()
            return changed

    def run_auto_fill(self, filter_state: FilterState) -> int:
        with self._lock:
            self._require_open()
            filled = auto_fill(self._active.plan, self._catalog, filter_state, self._rng)
            if filled:
                self._mark_dirty()
            logger.info("Auto-fill placed %d recipe(s) in %s", filled, self._active.selected_filename)
            return filled

    def on_recipes_saved(self, catalog: RecipeCatalog, source: str = "") -> int:
        """Swap in the saved catalog and refresh recipe copies in every plan held in memory."""
        with self._lock:
            self._catalog = catalog
            if self._active is None:
                return 0
            active_changed = reconcile_plan(self._active.plan, catalog)
            held_changed = reconcile_plans(self._held.values(), catalog)
            if active_changed:
                self._mark_dirty()
            total = active_changed + held_changed
            logger.info("Catalog saved%s: %d slot(s) refreshed", f" as {source}" if source else "", total)
            self._event_bus.publish(RECIPES_SAVED, {"filename": source, "slots_refreshed": total})
            return total

    def flush(self) -> bool:
        """Write the active plan now if it has unsaved edits."""
        with self._lock:
            self._require_open()
            if not (self._pending_save.pending or self._active.is_dirty()):
                return True
            self._transition(SyncState.SAVING)
            try:
                return self._flush_active()
            finally:
                self._transition(SyncState.IDLE)

    # --- File operations ---------------------------------------------------
    def select_plan_file(self, filename: str) -> bool:
        """Switch the active plan. The old file is flushed before the new one is read."""
        with self._lock:
            self._require_open()
            previous = self._active.selected_filename
            if filename == previous:
                return True
            if not self._is_listed(filename):
                self._report_not_found(filename, "not in plan listing")
                return False
            self._transition(SyncState.SWITCHING)
            try:
                if not self._flush_active():
                    logger.warning("Switch to %s aborted: unsaved edits in %s could not be written",
                                   filename, previous)
                    return False
                self._load(filename)
            finally:
                self._transition(SyncState.IDLE)
            self._resume_pending_save()
            logger.info("Selected plan %s (was %s)", filename, previous)
            self._event_bus.publish(PLAN_SELECTED, {"filename": filename, "previous": previous})
            return True

    def create_new_plan(self) -> Optional[str]:
        """Flush, then create and select a fresh empty plan named for today. None on failure."""
        with self._lock:
            self._require_open()
            self._transition(SyncState.SWITCHING)
            try:
                if not self._flush_active():
                    logger.warning("New plan not created: unsaved edits in %s could not be written",
                                   self._active.selected_filename)
                    return None
                self._refresh_listing()
                filename, persisted = self._create_fresh()
                if not persisted:
                    return None
                self._activate(filename, PlanRecord.empty(self._meals), persisted=True)
            finally:
                self._transition(SyncState.IDLE)
            logger.info("Created and selected plan %s", filename)
            return filename

    def delete_plan_file(self, filename: str, confirm: bool = False) -> bool:
        """Delete a plan file. The caller must pass confirm=True (user confirmation).

        If the active file goes away, the newest remaining file is selected, or
        a fresh plan for today is created when none remain.
        """
        if not confirm:
            logger.info("Not deleting %s: deletion was not confirmed", filename)
            return False
        with self._lock:
            self._require_open()
            if not is_plan_filename(filename):
                self._report_not_found(filename, "not a plan filename")
                return False
            deleting_active = filename == self._active.selected_filename
            self._transition(SyncState.SWITCHING)
            try:
                if deleting_active:
                    self._pending_save.cancel()
                else:
                    # Failure keeps the edits in memory; the delete itself is unaffected
                    self._flush_active()
                ok = self._delete(filename)
                self._refresh_listing()
                self._held.pop(filename, None)
                if deleting_active:
                    if self._is_listed(filename, refresh=False):
                        # Nothing was deleted; keep the plan and its edits
                        if self._active.is_dirty():
                            self._persist_active()
                    else:
                        self._activate_newest_or_fresh()
            finally:
                self._transition(SyncState.IDLE)
            if deleting_active and self._active.selected_filename != filename:
                self._resume_pending_save()
            if ok:
                logger.info("Deleted plan %s; active plan is %s", filename, self._active.selected_filename)
                self._event_bus.publish(PLAN_DELETED, {
                    "filename": filename, "active": self._active.selected_filename
                })
            return ok

    # --- Internals: state machine -----------------------------------------
    def _require_open(self):
        if self._active is None:
            raise RuntimeError("Plan session is not open; call open() first")

    def _transition(self, target: SyncState):
        if target not in _TRANSITIONS[self._state]:
            raise InvalidTransition(f"{self._state.name} -> {target.name}")
        logger.debug("Sync state %s -> %s", self._state.name, target.name)
        self._state = target

    def _mark_dirty(self):
        self._transition(SyncState.DIRTY_DEBOUNCING)
        self._pending_save.schedule()

    def _on_debounce(self, token: int):
        with self._lock:
            if not self._pending_save.claim(token):
                # Cancelled or superseded after the timer fired
                return
            self._transition(SyncState.SAVING)
            try:
                self._persist_active()
            finally:
                self._transition(SyncState.IDLE)

    def _flush_active(self) -> bool:
        was_pending = self._pending_save.cancel()
        if not (was_pending or self._active.is_dirty()):
            return True
        return self._persist_active()

    def _persist_active(self) -> bool:
        active = self._active
        if not self._write(active.selected_filename, active.plan):
            return False
        active.mark_persisted()
        self._refresh_listing()
        self._ensure_listed(active.selected_filename)
        logger.debug("Saved plan %s", active.selected_filename)
        self._event_bus.publish(PLAN_SAVED, {"filename": active.selected_filename})
        return True

    def _activate(self, filename: str, plan: PlanRecord, persisted: bool):
        self._active = ActivePlanState(
            filename, plan, self._pending_save, plan.to_dict() if persisted else None
        )
        self._held.pop(filename, None)

    def _load(self, filename: str):
        on_disk = PlanRecord.normalize(self._read(filename), self._meals)
        held = self._held.get(filename)
        self._activate(filename, on_disk, persisted=True)
        if held is not None and held != on_disk:
            # Viewed earlier and refreshed by a catalog save; the file still has the old copies
            self._active.plan = held
            logger.info("Selected %s with recipe copies refreshed since it was read", filename)

    def _resume_pending_save(self):
        """Schedule a save for an active plan that differs from its file after a switch."""
        active = self._active
        if active.last_persisted is not None and active.is_dirty() and not self._pending_save.pending:
            self._mark_dirty()

    def _create_fresh(self):
        """Write an empty plan under the next free name for today. Returns (filename, persisted)."""
        filename = next_available(self._files, today(self._clock()))
        persisted = self._write(filename, PlanRecord.empty(self._meals))
        if persisted:
            self._refresh_listing()
            self._ensure_listed(filename)
            self._event_bus.publish(PLAN_CREATED, {"filename": filename})
        return filename, persisted

    def _activate_newest_or_fresh(self):
        if self._files:
            self._load(self._files[0])
            return
        filename, persisted = self._create_fresh()
        # An unpersisted plan stays dirty and is written by the next save attempt
        self._activate(filename, PlanRecord.empty(self._meals), persisted=persisted)

    # --- Internals: store boundary ----------------------------------------
    def _is_listed(self, filename: str, refresh: bool = True) -> bool:
        if filename in self._files:
            return True
        if refresh:
            self._refresh_listing()
        return filename in self._files

    def _ensure_listed(self, filename: str):
        if filename not in self._files:
            self._files = sort_newest_first(self._files + [filename])

    def _refresh_listing(self) -> bool:
        if self._storage_lost:
            return False
        try:
            names = self._store.list(PLAN_FILENAME_RE)
        except StorageUnavailable as e:
            self._report_unavailable(e)
            return False
        self._files = sort_newest_first(names)
        return True

    def _read(self, filename: str):
        if self._storage_lost:
            return None
        try:
            return self._store.read(filename)
        except StorageUnavailable as e:
            self._report_unavailable(e)
            return None

    def _write(self, filename: str, plan: PlanRecord) -> bool:
        if self._storage_lost:
            logger.debug("Storage unavailable; %s kept in memory", filename)
            return False
        try:
            self._store.write(filename, plan.to_dict())
        except StorageUnavailable as e:
            self._report_unavailable(e)
            return False
        except WriteFailed as e:
            logger.warning("Saving %s failed, edits kept in memory: %s", filename, e)
            self._event_bus.publish(PLAN_WRITE_FAILED, {"filename": filename, "error": str(e)})
            return False
        return True

    def _delete(self, filename: str) -> bool:
        if self._storage_lost:
            return False
        try:
            self._store.delete(filename)
        except ValueError as e:
            # Name rejected by the store before touching anything
            self._report_not_found(filename, str(e))
            return False
        except NotFound as e:
            self._report_not_found(filename, str(e))
            return False
        except WriteFailed as e:
            logger.warning("Deleting %s failed: %s", filename, e)
            self._event_bus.publish(PLAN_WRITE_FAILED, {"filename": filename, "error": str(e)})
            return False
        except StorageUnavailable as e:
            self._report_unavailable(e)
            return False
        return True

    def _report_not_found(self, filename: str, error: str):
        logger.warning("Plan file %s not found: %s", filename, error)
        self._event_bus.publish(PLAN_NOT_FOUND, {"filename": filename, "error": error})

    def _report_unavailable(self, error: Exception):
        if self._storage_lost:
            return
        self._storage_lost = True
        logger.error("Plan storage unavailable for this session: %s", error)
        self._event_bus.publish(STORAGE_UNAVAILABLE, {"error": str(error)})


__all__ = ['PlanSyncEngine', 'ActivePlanState', 'SyncState', 'InvalidTransition']
