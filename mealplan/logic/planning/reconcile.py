"""Refresh denormalized recipe copies in plans after the catalog was saved.

Matching is by exact recipe name across both seasons. A slot whose recipe no
longer exists (renamed or deleted) keeps its old copy; nothing is cleared.
"""
import logging
from typing import Iterable

from mealplan.domain.Catalog import RecipeCatalog
from mealplan.domain.Plan import PlanRecord

logger = logging.getLogger(__name__)


def reconcile_plan(plan: PlanRecord, catalog: RecipeCatalog) -> int:
    """Refresh every filled slot of one plan. Returns the number of slots that changed."""
    changed = 0
    orphaned = []
    for day, meal, slot in plan.slots():
        if slot.is_empty:
            continue
        if catalog.find_by_name(slot.name) is None:
            orphaned.append(f"{day}/{meal}={slot.name}")
            continue
        if slot.refresh(catalog):
            changed += 1
    if orphaned:
        logger.debug("Slots without catalog match kept as-is: %s", ", ".join(orphaned))
    return changed


def reconcile_plans(plans: Iterable[PlanRecord], catalog: RecipeCatalog) -> int:
    return sum(reconcile_plan(p, catalog) for p in plans)


__all__ = ['reconcile_plan', 'reconcile_plans']
