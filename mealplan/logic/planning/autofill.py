"""Auto-fill empty plan slots from the catalog using the per-slot picker filters."""
import logging
import random
from typing import List, Optional

from mealplan.domain.Catalog import RecipeCatalog
from mealplan.domain.FilterState import FilterState, SlotFilter
from mealplan.domain.Plan import PlanRecord
from mealplan.domain.Recipe import Recipe

logger = logging.getLogger(__name__)


def candidate_pool(catalog: RecipeCatalog, slot_filter: SlotFilter) -> List[Recipe]:
    """Season pool narrowed by sections, then any-tag (if set), then name search (if set)."""
    pool = [r for r in catalog.pool(slot_filter.season) if r.section in slot_filter.sections]
    if slot_filter.tags:
        pool = [r for r in pool if r.has_any_tag(slot_filter.tags)]
    if slot_filter.search_text:
        pool = [r for r in pool if r.matches_search(slot_filter.search_text)]
    return pool


def auto_fill(plan: PlanRecord, catalog: RecipeCatalog, filters: FilterState,
              rng: Optional[random.Random] = None) -> int:
    """Fill empty slots with a random candidate. Returns the number of slots filled.

    Rules:
      - Filled slots are never overwritten.
      - A slot without a section filter stays empty (no filter is not "any recipe").
      - An empty candidate pool leaves the slot empty.
    """
    rng = rng or random.Random()
    filled = 0
    for day, meal, slot in plan.slots():
        if not slot.is_empty:
            continue
        slot_filter = filters.get(day, meal)
        if not slot_filter.sections:
            continue
        pool = candidate_pool(catalog, slot_filter)
        if not pool:
            logger.debug("No candidates for %s/%s with %r", day, meal, slot_filter)
            continue
        plan.set(day, meal, rng.choice(pool))
        filled += 1
    return filled


__all__ = ['candidate_pool', 'auto_fill']
