"""Naming and ordering of dated plan files: MP_<YYYY-MM-DD>[_<N>].json"""
import re
from datetime import date, datetime
from typing import Iterable, List, Optional

from mealplan.utilities.constants import PLAN_PREFIX, RECIPES_PREFIX, STEM_DATE_FORMAT

PLAN_FILENAME_RE = re.compile(r'^' + re.escape(PLAN_PREFIX) + r'(\d{4}-\d{2}-\d{2})(?:_(\d+))?\.json$')
RECIPES_FILENAME_RE = re.compile(r'^' + re.escape(RECIPES_PREFIX) + r'\d{4}-\d{2}-\d{2}\.json$')


def today(day: Optional[date] = None) -> str:
    """Date stem for the given (default: current local) date, e.g. 'MP_2025-01-01'."""
    day = day or date.today()
    return f"{PLAN_PREFIX}{day.strftime(STEM_DATE_FORMAT)}"


def recipes_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{RECIPES_PREFIX}{day.strftime(STEM_DATE_FORMAT)}.json"


def is_plan_filename(filename: str) -> bool:
    return isinstance(filename, str) and PLAN_FILENAME_RE.match(filename) is not None


def next_available(existing: Iterable[str], date_stem: str) -> str:
    """First free filename for date_stem.

    An unsuffixed '<stem>.json' counts as counter 0; the result is one past the
    highest counter seen, so it never collides and grows monotonically per day.
    """
    stem_re = re.compile(r'^' + re.escape(date_stem) + r'(?:_(\d+))?\.json$')
    counters = []
    for name in existing:
        m = stem_re.match(name)
        if m:
            counters.append(int(m.group(1)) if m.group(1) else 0)
    if not counters:
        return f"{date_stem}.json"
    return f"{date_stem}_{max(counters) + 1}.json"


def format_label(filename: str) -> str:
    """Human label like 'Jan 1, 2025' or 'Jan 1, 2025 (2)'. Unparseable names come back unchanged."""
    m = PLAN_FILENAME_RE.match(filename) if isinstance(filename, str) else None
    if not m:
        return filename
    try:
        d = datetime.strptime(m.group(1), STEM_DATE_FORMAT).date()
    except ValueError:
        return filename
    label = f"{d.strftime('%b')} {d.day}, {d.year}"
    if m.group(2):
        label += f" ({m.group(2)})"
    return label


def _sort_key(filename: str):
    m = PLAN_FILENAME_RE.match(filename)
    if m:
        return (1, m.group(1), int(m.group(2) or 0))
    # Non-plan names go last
    return (0, filename, 0)


def sort_newest_first(filenames: Iterable[str]) -> List[str]:
    """Descending by date, then by counter (numeric). Stable for equal keys."""
    return sorted(filenames, key=_sort_key, reverse=True)


__all__ = [
    'PLAN_FILENAME_RE', 'RECIPES_FILENAME_RE', 'today', 'recipes_filename', 'is_plan_filename',
    'next_available', 'format_label', 'sort_newest_first'
]
