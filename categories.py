"""
Expense categories

Eight canonical category ids with display names and chart colors, plus the
legacy aliases older expense documents still carry.
"""
import math
import re
from dataclasses import dataclass
from typing import Optional

UNCATEGORIZED = "uncategorized"


@dataclass(frozen=True)
class CategoryDef:
    id: str
    name: str
    color: str
    icon: str


CATEGORIES = (
    CategoryDef("shopping", "Shopping", "#7de7ffff", "shopping"),
    CategoryDef("bills-utilities", "Bills & Utilities", "#ffd000ff", "file-document"),
    CategoryDef("transport", "Transport", "#ff5900ff", "car"),
    CategoryDef("entertainment", "Entertainment", "#09ff00ff", "movie"),
    CategoryDef("health-fitness", "Health & Fitness", "#00ffa6ff", "heart-pulse"),
    CategoryDef("food", "Food", "#ffa60bff", "food"),
    CategoryDef("home", "Home", "#61caffff", "home"),
    CategoryDef(UNCATEGORIZED, "Uncategorized", "#547ab3ff", "dots-horizontal"),
)

CATEGORY_MAP = {c.id: c for c in CATEGORIES}

# bills + utilities and health + fitness were merged to keep 8 chips
CATEGORY_ALIASES = {
    "bills": "bills-utilities",
    "utilities": "bills-utilities",
    "health": "health-fitness",
    "fitness": "health-fitness",
}

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})([0-9a-fA-F]{2})?$")
_COLOR_MATCH_DISTANCE = 40


def normalize_category_id(category: Optional[str]) -> str:
    if not category or not isinstance(category, str):
        return UNCATEGORIZED
    key = category.strip()
    key = CATEGORY_ALIASES.get(key, key)
    return key if key in CATEGORY_MAP else UNCATEGORIZED


def category_exists(category: Optional[str]) -> bool:
    if not category:
        return False
    key = category.strip()
    return CATEGORY_ALIASES.get(key, key) in CATEGORY_MAP


def get_category_color(category: Optional[str]) -> str:
    return CATEGORY_MAP[normalize_category_id(category)].color


def _rgb(color: str):
    m = _HEX_RE.match(color.strip())
    if not m:
        return None
    rgb = m.group(1)
    return int(rgb[0:2], 16), int(rgb[2:4], 16), int(rgb[4:6], 16)


def find_category_by_color(color: Optional[str]) -> Optional[str]:
    """Match a stored color back to a canonical category.

    Exact 6-digit hex matches win; otherwise the nearest canonical color is
    accepted if it lies within a small RGB distance.
    """
    if not color:
        return None
    target = _rgb(color)
    if target is None:
        return None
    best_id, best_distance = None, None
    for c in CATEGORIES:
        candidate = _rgb(c.color)
        if candidate == target:
            return c.id
        distance = math.dist(candidate, target)
        if best_distance is None or distance < best_distance:
            best_id, best_distance = c.id, distance
    if best_distance is not None and best_distance < _COLOR_MATCH_DISTANCE:
        return best_id
    return None


def recover_category(expense: dict) -> str:
    category = expense.get("category")
    if category:
        return normalize_category_id(category)
    return find_category_by_color(expense.get("color")) or UNCATEGORIZED
