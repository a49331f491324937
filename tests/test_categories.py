from categories import (
    CATEGORIES, CATEGORY_MAP, UNCATEGORIZED, category_exists, find_category_by_color,
    get_category_color, normalize_category_id, recover_category,
)


def test_eight_canonical_categories():
    assert len(CATEGORIES) == 8
    assert UNCATEGORIZED in CATEGORY_MAP


def test_aliases_map_to_merged_ids():
    assert normalize_category_id("bills") == "bills-utilities"
    assert normalize_category_id("utilities") == "bills-utilities"
    assert normalize_category_id("health") == "health-fitness"
    assert normalize_category_id("fitness") == "health-fitness"
    assert normalize_category_id("food") == "food"


def test_missing_or_unknown_category_falls_back():
    assert normalize_category_id(None) == UNCATEGORIZED
    assert normalize_category_id("") == UNCATEGORIZED
    assert normalize_category_id("groceries") == UNCATEGORIZED


def test_category_exists_and_color():
    assert category_exists("bills")
    assert not category_exists("groceries")
    assert not category_exists(None)
    assert get_category_color("groceries") == CATEGORY_MAP[UNCATEGORIZED].color
    assert get_category_color("transport") == "#ff5900ff"


def test_find_category_by_color():
    assert find_category_by_color("#ffd000") == "bills-utilities"
    assert find_category_by_color("#FFD000FF") == "bills-utilities"
    assert find_category_by_color("#ffd505") == "bills-utilities"
    assert find_category_by_color("#000000") is None
    assert find_category_by_color("red") is None
    assert find_category_by_color(None) is None


def test_recover_category():
    assert recover_category({"category": "bills"}) == "bills-utilities"
    assert recover_category({"color": "#ff5900ff"}) == "transport"
    assert recover_category({"category": "", "color": "#000000"}) == UNCATEGORIZED
    assert recover_category({}) == UNCATEGORIZED
