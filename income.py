"""
Income normalization

The client keeps exactly one income record per name. Records are sorted
newest first before deduplication so the latest entry for a name wins even
if the backend ordering changes.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from timeframes import parse_timestamp

DEFAULT_INCOME_NAMES = ("Salary", "Freelance", "Investments")


def format_amount(value) -> str:
    """Render an amount as a plain decimal string ("5000", "12.5")."""
    if value is None:
        return "0.00"
    if isinstance(value, str):
        return value.strip() or "0.00"
    try:
        d = Decimal(str(value))
    except InvalidOperation:
        return "0.00"
    if not d.is_finite():
        return "0.00"
    if d == d.to_integral_value():
        return format(d.to_integral_value(), "f")
    return format(d.normalize(), "f")


def _record_id(raw: dict) -> Optional[str]:
    value = raw.get("id") or raw.get("_id")
    return str(value) if value is not None else None


def _newest_first(items: List[dict]) -> List[dict]:
    # stable: undated records keep their relative order after dated ones
    dated = [(parse_timestamp(it.get("created_at")), it) for it in items]
    with_ts = [pair for pair in dated if pair[0] is not None]
    without_ts = [it for ts, it in dated if ts is None]
    with_ts.sort(key=lambda pair: pair[0], reverse=True)
    return [it for _, it in with_ts] + without_ts


def normalize_income(items: Optional[Iterable]) -> List[dict]:
    candidates = [raw for raw in (items or []) if isinstance(raw, dict) and raw.get("name")]
    by_name = {}
    for raw in _newest_first(candidates):
        name = raw["name"]
        if name in by_name:
            continue
        created_at = raw.get("created_at")
        by_name[name] = {
            "id": _record_id(raw),
            "name": name,
            "amount": format_amount(raw.get("amount")),
            "created_at": created_at.isoformat() if isinstance(created_at, datetime) else created_at,
        }

    ordered = [by_name.pop(name) for name in DEFAULT_INCOME_NAMES if name in by_name]
    ordered.extend(by_name.values())
    return ordered


def merge_income_update(items: Iterable[dict], payload: Optional[dict]) -> List[dict]:
    """Fold an updated income record into a normalized list."""
    items = [dict(it) for it in items or []]
    payload = payload or {}
    key = _record_id(payload)
    if key:
        for index, item in enumerate(items):
            if _record_id(item) == key:
                merged = {**item, **payload}
                merged["amount"] = format_amount(payload.get("amount", item.get("amount")))
                merged["id"] = key
                items[index] = merged
                break
        else:
            items.append({**payload, "id": key, "amount": format_amount(payload.get("amount"))})
    return normalize_income(items)
