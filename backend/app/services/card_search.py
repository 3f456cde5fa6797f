"""Card search — numeric lookup, Arabic fuzzy name matching, and ranking.

Works on any sequence of card-like objects (ORM ``Card`` rows, ``CardOut``
schemas, or anything exposing the same attribute names).  No I/O: the
caller loads the candidate cards and hands them in.

Query handling:
  - blank query          → all cards, id ascending (optionally one date)
  - whole integer        → id == n, supplier_card_number == n, or the
                           vehicle number contains the query (case-insensitive)
  - anything else        → every query word must appear in the normalized
                           farmer name or the normalized supplier name
Name matches are ranked: exact farmer name, then farmer names starting
with the query, shorter names before longer ones, input order for ties.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Sequence, TypeVar

from app.utils.arabic import matches_arabic, normalize_arabic

CardT = TypeVar("CardT")

_INTEGER_QUERY = re.compile(r"[+-]?[0-9]+")

MAX_SUGGESTIONS = 8


def _as_date(value) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _on_date(cards: Iterable[CardT], date_filter) -> list[CardT]:
    wanted = _as_date(date_filter)
    return [c for c in cards if _as_date(getattr(c, "date", None)) == wanted]


def parse_card_number(query: str | None) -> int | None:
    """Integer value of ``query`` if the whole trimmed query is one, else None."""
    text = (query or "").strip()
    if not _INTEGER_QUERY.fullmatch(text):
        return None
    return int(text)


def relevance_key(name: str | None, normalized_query: str) -> tuple[int, int]:
    """Sort key: exact match, then prefix match, then shorter name."""
    key = normalize_arabic(name)
    if key == normalized_query:
        tier = 0
    elif key.startswith(normalized_query):
        tier = 1
    else:
        tier = 2
    return tier, len(key)


def rank_by_relevance(cards: Sequence[CardT], query: str) -> list[CardT]:
    """Stable relevance ordering on the farmer name."""
    normalized_query = normalize_arabic(query)
    return sorted(
        cards,
        key=lambda c: relevance_key(getattr(c, "farmer_name", ""), normalized_query),
    )


def _matches_number(card, number: int, raw_query: str) -> bool:
    if card.id == number or getattr(card, "supplier_card_number", None) == number:
        return True
    vehicle = (getattr(card, "vehicle_number", None) or "").lower()
    return raw_query.lower() in vehicle


def _matches_name(card, query: str) -> bool:
    return (
        matches_arabic(query, getattr(card, "farmer_name", None))
        or matches_arabic(query, getattr(card, "supplier_name", None))
    )


def search_cards(
    cards: Sequence[CardT],
    query: str | None,
    date_filter: date | str | None = None,
) -> list[CardT]:
    """Filter and order ``cards`` for a search box query and optional date."""
    text = (query or "").strip()

    if not text:
        results = sorted(cards, key=lambda c: c.id)
        if date_filter:
            results = _on_date(results, date_filter)
        return results

    number = parse_card_number(text)
    if number is not None:
        results = [
            c for c in sorted(cards, key=lambda c: c.id)
            if _matches_number(c, number, text)
        ]
        if date_filter:
            results = _on_date(results, date_filter)
        return results

    results = [c for c in cards if _matches_name(c, text)]
    if date_filter:
        results = _on_date(results, date_filter)
    return rank_by_relevance(results, text)


def suggest_names(
    cards: Sequence,
    query: str | None,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Distinct farmer/supplier names matching ``query``, best first."""
    if not (query or "").strip():
        return []

    names: list[str] = []
    seen: set[str] = set()
    for attr in ("farmer_name", "supplier_name"):
        for card in cards:
            name = getattr(card, attr, None)
            if name and name not in seen:
                seen.add(name)
                names.append(name)

    normalized_query = normalize_arabic(query)
    matching = [n for n in names if matches_arabic(query, n)]
    matching.sort(key=lambda n: relevance_key(n, normalized_query))
    return matching[:limit]
