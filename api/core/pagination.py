"""
Keyset (cursor) pagination for the video feed.

Total order: (created_at DESC, id DESC). `id` is unique, so the order has no
ties and every record has exactly one position in it.

Cursor format: "<ISO-8601 created_at>::<id>" of the last item on a page.
Callers must only round-trip values they were given.

The order is defined here once. Storage backends implement
`CandidateSource.fetch_candidates` and build it from `select_candidates`
(in-memory) or `seek_clause` / `order_by_clause` (SQL).

Consistency model: forward-only, not snapshot isolation. Records inserted
after a cursor was issued sort ahead of it and only show up on a fresh first
page. Deleting a not-yet-returned record between fetches leaves no gap
marker; that is accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, NamedTuple, Protocol

MIN_LIMIT = 1
MAX_LIMIT = 50
CURSOR_SEPARATOR = "::"

logger = logging.getLogger(__name__)


class InvalidCursorError(ValueError):
    pass


class Boundary(NamedTuple):
    """Decoded cursor: the last position a caller has already seen."""

    created_at: datetime
    id: str


@dataclass(frozen=True)
class Page:
    items: list[dict[str, Any]]
    next_cursor: str | None


class CandidateSource(Protocol):
    async def fetch_candidates(self, boundary: Boundary | None, count: int) -> list[dict[str, Any]]:
        """
        Return up to `count` records strictly after `boundary`, in feed order.
        """
        ...


def clamp_limit(limit: int) -> int:
    return max(MIN_LIMIT, min(int(limit), MAX_LIMIT))


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def encode_cursor(created_at: datetime, record_id: str) -> str:
    # Microseconds: the full precision of both datetime and timestamptz.
    stamp = _as_utc(created_at).isoformat(timespec="microseconds")
    return f"{stamp}{CURSOR_SEPARATOR}{record_id}"


def cursor_for(record: dict[str, Any]) -> str:
    return encode_cursor(record["created_at"], str(record["id"]))


def decode_cursor(cursor: str) -> Boundary:
    """
    Parse a cursor produced by `encode_cursor`.

    Raises:
        InvalidCursorError: missing separator, empty parts, a NUL in the id, or a
            timestamp that is not ISO-8601 or cannot be shifted to UTC.
    """
    raw_time, sep, record_id = (cursor or "").partition(CURSOR_SEPARATOR)
    raw_time = raw_time.strip()
    if not sep or not raw_time or not record_id:
        raise InvalidCursorError("Cursor must look like '<timestamp>::<id>'.")
    # Issued ids never contain NUL, and Postgres text cannot hold it.
    if "\x00" in record_id:
        raise InvalidCursorError("Cursor id contains a NUL character.")

    if raw_time.endswith(("Z", "z")):
        raw_time = raw_time[:-1] + "+00:00"
    try:
        created_at = _as_utc(datetime.fromisoformat(raw_time))
    except (ValueError, OverflowError) as exc:
        # OverflowError: the UTC shift leaves datetime's range (year 1 or 9999).
        raise InvalidCursorError(f"Cursor timestamp is not a usable ISO-8601 value: {raw_time[:64]!r}") from exc

    return Boundary(created_at=created_at, id=record_id)


def sort_key(record: dict[str, Any]) -> tuple[datetime, str]:
    return (_as_utc(record["created_at"]), str(record["id"]))


def is_after(record: dict[str, Any], boundary: Boundary) -> bool:
    """
    True if `record` comes after `boundary` in feed order:
    created_at < t OR (created_at = t AND id < id_t).
    """
    return sort_key(record) < (boundary.created_at, boundary.id)


def select_candidates(
    records: Iterable[dict[str, Any]],
    boundary: Boundary | None,
    count: int,
) -> list[dict[str, Any]]:
    """
    In-memory `fetch_candidates`: one filter-sort-slice pass.
    """
    if boundary is not None:
        records = (r for r in records if is_after(r, boundary))
    ordered = sorted(records, key=sort_key, reverse=True)
    return ordered[:count]


def _column(alias: str, name: str) -> str:
    return f"{alias}.{name}" if alias else name


def order_by_clause(alias: str = "") -> str:
    # "C" collation makes SQL string order match Python's code point order.
    return f'{_column(alias, "created_at")} DESC, {_column(alias, "id")} COLLATE "C" DESC'


def seek_clause(time_param: int, id_param: int, alias: str = "") -> str:
    created_at = _column(alias, "created_at")
    record_id = _column(alias, "id")
    return (
        f"({created_at} < ${time_param} "
        f'OR ({created_at} = ${time_param} AND {record_id} COLLATE "C" < ${id_param}))'
    )


async def fetch_page(
    source: CandidateSource,
    limit: int,
    cursor: str | None = None,
    *,
    strict: bool = False,
) -> Page:
    """
    Fetch one feed page.

    `limit` is clamped to [MIN_LIMIT, MAX_LIMIT]. A malformed cursor falls back
    to the first page and is logged; with `strict=True` it raises
    `InvalidCursorError` instead.
    """
    limit = clamp_limit(limit)

    boundary: Boundary | None = None
    if cursor:
        try:
            boundary = decode_cursor(cursor)
        except InvalidCursorError:
            if strict:
                raise
            logger.warning("invalid_cursor cursor=%r fallback=first_page", cursor[:200])

    # One extra row tells us whether a next page exists.
    rows = await source.fetch_candidates(boundary, limit + 1)
    items = list(rows[:limit])

    next_cursor: str | None = None
    if len(rows) > limit and items:
        next_cursor = cursor_for(items[-1])

    return Page(items=items, next_cursor=next_cursor)
