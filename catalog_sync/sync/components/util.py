# catalog_sync/sync/components/util.py
from __future__ import annotations

import inspect
from typing import Any, Hashable, Iterable, List, TypeVar

T = TypeVar("T", bound=Hashable)


async def maybe_await(x):
    if inspect.isawaitable(x):
        return await x
    return x


def dedupe_preserve_order(items: Iterable[T]) -> List[T]:
    seen = set()
    out = []
    for x in items or []:
        if not x or x in seen:
            continue
        seen.add(x)
        out.append(x)
    return out


def format_price(value: Any) -> str:
    """Numeric price as a string, unrounded; 20.0 -> "20", 19.99 -> "19.99"."""
    if value is None:
        return "0"
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify_value(value: Any) -> str:
    """Custom-attribute value as text; lists are comma-joined."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def chunked(items: List[Any], size: int) -> List[List[Any]]:
    size = max(1, int(size or 1))
    return [items[i:i + size] for i in range(0, len(items), size)]
