# catalog_sync/sync/components/options.py
from __future__ import annotations

from typing import Dict, List, Sequence

from catalog_sync.models import CanonicalOption, CanonicalOptionValue, CanonicalVariant

MIN_OPTION_VALUES = 2


def collect_used_option_values(variants: Sequence[CanonicalVariant]) -> List[CanonicalOption]:
    """
    The options actually present on the formatted variants, in first-seen order
    for both option names and their values.
    Returns: [CanonicalOption(name="Color", values=[Red, Blue]), ...]
    """
    used: Dict[str, List[str]] = {}
    for v in variants or []:
        for pair in v.option_values:
            values = used.setdefault(pair.option_name, [])
            if pair.value_name not in values:
                values.append(pair.value_name)
    return [
        CanonicalOption(name=name, values=[CanonicalOptionValue(name=val) for val in values])
        for name, values in used.items()
    ]


def keep_distinguishing(options: Sequence[CanonicalOption]) -> List[CanonicalOption]:
    """A single-value option carries no distinguishing information."""
    return [o for o in options if len(set(o.value_names())) >= MIN_OPTION_VALUES]


def restrict_variants_to_options(
    variants: Sequence[CanonicalVariant],
    options: Sequence[CanonicalOption],
) -> List[CanonicalVariant]:
    names = {o.name for o in options}
    out: List[CanonicalVariant] = []
    for v in variants:
        pairs = [p for p in v.option_values if p.option_name in names]
        out.append(v if len(pairs) == len(v.option_values) else v.model_copy(update={"option_values": pairs}))
    return out
