# catalog_sync/magento/grouping.py
# ---------------------------------------------------------
# Partition a flat Magento product listing into families:
#   configurable parent + its simple children, or a standalone simple.
# Parents are not in the creation window, so they are looked up by a
# best-effort name fragment derived from each simple's name.
# ---------------------------------------------------------
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List

from catalog_sync.magento.models import MagentoProduct
from catalog_sync.models import Family
from catalog_sync.sync.components.util import dedupe_preserve_order, maybe_await

logger = logging.getLogger(__name__)

CandidateFetcher = Callable[[List[str]], "Awaitable[List[MagentoProduct]] | List[MagentoProduct]"]


def derive_name_fragment(name: str) -> str:
    """
    "Brand Flavor 30ml - Red" -> "Brand Flavor 30ml"
    "Brand Flavor 30ml"       -> "Brand Flavor"
    Text before the first hyphen, minus its last space-separated token.
    """
    head = (name or "").split("-")[0]
    return " ".join(head.split(" ")[:-1]).strip()


@dataclass
class GroupingReport:
    families: List[Family] = field(default_factory=list)
    matched: int = 0
    # simple records that matched no configurable and fell back to standalone
    unmatched: int = 0
    configurables_ignored: int = 0

    def stats(self) -> Dict[str, int]:
        return {
            "families": len(self.families),
            "matched_children": self.matched,
            "standalone_unmatched": self.unmatched,
            "configurables_in_window_ignored": self.configurables_ignored,
        }


async def group_into_families(
    records: Iterable[MagentoProduct],
    fetch_candidates: CandidateFetcher,
) -> GroupingReport:
    records = list(records)
    simples = [r for r in records if not r.is_configurable]
    report = GroupingReport(configurables_ignored=len(records) - len(simples))

    fragments = dedupe_preserve_order(derive_name_fragment(s.name) for s in simples)
    candidates: List[MagentoProduct] = []
    if fragments:
        candidates = list(await maybe_await(fetch_candidates(fragments)) or [])

    children_by_parent: Dict[int, List[MagentoProduct]] = {c.id: [] for c in candidates}
    standalone: List[MagentoProduct] = []

    for simple in simples:
        parent = next(
            (c for c in candidates if simple.id in c.extension_attributes.configurable_product_links),
            None,
        )
        if parent is None:
            standalone.append(simple)
            continue
        children_by_parent[parent.id].append(simple)
        report.matched += 1

    seen_parents = set()
    for cand in candidates:
        if cand.id in seen_parents:
            continue
        seen_parents.add(cand.id)
        report.families.append(Family(parent=cand, children=children_by_parent[cand.id]))

    for simple in standalone:
        report.families.append(Family(parent=None, children=[simple]))
    report.unmatched = len(standalone)

    if simples:
        logger.info(
            "[GROUP] %d of %d simple records matched no configurable (%d candidates, %d fragments)",
            report.unmatched, len(simples), len(candidates), len(fragments),
        )
    return report
