# catalog_sync/sync/components/media.py
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin

from catalog_sync.magento.models import MagentoProduct
from catalog_sync.models import CanonicalMedia


def media_url(base_url: str, file: str) -> str:
    """Magento gallery paths look like "/a/b/ab123.jpg"; absolute URLs pass through."""
    if not file:
        return ""
    if file.startswith("http://") or file.startswith("https://"):
        return file
    return urljoin((base_url or "").rstrip("/") + "/", file.lstrip("/"))


def image_join_keys(records: Iterable[MagentoProduct]) -> Dict[int, str]:
    """
    Alt text per record id for the variant image join. The record name is the key;
    names shared by several records get the sku appended so every key stays unique.
        {101: "Acme Tee - Red", 102: "Acme Tee (TEE-2)", 103: "Acme Tee (TEE-3)"}
    """
    records = list(records)
    counts = Counter(r.name for r in records)
    return {r.id: (r.name if counts[r.name] == 1 else f"{r.name} ({r.sku})") for r in records}


def primary_image(record: MagentoProduct, base_url: str, alt_text: Optional[str] = None) -> Optional[CanonicalMedia]:
    """First gallery file of a record; alt text is the join key (record name unless given)."""
    gallery = record.gallery()
    if not gallery:
        return None
    alt = record.name if alt_text is None else alt_text
    return CanonicalMedia(url=media_url(base_url, gallery[0].file), alt_text=alt)


def gallery_media(record: MagentoProduct, base_url: str) -> List[CanonicalMedia]:
    """
    Every gallery entry of a standalone record. The first entry doubles as the
    variant image, so it carries the record name as alt text; the rest keep their
    labels, numbered by position when a label repeats the record name.
    """
    out: List[CanonicalMedia] = []
    seen = set()
    for idx, entry in enumerate(record.gallery()):
        url = media_url(base_url, entry.file)
        if url in seen:
            continue
        seen.add(url)
        if not out:
            alt = record.name
        else:
            alt = entry.label or ""
            if alt == record.name:
                alt = f"{alt} ({idx + 1})"
        out.append(CanonicalMedia(url=url, alt_text=alt))
    return out
