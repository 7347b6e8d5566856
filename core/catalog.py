import dataclasses
import logging
from typing import Any, Dict, Hashable, Iterable, List, Optional

from core.models import Article

log = logging.getLogger("smartreader.catalog")


class CatalogStore:
    """
    Authoritative in-memory set of articles, keyed by id, in service order.

    All mutation goes through load_all() and update(); records are frozen
    so a caller can never edit one in place.
    """
    def __init__(self):
        self._records: Dict[Hashable, Article] = {}

    def load_all(self, records: Iterable[Article]) -> None:
        fresh: Dict[Hashable, Article] = {}
        for rec in records:
            if rec.id in fresh:
                log.warning("Duplicate article id %r in catalog, keeping the last one.", rec.id)
            fresh[rec.id] = rec
        self._records = fresh
        log.debug("Catalog replaced: %d article(s).", len(fresh))

    def update(self, article_id: Hashable, patch: Dict[str, Any]) -> Optional[Article]:
        current = self._records.get(article_id)
        if current is None:
            log.debug("Catalog update ignored, unknown id %r.", article_id)
            return None
        updated = dataclasses.replace(current, **patch)
        self._records[article_id] = updated
        return updated

    def get(self, article_id: Hashable) -> Optional[Article]:
        return self._records.get(article_id)

    def all(self) -> List[Article]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, article_id: Hashable) -> bool:
        return article_id in self._records
