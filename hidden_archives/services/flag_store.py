"""
Per-category "hidden archive" flag, persisted as term metadata.

A category with no stored row reads as not hidden. Values are stored as
"1" / "0" so an explicit unhide stays visible in the metadata table until
the uninstall sweep removes it.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from hidden_archives.errors import StorageError
from hidden_archives.models import TermMeta

logger = logging.getLogger(__name__)

META_KEY = "_hpc_hide_product_cat_archive"


@dataclass
class SweepResult:
    """Outcome of a best-effort bulk deletion."""
    removed: int = 0
    failed: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class FlagStore:
    def __init__(self, session, meta_key: str = META_KEY):
        self.session = session
        self.meta_key = meta_key

    def _query(self, category_id):
        return self.session.query(TermMeta).filter_by(term_id=category_id, meta_key=self.meta_key)

    def get(self, category_id: int) -> bool:
        """Stored flag for ``category_id``; False when nothing is stored."""
        try:
            value = (
                self.session.query(TermMeta.meta_value)
                .filter_by(term_id=category_id, meta_key=self.meta_key)
                .scalar()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"Could not read archive flag for category {category_id}") from exc
        return value == "1"

    def set(self, category_id: int, hidden: bool) -> None:
        """Upsert the flag. Setting the same value twice is a no-op in effect."""
        try:
            row = self._query(category_id).one_or_none()
            if row is None:
                row = TermMeta(term_id=category_id, meta_key=self.meta_key)
                self.session.add(row)
            row.meta_value = "1" if hidden else "0"
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"Could not store archive flag for category {category_id}") from exc

        logger.info(
            "Archive flag updated",
            extra={"category_id": category_id, "hidden": bool(hidden)},
        )

    def hidden_ids(self, category_ids: Optional[Iterable[int]] = None) -> Set[int]:
        """Ids whose flag is set, optionally restricted to ``category_ids``."""
        try:
            query = self.session.query(TermMeta.term_id).filter_by(meta_key=self.meta_key, meta_value="1")
            if category_ids is not None:
                ids = list(category_ids)
                if not ids:
                    return set()
                query = query.filter(TermMeta.term_id.in_(ids))
            return {row.term_id for row in query.all()}
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError("Could not list hidden category archives") from exc

    def delete_all(self, category_ids: Iterable[int]) -> SweepResult:
        """
        Remove the stored flag for every id in ``category_ids``.

        Each id is deleted and committed on its own; a failure is logged and
        the sweep moves on to the next id.
        """
        result = SweepResult()
        for category_id in category_ids:
            try:
                result.removed += self._query(category_id).delete(synchronize_session=False)
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                result.failed.append(category_id)
                logger.error(
                    f"Failed to delete archive flag for category {category_id}: {exc}",
                    extra={"category_id": category_id},
                )
        return result
