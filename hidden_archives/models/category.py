import re
import unicodedata
from datetime import datetime

from hidden_archives.extensions import db

TAXONOMY = "product_cat"

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_SLUG_HYPHENATE = re.compile(r"[-\s]+")


def slugify(value):
    """Lowercase ASCII slug: 'Dé Kit 2' -> 'de-kit-2'."""
    value = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    value = _SLUG_STRIP.sub("", value).strip().lower()
    return _SLUG_HYPHENATE.sub("-", value).strip("-_")


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)
    taxonomy = db.Column(db.String(32), nullable=False, default=TAXONOMY, index=True)
    description = db.Column(db.Text, default="")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    meta = db.relationship(
        "TermMeta",
        backref="term",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="dynamic",
    )

    @classmethod
    def find_by_slug(cls, slug, taxonomy=TAXONOMY):
        return cls.query.filter_by(slug=slug, taxonomy=taxonomy).first()

    @classmethod
    def ids_in_taxonomy(cls, taxonomy=TAXONOMY):
        rows = db.session.query(cls.id).filter_by(taxonomy=taxonomy).order_by(cls.id).all()
        return [row.id for row in rows]

    @classmethod
    def existing_ids(cls, ids, taxonomy=TAXONOMY):
        """Subset of ``ids`` that are categories in ``taxonomy``."""
        ids = list(ids)
        if not ids:
            return set()
        rows = db.session.query(cls.id).filter(cls.id.in_(ids), cls.taxonomy == taxonomy).all()
        return {row.id for row in rows}

    def __repr__(self):
        return f"<Category id={self.id} slug={self.slug!r}>"
