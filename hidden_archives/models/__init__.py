from .category import TAXONOMY, Category, slugify
from .term_meta import TermMeta

__all__ = ["TAXONOMY", "Category", "TermMeta", "slugify"]
