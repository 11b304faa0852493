from . import tables
from .repo import transaction
from .schemas import Page, PageParams
from .service import offset, slugify

__all__ = [
    "tables",
    "transaction",
    "Page",
    "PageParams",
    "offset",
    "slugify",
]
