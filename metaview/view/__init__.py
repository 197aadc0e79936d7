"""Text normalization and relevance filtering for list item tables.

``view.table`` ties these together and is imported on its own since it
depends on the vault loader.
"""

from .cleaner import clean
from .compose import compose, decorate
from .identity import normalize
from .metadata import MetadataMap, extract
from .relevance import Subject, filtered_links, is_visible

__all__ = [
    "clean",
    "compose",
    "decorate",
    "normalize",
    "MetadataMap",
    "extract",
    "Subject",
    "filtered_links",
    "is_visible",
]
