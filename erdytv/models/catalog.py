"""Published catalog snapshot."""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .category import Category


@dataclass(frozen=True)
class CatalogSnapshot:
    """What consumers observe: always a complete, consistent catalog."""

    categories: Tuple[Category, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None
    # Download fraction in [0, 1]; None when unknown or not downloading
    progress: Optional[float] = None

    @property
    def channel_count(self) -> int:
        return sum(len(category.channels) for category in self.categories)

    def category_names(self) -> List[str]:
        return [category.name for category in self.categories]
