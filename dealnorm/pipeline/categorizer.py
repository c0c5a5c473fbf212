"""Keyword-based category classification over product names."""

import re
from typing import Dict, List, Optional, Pattern, Sequence, Tuple, Union

from dealnorm.schemas import Category


# Checked in order, first match wins. Shoes come first so "Dress Shoe" is a
# shoe, and accessories precede clothing so "Shirt Collar Watch" is a watch.
CATEGORY_KEYWORDS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (
        Category.SHOES,
        (
            "shoe", "sneaker", "boot", "bootie", "sandal", "heel", "loafer",
            "trainer", "cleat", "slipper", "pump", "mule", "slide", "clog",
            "espadrille", "moccasin", "flip-flop", "footwear",
        ),
    ),
    (
        Category.ACCESSORIES,
        (
            "bag", "backpack", "handbag", "tote", "purse", "clutch", "belt",
            "hat", "beanie", "wallet", "sunglasses", "scarf", "glove",
            "jewelry", "jewellery", "necklace", "bracelet", "earring", "watch",
            "keychain",
        ),
    ),
    (
        Category.CLOTHING,
        (
            "shirt", "t-shirt", "tee", "top", "blouse", "polo", "tank", "pant",
            "trouser", "jean", "legging", "jogger", "short", "skirt", "dress",
            "jacket", "coat", "parka", "blazer", "vest", "hoodie", "sweatshirt",
            "sweater", "cardigan", "pullover", "jumper", "bodysuit", "jumpsuit",
            "romper", "suit", "sock", "swimsuit", "bikini",
        ),
    ),
)


def _compile(keywords: Sequence[str]) -> Pattern:
    # Whole words only; a plain "s"/"es" plural counts as the same word.
    alternatives = "|".join(re.escape(kw) for kw in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})(?:e?s)?\b", re.IGNORECASE)


class Categorizer:
    """Classifies product names into the closed category taxonomy.

    Total and deterministic: a name matching no keyword set gets the
    caller's default, which collectors usually set to their site's dominant
    category.
    """

    def __init__(
        self,
        keyword_sets: Optional[Sequence[Tuple[Category, Sequence[str]]]] = None,
        default: Union[Category, str] = Category.OTHER,
    ):
        sets = keyword_sets if keyword_sets is not None else CATEGORY_KEYWORDS
        self._patterns: List[Tuple[Category, Pattern]] = [
            (Category(category), _compile(keywords)) for category, keywords in sets if keywords
        ]
        self.default = Category(default)

    def categorize(
        self, name: str, default: Union[Category, str, None] = None
    ) -> Category:
        for category, pattern in self._patterns:
            if name and pattern.search(name):
                return category
        return Category(default) if default is not None else self.default

    def keyword_hits(self, name: str) -> Dict[Category, List[str]]:
        """Every keyword match per category, for diagnosing misclassification."""
        hits: Dict[Category, List[str]] = {}
        for category, pattern in self._patterns:
            found = [m.group(0) for m in pattern.finditer(name or "")]
            if found:
                hits[category] = found
        return hits


_default_categorizer = Categorizer()


def categorize(name: str, default: Union[Category, str] = Category.OTHER) -> Category:
    """Categorize with the built-in keyword sets."""
    return _default_categorizer.categorize(name, default)
