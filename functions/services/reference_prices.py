"""Reference price matching for ObraCost.

Selects the catalog entries relevant to a work description so the
generation prompt can be grounded with realistic cost prices. Matching is
advisory: a failure is logged and generation proceeds without references.
"""

import re
import unicodedata
from typing import Dict, List, Optional, Sequence

import structlog

from models.reference_price import ReferencePriceEntry
from services.reference_catalog import load_catalog

logger = structlog.get_logger()

MAX_KEYWORDS = 8
DEFAULT_LIMIT = 30

STOP_WORDS = frozenset({
    # Spanish
    "de", "del", "la", "el", "en", "y", "con", "para", "por", "una", "un",
    "los", "las", "se", "que", "al", "es", "lo", "su", "a", "o", "e",
    "nuevo", "nueva", "todo", "toda", "cambiar", "poner", "hacer",
    # English
    "the", "and", "for", "with", "from", "into", "new", "old", "all",
    "our", "their", "this", "that", "some", "about", "need", "needs",
    "want", "would", "like", "please",
})

_NON_WORD_RE = re.compile(r"[^\w\s]")


def _normalize(text: str) -> str:
    """Lowercase and strip accents so 'demolición' matches 'demolicion'."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def _stem(word: str) -> str:
    """Crude stem: drop a plural 's' and keep the first five letters."""
    if len(word) > 3 and word.endswith("s"):
        word = word[:-1]
    return word[:5]


def _tokens(text: str) -> List[str]:
    return _NON_WORD_RE.sub(" ", _normalize(text)).split()


def extract_keywords(text: str, max_keywords: int = MAX_KEYWORDS) -> List[str]:
    """Significant words of a description, in order of appearance.

    Words of two letters or less and stop words are ignored.
    """
    keywords: List[str] = []
    for word in _tokens(text):
        if len(word) <= 2 or word in STOP_WORDS or word.isdigit() or word in keywords:
            continue
        keywords.append(word)
        if len(keywords) >= max_keywords:
            break
    return keywords


class ReferencePriceMatcher:
    """Keyword relevance matcher over the static reference catalog.

    The exact ranking is an implementation detail; callers rely only on
    text in, relevant entries grouped by category out.
    """

    def __init__(
        self,
        catalog: Optional[Sequence[ReferencePriceEntry]] = None,
        limit: int = DEFAULT_LIMIT
    ):
        """Initialize ReferencePriceMatcher.

        Args:
            catalog: Catalog entries (default: the bundled catalog).
            limit: Maximum number of entries returned.
        """
        self.catalog = list(catalog) if catalog is not None else load_catalog()
        self.limit = limit
        self._index = [
            (entry, self._entry_stems(entry))
            for entry in self.catalog
        ]

    @staticmethod
    def _entry_stems(entry: ReferencePriceEntry) -> frozenset:
        words = _tokens(entry.description) + _tokens(entry.category)
        for keyword in entry.keywords:
            words.extend(_tokens(keyword))
        return frozenset(_stem(w) for w in words if len(w) > 2)

    def search(self, text: str) -> List[ReferencePriceEntry]:
        """Relevant entries for a description, best match first."""
        keyword_stems = [_stem(k) for k in extract_keywords(text)]
        if not keyword_stems:
            return []

        scored = []
        for position, (entry, stems) in enumerate(self._index):
            score = sum(1 for stem in keyword_stems if stem in stems)
            if score > 0:
                scored.append((-score, position, entry))

        scored.sort(key=lambda row: (row[0], row[1]))
        return [entry for _, _, entry in scored[:self.limit]]

    def match(self, text: str) -> Dict[str, List[ReferencePriceEntry]]:
        """Relevant entries grouped by category; empty on any failure.

        Args:
            text: Work type, description and project name concatenated.

        Returns:
            Category -> entries, categories in order of best match.
        """
        try:
            entries = self.search(text)
        except Exception as e:
            logger.warning("reference_price_match_failed", error=str(e))
            return {}

        groups: Dict[str, List[ReferencePriceEntry]] = {}
        for entry in entries:
            groups.setdefault(entry.category, []).append(entry)

        logger.info(
            "reference_prices_matched",
            entries=len(entries),
            categories=list(groups.keys())
        )
        return groups


def format_reference_section(groups: Dict[str, List[ReferencePriceEntry]]) -> str:
    """Render matched entries as the prompt's reference price section.

    Returns an empty string when nothing matched.
    """
    if not groups:
        return ""

    lines = [
        "REFERENCE COST PRICES (EUR, before margin). Use them as a guide for "
        "matching items and stay consistent with them:"
    ]
    for category, entries in groups.items():
        lines.append(f"\n{category}:")
        lines.extend(entry.prompt_line() for entry in entries)
    return "\n".join(lines)
