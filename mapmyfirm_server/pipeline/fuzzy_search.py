"""
Pipeline - Weighted Fuzzy Search

Self-contained multi-field fuzzy scorer for matching short queries
(city names) against hub pages.

Score = product over matching fields of field_score ** (weight * norm)
  field_score: approximate-substring edit distance / query length
  norm:        1 / sqrt(token count of the field), 3 decimals
Lower is better; 0 is a perfect match.
"""

import math
import re
import sys
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar
from dataclasses import dataclass


T = TypeVar("T")

EPSILON = sys.float_info.epsilon

_SPACES = re.compile(r" +")


@dataclass
class SearchKey:
    """A searchable field and its relative weight."""
    name: str
    weight: float = 1.0


@dataclass
class FuzzyResult(Generic[T]):
    """One scored candidate."""
    item: T
    score: float
    ref_index: int


def approximate_substring_distance(pattern: str, text: str) -> int:
    """
    Fewest edits turning ``pattern`` into some substring of ``text``.

    Edit-distance dynamic programme where the match may start and end
    anywhere in the text (the first row is all zeros).
    """
    m = len(pattern)
    column = list(range(m + 1))
    best = m

    for ch in text:
        diagonal = column[0]
        column[0] = 0
        for i in range(1, m + 1):
            above = column[i]
            cost = 0 if pattern[i - 1] == ch else 1
            column[i] = min(
                above + 1,           # skip a text character
                column[i - 1] + 1,   # skip a pattern character
                diagonal + cost,     # match / substitute
            )
            diagonal = above
        if column[m] < best:
            best = column[m]

    return best


def field_norm(text: str) -> float:
    """Field length norm: longer fields weigh a match less."""
    tokens = len(_SPACES.findall(text)) + 1
    return round(1 / math.sqrt(tokens), 3)


class WeightedFuzzySearch(Generic[T]):
    """Fuzzy search over a fixed candidate list and weighted keys."""

    def __init__(
        self,
        items: Sequence[T],
        keys: List[SearchKey],
        threshold: float = 0.4,
        getter: Callable[[Any, str], Any] = getattr,
    ):
        if not keys:
            raise ValueError("At least one search key is required")

        total_weight = sum(key.weight for key in keys)
        if total_weight <= 0:
            raise ValueError("Search key weights must sum to a positive number")

        self.items = list(items)
        self.keys = [SearchKey(k.name, k.weight / total_weight) for k in keys]
        self.threshold = threshold
        self.getter = getter

    def field_score(self, query: str, text: str) -> Optional[float]:
        """
        Dissimilarity of ``query`` against one field value.

        Args:
            query: Lower-cased search text
            text: Field value

        Returns:
            Score in [0, 1] when it clears the threshold, else None
        """
        if not query or not text:
            return None

        text = text.lower()
        if query in text:
            return 0.0

        score = approximate_substring_distance(query, text) / len(query)
        if score <= self.threshold:
            return score
        return None

    def score_item(self, query: str, item: T) -> Optional[float]:
        """Combined score of an item, or None when no field matches."""
        matched: List[Tuple[float, float]] = []

        for key in self.keys:
            value = self.getter(item, key.name)
            if value is None:
                continue
            value = str(value)
            score = self.field_score(query, value)
            if score is None:
                continue
            matched.append((score, key.weight * field_norm(value)))

        if not matched:
            return None

        total = 1.0
        for score, exponent in matched:
            total *= math.pow(EPSILON if score == 0 else score, exponent)
        return total

    def search(self, query: str, limit: Optional[int] = None) -> List[FuzzyResult[T]]:
        """
        Score every candidate against ``query``.

        Args:
            query: Free-text query (case-insensitive)
            limit: Maximum results to return

        Returns:
            Matching candidates, best (lowest score) first, ties in
            candidate order
        """
        query = query.strip().lower()
        if not query:
            return []

        results: List[FuzzyResult[T]] = []
        for index, item in enumerate(self.items):
            score = self.score_item(query, item)
            if score is not None:
                results.append(FuzzyResult(item=item, score=score, ref_index=index))

        results.sort(key=lambda r: (r.score, r.ref_index))
        if limit is not None:
            results = results[:limit]
        return results
