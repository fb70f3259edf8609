"""
Tag canonicalization.

Tags are trimmed, length-bounded and de-duplicated case-insensitively.
Matching against a user's vocabulary is case-insensitive and returns the
vocabulary's casing.
"""

from typing import Iterable

from ledger.errors import NoValidTags

DEFAULT_TAG_MIN_LENGTH = 3
DEFAULT_TAG_MAX_LENGTH = 20


def trim_tags(tags: Iterable[str]) -> list[str]:
    return [tag.strip() for tag in tags]


def filter_duplicate_tags(tags: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first occurrence's casing."""
    seen = set()
    unique = []
    for tag in tags:
        key = tag.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(tag)
    return unique


class TagCanonicalizer:
    """Normalizes raw tag lists and resolves them against a vocabulary."""
    
    def __init__(
        self,
        min_length: int = DEFAULT_TAG_MIN_LENGTH,
        max_length: int = DEFAULT_TAG_MAX_LENGTH,
    ):
        self.min_length = min_length
        self.max_length = max_length
    
    def has_valid_length(self, tag: str) -> bool:
        return self.min_length <= len(tag) <= self.max_length
    
    def filter_on_length(self, tags: Iterable[str]) -> list[str]:
        return [tag for tag in tags if self.has_valid_length(tag)]
    
    def canonicalize(self, raw: Iterable[str]) -> list[str]:
        """
        Trim, drop entries outside the length bounds, then de-duplicate.
        
        Idempotent: canonicalize(canonicalize(x)) == canonicalize(x).
        """
        return filter_duplicate_tags(self.filter_on_length(trim_tags(raw)))
    
    @staticmethod
    def resolve_against_vocabulary(
        canonical_tags: Iterable[str],
        vocabulary: Iterable[str],
    ) -> list[str]:
        """
        Match tags case-insensitively against the vocabulary.
        
        Unmatched tags are dropped silently; resolve_required is the
        variant that insists on at least one match.
        """
        by_key = {}
        for entry in vocabulary:
            by_key.setdefault(entry.casefold(), entry)
        
        resolved = []
        for tag in canonical_tags:
            match = by_key.get(tag.casefold())
            if match is not None and match not in resolved:
                resolved.append(match)
        return resolved
    
    def resolve_required(
        self,
        raw_tags: Iterable[str],
        vocabulary: Iterable[str],
    ) -> list[str]:
        """
        Canonicalize raw tags and resolve them against the vocabulary.
        
        An empty input gives an empty list. A non-empty input that resolves
        to nothing raises NoValidTags.
        """
        raw_tags = list(raw_tags)
        if not raw_tags:
            return []
        resolved = self.resolve_against_vocabulary(self.canonicalize(raw_tags), vocabulary)
        if not resolved:
            raise NoValidTags()
        return resolved
