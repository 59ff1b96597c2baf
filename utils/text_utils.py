"""
Text utilities for matching spreadsheet headers against field names.

Headers arrive in whatever form the uploader typed them: German or
English, with umlauts, spaces, underscores or hyphens. Both sides are
folded to a compact lowercase ASCII key before scoring.
"""

import re
import unicodedata

# Substring matches rank above fuzzy matches but below exact matches
SUBSTRING_SCORE = 0.8

_SEPARATORS = re.compile(r"[_\s-]")


def normalize_header(value: str) -> str:
    """
    Normalize a header or field name for comparison.

    - "Produkt_Familie" → "produktfamilie"
    - "Größe (mm)" → "grosse(mm)"
    - "Hersteller-Link" → "herstellerlink"

    Args:
        value: Raw header or field name

    Returns:
        Lowercase string without separators, accents folded to ASCII base
    """
    folded = str(value).lower()
    folded = _SEPARATORS.sub("", folded)
    folded = folded.replace("ß", "ss")

    # NFD separates base chars from accents (ä → a + U+0308)
    decomposed = unicodedata.normalize("NFD", folded)
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance between two strings.

    Single rolling row, so working space is O(len(b)).
    """
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def similarity_score(a: str, b: str) -> float:
    """
    Score how alike two headers are, in [0, 1].

    Rules, first match wins:
    1. Equal after normalization → 1.0
    2. One contains the other → SUBSTRING_SCORE
    3. Otherwise (max_len - edit_distance) / max_len

    Args:
        a: First string (e.g., target field name)
        b: Second string (e.g., file column header)

    Returns:
        Similarity score, 1.0 meaning identical
    """
    s1 = normalize_header(a)
    s2 = normalize_header(b)

    if s1 == s2:
        return 1.0

    # An empty key is contained in everything, so it scores SUBSTRING_SCORE
    if s1 in s2 or s2 in s1:
        return SUBSTRING_SCORE

    longer, shorter = (s1, s2) if len(s1) >= len(s2) else (s2, s1)
    if len(longer) == 0:
        return 1.0

    return (len(longer) - edit_distance(longer, shorter)) / len(longer)
