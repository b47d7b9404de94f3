"""
Jaro-Winkler description similarity.

Check register descriptions are typed by hand while bank feed descriptions
come from the bank, so the same payee drifts ("ABC SUPPLY" vs
"ABC Supply Co"). The score rewards shared characters in roughly the same
positions and gives extra weight to a shared prefix.
"""

from typing import Optional

PREFIX_SCALE = 0.1
MAX_PREFIX_LENGTH = 4


def normalize_description(text: Optional[str]) -> str:
    """Upper-case and trim a description before scoring."""
    if not text:
        return ""
    return str(text).strip().upper()


def jaro(a: str, b: str) -> float:
    """
    Jaro similarity of two already-normalized strings.

    Characters match when equal and no further apart than
    floor(max(len)/2) - 1 positions. A non-positive window scores 0.
    """
    len_a, len_b = len(a), len(b)
    if not len_a or not len_b:
        return 0.0

    window = max(len_a, len_b) // 2 - 1
    if window <= 0:
        return 0.0

    a_flags = [False] * len_a
    b_flags = [False] * len_b
    matches = 0

    for i, char in enumerate(a):
        start = max(0, i - window)
        end = min(i + window + 1, len_b)
        for j in range(start, end):
            if not b_flags[j] and b[j] == char:
                a_flags[i] = True
                b_flags[j] = True
                matches += 1
                break

    if matches == 0:
        return 0.0

    # Matched characters that appear in a different relative order
    transpositions = 0
    k = 0
    for i in range(len_a):
        if not a_flags[i]:
            continue
        while not b_flags[k]:
            k += 1
        if a[i] != b[k]:
            transpositions += 1
        k += 1

    return (
        matches / len_a
        + matches / len_b
        + (matches - transpositions / 2) / matches
    ) / 3


def common_prefix_length(a: str, b: str, limit: int = MAX_PREFIX_LENGTH) -> int:
    length = 0
    for char_a, char_b in zip(a[:limit], b[:limit]):
        if char_a != char_b:
            break
        length += 1
    return length


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Jaro-Winkler similarity of two free-text descriptions.

    Args:
        a: First description (may be empty or None)
        b: Second description (may be empty or None)

    Returns:
        Score in [0, 1]; 0 when either side is empty, 1 for identical
        descriptions after normalization
    """
    a = normalize_description(a)
    b = normalize_description(b)

    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    # Greedy character pairing depends on argument order; fix the order
    if a > b:
        a, b = b, a

    score = jaro(a, b)
    if score == 0.0:
        # No prefix boost when the window collapsed or nothing matched
        return 0.0

    prefix = common_prefix_length(a, b)
    score += PREFIX_SCALE * prefix * (1 - score)

    return min(1.0, max(0.0, score))
