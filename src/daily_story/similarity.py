from __future__ import annotations


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit-cost insert, delete and substitute."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ch_a in enumerate(a, start=1):
        current = [i]
        for j, ch_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ch_a != ch_b),
                )
            )
        previous = current
    return previous[-1]


def title_similarity(a: str, b: str) -> float:
    """Similarity in [0, 1]; 1.0 means equal after case folding."""
    left, right = a.lower(), b.lower()
    longest = max(len(left), len(right), 1)
    return 1.0 - edit_distance(left, right) / longest
