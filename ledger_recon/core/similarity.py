# ledger_recon/core/similarity.py

from collections import Counter


def dice_coefficient(s1: str, s2: str) -> float:
    """
    Bigram Dice coefficient between two strings, 0.0 to 1.0.

    Whitespace is ignored. Identical strings score 1.0; strings too short
    to form a bigram score 0.0 unless identical.
    """
    a = "".join(s1.split())
    b = "".join(s2.split())

    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    first = Counter(a[i:i + 2] for i in range(len(a) - 1))
    intersection = 0
    for i in range(len(b) - 1):
        bigram = b[i:i + 2]
        if first[bigram] > 0:
            first[bigram] -= 1
            intersection += 1

    return (2.0 * intersection) / (len(a) + len(b) - 2)
