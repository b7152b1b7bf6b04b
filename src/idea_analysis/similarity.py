"""Text normalization and Jaccard similarity for near-duplicate detection."""

import re

# Common English stopwords filtered out before comparison
STOPWORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
        "has", "he", "in", "is", "it", "its", "of", "on", "or", "that",
        "the", "to", "was", "will", "with",
    }
)

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Canonicalize text for similarity comparison.

    Lowercases, replaces punctuation with spaces and collapses whitespace.

    Args:
        text: Free text

    Returns:
        The canonical form (may be empty)
    """
    text = text.lower()
    text = _NON_ALPHANUMERIC.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def tokenize(text: str) -> list[str]:
    """Split text into comparable tokens.

    Stopwords and single-character tokens are dropped; order is preserved.

    Args:
        text: Free text (normalized internally)

    Returns:
        Ordered list of tokens
    """
    return [word for word in normalize_text(text).split() if word not in STOPWORDS and len(word) > 1]


def jaccard_similarity(text1: str, text2: str) -> float:
    """Compute the Jaccard index between the token sets of two texts.

    Two texts without any content are treated as identical (1.0); if only one
    of them has content the similarity is 0.0.

    Args:
        text1: First text
        text2: Second text

    Returns:
        Similarity in [0, 1]
    """
    tokens1 = set(tokenize(text1))
    tokens2 = set(tokenize(text2))

    if not tokens1 and not tokens2:
        return 1.0
    if not tokens1 or not tokens2:
        return 0.0

    union = tokens1 | tokens2
    return len(tokens1 & tokens2) / len(union)
