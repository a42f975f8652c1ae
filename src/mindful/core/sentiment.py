"""Lexical sentiment scoring for user messages."""

from typing import Any

POSITIVE_WORDS: frozenset[str] = frozenset({
    "happy", "joy", "love", "excited", "wonderful", "amazing", "great", "good", "better",
    "excellent", "fantastic", "awesome", "perfect", "beautiful", "grateful", "thankful",
    "hopeful", "optimistic", "positive", "confident", "proud", "peaceful", "calm",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "sad", "angry", "hate", "terrible", "awful", "bad", "worse", "worst", "horrible",
    "depressed", "anxious", "worried", "scared", "afraid", "frustrated",
    "disappointed", "upset", "hurt", "pain", "suffering", "trauma", "difficult",
})

# Below this many matched words a message cannot reach +/-1.
MIN_NORMALIZER = 10


def score(text: Any) -> float:
    """
    Score a message's polarity in [-1, 1].

    Tokens are whitespace-split and lower-cased; punctuation stays attached,
    so "sad." does not match "sad".

    Args:
        text: Message text; anything that is not a non-empty string scores 0

    Returns:
        Normalized polarity score
    """
    if not text or not isinstance(text, str):
        return 0.0

    total = 0
    matched = 0
    for token in text.lower().split():
        positive = token in POSITIVE_WORDS
        negative = token in NEGATIVE_WORDS
        if positive == negative:
            continue
        total += 1 if positive else -1
        matched += 1

    if matched == 0:
        return 0.0

    normalized = total / max(matched, MIN_NORMALIZER)
    return max(-1.0, min(1.0, normalized))
