"""Non-answer classifier for refusal and ignorance replies."""
from __future__ import annotations

from typing import Optional, Tuple

# "yes" is kept on purpose; it counts toward the non-answer streak.
NON_ANSWER_PHRASES: Tuple[str, ...] = (
    "no",
    "i don't know",
    "idk",
    "n/a",
    "none",
    "not sure",
    "nope",
    "nil",
    "nothing",
    "no experience",
    "haven't",
    "haven’t",
    "don't have",
    "do not have",
    "can't say",
    "cannot say",
    "no answer",
    "no idea",
    "yes",
)


def normalize(text: Optional[str]) -> str:
    """Trim and lowercase a free-text reply."""

    return (text or "").strip().lower()


def _matches(sample: str, phrase: str) -> bool:
    return (
        sample == phrase
        or sample.startswith(phrase + " ")
        or (phrase + ".") in sample
        or (phrase + ",") in sample
        or sample == phrase.replace("'", "")
    )


def matching_phrase(text: Optional[str]) -> Optional[str]:
    """Return the first phrase that classifies ``text`` as a non-answer."""

    sample = normalize(text)
    if not sample:
        return None
    for phrase in NON_ANSWER_PHRASES:
        if _matches(sample, phrase):
            return phrase
    return None


def is_non_answer(text: Optional[str]) -> bool:
    """True when the reply is a refusal, an admission of ignorance, or similar."""

    return matching_phrase(text) is not None


__all__ = ["NON_ANSWER_PHRASES", "is_non_answer", "matching_phrase", "normalize"]
