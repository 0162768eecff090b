from .evaluation import (
    NO_ANSWER,
    build_evaluation_prompt,
    close_session,
    extract_pairs,
    run_evaluation,
)

__all__ = [
    "NO_ANSWER",
    "build_evaluation_prompt",
    "close_session",
    "extract_pairs",
    "run_evaluation",
]
