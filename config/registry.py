"""Process-wide bindings for the text completer used by the interview engine."""
from typing import Any, Callable, Dict

_BINDINGS: Dict[str, Callable[..., Any]] = {}

COMPLETION_KEY = "models.text_completion"


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    """Bind ``fn`` under ``key``, replacing any earlier binding."""
    _BINDINGS[key] = fn


def is_bound(key: str) -> bool:
    return key in _BINDINGS


def get_model(key: str) -> Callable[..., Any]:
    """Return the callable bound to ``key``.

    Raises:
        KeyError: If nothing is bound for ``key`` yet; the server binds the
            gateway completer at startup.
    """

    try:
        return _BINDINGS[key]
    except KeyError:
        raise KeyError(f"No completer bound for '{key}'") from None
