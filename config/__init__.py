"""Configuration package for the interview service."""
from .llm import AppConfig, LlmRoute, default_route, load_config, resolve_route, route_for
from .registry import COMPLETION_KEY, bind_model, get_model, is_bound
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "default_route",
    "load_config",
    "resolve_route",
    "route_for",
    "COMPLETION_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "Settings",
    "settings",
]
