"""LLM route configuration loaded from the JSON app config."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field

from .settings import Settings, settings as default_settings


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    api_key_env: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    system_prompt: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Application configuration root."""

    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str] = Field(default_factory=dict)


INTERVIEWER_SYSTEM_PROMPT = (
    "You are an expert technical interviewer. Provide clear, concise, and helpful responses. "
    "When generating questions, format them as a numbered list. "
    "When evaluating interviews, provide a score out of 100 and detailed feedback."
)


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def default_route(cfg: Optional[Settings] = None) -> LlmRoute:
    """Build the fallback route from environment settings."""

    cfg = cfg or default_settings
    return LlmRoute(
        name="default",
        base_url=cfg.LLM_BASE_URL,
        endpoint=cfg.LLM_ENDPOINT,
        model=cfg.LLM_MODEL,
        timeout_s=cfg.LLM_TIMEOUT_S,
        max_retries=cfg.LLM_MAX_RETRIES,
        api_key_env=cfg.LLM_API_KEY_ENV,
        max_tokens=cfg.LLM_MAX_TOKENS,
        temperature=cfg.LLM_TEMPERATURE,
        system_prompt=INTERVIEWER_SYSTEM_PROMPT,
    )


def resolve_route(cfg: AppConfig, target: str) -> LlmRoute:
    """Return the route bound to ``target`` in the registry section."""

    if target not in cfg.registry:
        raise KeyError(f"Registry entry missing for '{target}'")
    route_id = cfg.registry[target]
    if route_id not in cfg.llm_routes:
        raise KeyError(f"Route '{route_id}' missing for '{target}'")
    return cfg.llm_routes[route_id]


def route_for(target: str, path: Optional[Path] = None) -> LlmRoute:
    """Resolve ``target`` from the app config file, falling back to settings."""

    config_path = path or Path(default_settings.APP_CONFIG_PATH)
    if not config_path.exists():
        return default_route()
    return resolve_route(load_config(config_path), target)
