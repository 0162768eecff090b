import json

import pytest

from config.llm import AppConfig, default_route, resolve_route, route_for
from config.registry import COMPLETION_KEY, bind_model, get_model
from config.settings import Settings


def test_settings_defaults():
    cfg = Settings()
    assert cfg.MAX_QUESTIONS == 10
    assert cfg.QUESTION_BANK_SIZE == 10
    assert cfg.EXIT_OFFER_STREAK == 4
    assert cfg.NUDGE_STREAK == 2
    assert cfg.ANSWER_TRUNCATE_CHARS == 500


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("MAX_QUESTIONS", "6")
    assert Settings().MAX_QUESTIONS == 6


def test_registry_bind_and_get():
    async def fake(prompt):
        return "ok"

    bind_model(COMPLETION_KEY, fake)
    assert get_model(COMPLETION_KEY) is fake
    with pytest.raises(KeyError):
        get_model("models.unknown")


def test_default_route_mirrors_settings():
    route = default_route(Settings(LLM_MODEL="gpt-test", LLM_TIMEOUT_S=5))
    assert route.model == "gpt-test"
    assert route.timeout_s == 5
    assert route.system_prompt


def test_route_for_reads_app_config(tmp_path):
    path = tmp_path / "app_config.json"
    path.write_text(
        json.dumps(
            {
                "llm_routes": {
                    "local": {
                        "name": "local",
                        "base_url": "http://localhost:1234",
                        "endpoint": "/v1/chat/completions",
                        "model": "local-model",
                        "timeout_s": 30,
                    }
                },
                "registry": {COMPLETION_KEY: "local"},
            }
        ),
        encoding="utf-8",
    )
    assert route_for(COMPLETION_KEY, path).model == "local-model"
    assert route_for(COMPLETION_KEY, tmp_path / "missing.json").name == "default"
    with pytest.raises(KeyError):
        resolve_route(AppConfig(llm_routes={}), COMPLETION_KEY)
