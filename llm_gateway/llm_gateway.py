from __future__ import annotations  # LLM text-completion gateway module

import asyncio
import logging
import os
from typing import Any, Dict, Optional, Protocol

import httpx

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup

RETRY_DELAY_S = 2.0


class AsyncHttpClient(Protocol):  # Minimal async HTTP client protocol
    async def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str]) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class TextCompleter(Protocol):  # Collaborator contract: given text, return text
    async def __call__(self, prompt: str) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


async def complete(
    prompt: str,
    *,
    cfg: LlmRoute,
    client: Optional[AsyncHttpClient] = None,
    retry_delay_s: float = RETRY_DELAY_S,
) -> str:  # Return completion text, or "" when the route fails or times out
    try:
        return await asyncio.wait_for(
            _complete_with_retries(prompt, cfg=cfg, client=client, retry_delay_s=retry_delay_s),
            timeout=cfg.timeout_s,
        )
    except asyncio.TimeoutError:
        logger.error("LLM request timed out route=%s after %.1fs", cfg.name, cfg.timeout_s)
    except LlmGatewayError as exc:
        logger.error("LLM request failed route=%s: %s", cfg.name, exc)
    return ""


async def _complete_with_retries(
    prompt: str,
    *,
    cfg: LlmRoute,
    client: Optional[AsyncHttpClient],
    retry_delay_s: float,
) -> str:
    payload = _payload(prompt, cfg)
    headers = _headers(cfg)
    attempts = cfg.max_retries + 1
    logger.info(
        "LLM request start route=%s model=%s attempts=%d chars=%d preview=%s",
        cfg.name,
        cfg.model,
        attempts,
        len(prompt),
        _preview(prompt),
    )
    last_error: Optional[str] = None
    for attempt in range(attempts):
        if attempt > 0:
            logger.info("LLM retry in %.1fs route=%s reason=%s", retry_delay_s, cfg.name, last_error)
            await asyncio.sleep(retry_delay_s)
        try:
            response = await _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
        except Exception as exc:  # noqa: BLE001
            logger.warning("LLM transport failure attempt=%d: %s", attempt + 1, exc)
            last_error = f"transport: {exc}"
            continue
        if response.status_code >= 400:
            logger.warning("LLM error status=%s attempt=%d", response.status_code, attempt + 1)
            last_error = f"status {response.status_code}"
            continue
        try:
            content = _extract_content(response.json())
        except (ValueError, LlmGatewayError) as exc:
            logger.warning("LLM payload unusable attempt=%d: %s", attempt + 1, exc)
            last_error = str(exc)
            continue
        logger.info("LLM request done route=%s attempt=%d chars=%d", cfg.name, attempt + 1, len(content))
        return content
    raise LlmGatewayError(f"LLM route '{cfg.name}' failed after {attempts} attempts ({last_error})")


class GatewayCompleter:  # Bind a route so the engine only sees complete(prompt)
    def __init__(self, route: LlmRoute, client: Optional[AsyncHttpClient] = None) -> None:
        self._route = route
        self._client = client

    @property
    def route(self) -> LlmRoute:
        return self._route

    async def __call__(self, prompt: str) -> str:
        return await complete(prompt, cfg=self._route, client=self._client)


def _payload(prompt: str, cfg: LlmRoute) -> Dict[str, Any]:  # Build chat-completions request body
    messages = []
    if cfg.system_prompt:
        messages.append({"role": "system", "content": cfg.system_prompt})
    messages.append({"role": "user", "content": prompt})
    payload: Dict[str, Any] = {"model": cfg.model, "messages": messages}
    if cfg.max_tokens is not None:
        payload["max_tokens"] = cfg.max_tokens
    if cfg.temperature is not None:
        payload["temperature"] = cfg.temperature
    return payload


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


async def _post(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    client: Optional[AsyncHttpClient],
) -> HttpResponse:  # Dispatch HTTP request
    if client is not None:
        return await client.post(url, json=payload, headers=headers)
    async with httpx.AsyncClient(timeout=timeout) as http_client:
        return await http_client.post(url, json=payload, headers=headers)


def _preview(prompt: str) -> str:  # Build preview string for logging
    text = prompt.strip()
    first = text.splitlines()[0] if text else ""
    if len(first) > 100:
        return first[:97] + "..."
    return first


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")
