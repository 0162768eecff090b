from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import AsyncHttpClient, GatewayCompleter, HttpResponse, LlmGatewayError, TextCompleter, complete

__all__ = ["AsyncHttpClient", "GatewayCompleter", "HttpResponse", "LlmGatewayError", "TextCompleter", "complete"]
