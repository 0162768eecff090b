import asyncio

from config.llm import LlmRoute
from llm_gateway import GatewayCompleter, complete


class _Response:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


class _Client:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    async def post(self, url, *, json, headers):
        self.requests.append((url, json, headers))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class _SlowClient:
    async def post(self, url, *, json, headers):
        await asyncio.sleep(5)


def _route(**overrides):
    data = dict(
        name="test",
        base_url="http://llm.local",
        endpoint="/v1/chat/completions",
        model="gpt-test",
        timeout_s=2.0,
        max_retries=2,
        system_prompt="You are an interviewer.",
        max_tokens=100,
        temperature=0.2,
    )
    data.update(overrides)
    return LlmRoute(**data)


def _ok(text):
    return _Response(200, {"choices": [{"message": {"content": text}}]})


def test_complete_returns_message_content():
    client = _Client(_ok("Question: what is REST?"))
    text = asyncio.run(complete("ask", cfg=_route(), client=client, retry_delay_s=0))
    assert text == "Question: what is REST?"
    url, payload, _ = client.requests[0]
    assert url == "http://llm.local/v1/chat/completions"
    assert payload["messages"][0] == {"role": "system", "content": "You are an interviewer."}
    assert payload["messages"][1] == {"role": "user", "content": "ask"}
    assert payload["max_tokens"] == 100


def test_complete_retries_transport_and_status_failures():
    client = _Client(ConnectionError("reset"), _Response(503, {}), _ok("third time"))
    text = asyncio.run(complete("ask", cfg=_route(), client=client, retry_delay_s=0))
    assert text == "third time"
    assert len(client.requests) == 3


def test_complete_returns_empty_string_when_route_keeps_failing():
    client = _Client(_Response(500, {}), _Response(500, {}), _Response(200, {"unexpected": True}))
    assert asyncio.run(complete("ask", cfg=_route(), client=client, retry_delay_s=0)) == ""


def test_complete_returns_empty_string_on_deadline():
    assert asyncio.run(complete("ask", cfg=_route(timeout_s=0.1), client=_SlowClient(), retry_delay_s=0)) == ""


def test_gateway_completer_binds_route():
    client = _Client(_ok("bound"))
    completer = GatewayCompleter(_route(), client)
    assert completer.route.name == "test"
    assert asyncio.run(completer("hi")) == "bound"
