"""Unit tests for the OpenRouter gateway client."""

from __future__ import annotations

import http.client as http_client
import io
import json
import unittest
from unittest import mock
from urllib import error as urllib_error

from pydantic import ValidationError

from flashdeck.llm.cache import ModelListCache
from flashdeck.llm.client import OpenRouterClient
from flashdeck.llm.errors import (
    AuthError,
    BadRequestError,
    GatewayConfigurationError,
    GatewayError,
    NetworkError,
    RateLimitError,
    ServerError,
)
from flashdeck.llm.types import ChatMessage, ChatRequest, RetryPolicy

BASE_URL = "https://openrouter.test/api/v1"
URLOPEN = "flashdeck.llm.client.urllib_request.urlopen"

CHAT_OK = {
    "id": "gen-1",
    "model": "openai/gpt-4o-mini",
    "choices": [
        {
            "message": {"role": "assistant", "content": '{"flashcards": []}'},
            "finish_reason": "stop",
        }
    ],
    "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
}

MODELS_OK = {
    "data": [
        {"id": "openai/gpt-4o-mini", "name": "GPT-4o mini", "context_length": 128000},
        {"id": "anthropic/claude-3-haiku", "name": "Claude 3 Haiku"},
    ]
}


class _FakeResponse:
    def __init__(self, payload: object) -> None:
        self._body = json.dumps(payload).encode("utf-8")

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc_info) -> bool:  # noqa: ANN002
        return False

    def read(self) -> bytes:
        return self._body


class _BrokenBodyResponse(_FakeResponse):
    def __init__(self, body: bytes = b"", error: Exception | None = None) -> None:
        self._body = body
        self._error = error

    def read(self) -> bytes:
        if self._error is not None:
            raise self._error
        return self._body


def _http_error(code: int, body: object = None, headers: dict[str, str] | None = None) -> urllib_error.HTTPError:
    raw = json.dumps(body).encode("utf-8") if body is not None else b""
    return urllib_error.HTTPError(f"{BASE_URL}/chat/completions", code, "error", headers or {}, io.BytesIO(raw))


def _request(**overrides) -> ChatRequest:  # noqa: ANN003
    payload = {
        "model": "openai/gpt-4o-mini",
        "messages": [{"role": "user", "content": "Hello"}],
    }
    payload.update(overrides)
    return ChatRequest.model_validate(payload)


class OpenRouterClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []
        self.client = OpenRouterClient(
            "test-key",
            base_url=BASE_URL,
            timeout_seconds=12,
            retry_policy=RetryPolicy(max_attempts=3, initial_delay_seconds=0.5, max_delay_seconds=4.0),
            app_url="https://flashdeck.test",
            app_title="Flashdeck",
            clock=lambda: self.now,
            sleep=self.sleeps.append,
        )

    def test_empty_api_key_fails_fast(self) -> None:
        for api_key in ("", "   "):
            with self.assertRaises(GatewayConfigurationError):
                OpenRouterClient(api_key)

    def test_invalid_requests_are_rejected_before_dispatch(self) -> None:
        invalid_payloads = [
            {"model": "", "messages": [{"role": "user", "content": "hi"}]},
            {"model": "   ", "messages": [{"role": "user", "content": "hi"}]},
            {"model": "openai/gpt-4o-mini", "messages": []},
            {"model": "openai/gpt-4o-mini", "messages": [{"role": "user", "content": "hi"}], "temperature": 2.5},
            {"model": "openai/gpt-4o-mini", "messages": [{"role": "user", "content": "hi"}], "max_tokens": -1},
        ]
        with mock.patch(URLOPEN) as urlopen:
            for payload in invalid_payloads:
                with self.assertRaises(ValidationError):
                    self.client.chat(payload)
        urlopen.assert_not_called()

    def test_chat_sends_bearer_auth_and_system_message_first(self) -> None:
        request = ChatRequest(
            model="openai/gpt-4o-mini",
            messages=[
                ChatMessage(role="user", content="Make cards"),
                ChatMessage(role="system", content="You write flashcards"),
            ],
            temperature=0.7,
            max_tokens=2000,
            response_format={"type": "json_object"},
            metadata={"service": "flashcard-generation"},
        )
        with mock.patch(URLOPEN, return_value=_FakeResponse(CHAT_OK)) as urlopen:
            result = self.client.chat(request)

        sent = urlopen.call_args.args[0]
        body = json.loads(sent.data.decode("utf-8"))
        self.assertEqual(sent.full_url, f"{BASE_URL}/chat/completions")
        self.assertEqual(sent.get_method(), "POST")
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 12)
        self.assertEqual(sent.get_header("Authorization"), "Bearer test-key")
        self.assertEqual(sent.get_header("Http-referer"), "https://flashdeck.test")
        self.assertEqual(sent.get_header("X-title"), "Flashdeck")
        self.assertEqual(json.loads(sent.get_header("X-metadata")), {"service": "flashcard-generation"})
        self.assertEqual(
            body["messages"],
            [
                {"role": "system", "content": "You write flashcards"},
                {"role": "user", "content": "Make cards"},
            ],
        )
        self.assertEqual(body["temperature"], 0.7)
        self.assertEqual(body["max_tokens"], 2000)
        self.assertEqual(body["response_format"], {"type": "json_object"})

        self.assertEqual(result.content, '{"flashcards": []}')
        self.assertEqual(result.model, "openai/gpt-4o-mini")
        self.assertEqual(result.usage.prompt_tokens, 10)
        self.assertEqual(result.usage.completion_tokens, 5)
        self.assertEqual(result.usage.total_tokens, 15)
        self.assertEqual(result.finish_reason, "stop")

    def test_rate_limit_is_retried_with_retry_after_hint(self) -> None:
        side_effect = [
            _http_error(429, {"error": {"message": "slow down"}}, {"Retry-After": "3"}),
            _FakeResponse(CHAT_OK),
        ]
        with mock.patch(URLOPEN, side_effect=side_effect) as urlopen:
            result = self.client.chat(_request())

        self.assertEqual(urlopen.call_count, 2)
        self.assertEqual(self.sleeps, [3.0])
        self.assertEqual(result.id, "gen-1")

    def test_rate_limit_error_surfaces_after_attempts_exhausted(self) -> None:
        side_effect = [_http_error(429, {"error": "busy"}, {"Retry-After": "1"}) for _ in range(3)]
        with mock.patch(URLOPEN, side_effect=side_effect) as urlopen:
            with self.assertRaises(RateLimitError) as ctx:
                self.client.chat(_request())

        self.assertEqual(urlopen.call_count, 3)
        self.assertEqual(ctx.exception.retry_after, 1)
        self.assertEqual(str(ctx.exception), "busy")

    def test_server_errors_back_off_exponentially_then_propagate(self) -> None:
        side_effect = [_http_error(502, {"error": {"message": "bad gateway"}}) for _ in range(3)]
        with mock.patch(URLOPEN, side_effect=side_effect) as urlopen:
            with self.assertRaises(ServerError) as ctx:
                self.client.chat(_request())

        self.assertEqual(urlopen.call_count, 3)
        self.assertEqual(self.sleeps, [0.5, 1.0])
        self.assertEqual(ctx.exception.status, 502)

    def test_backoff_delay_is_capped(self) -> None:
        side_effect = [
            _http_error(429, {"error": "busy"}, {"Retry-After": "60"}),
            _FakeResponse(CHAT_OK),
        ]
        with mock.patch(URLOPEN, side_effect=side_effect):
            self.client.chat(_request())

        self.assertEqual(self.sleeps, [4.0])

    def test_non_retryable_errors_propagate_immediately(self) -> None:
        cases = [
            (400, BadRequestError),
            (401, AuthError),
            (403, AuthError),
            (404, GatewayError),
        ]
        for status, error_cls in cases:
            with self.subTest(status=status):
                with mock.patch(URLOPEN, side_effect=[_http_error(status, {"error": {"code": "nope"}})]) as urlopen:
                    with self.assertRaises(GatewayError) as ctx:
                        self.client.chat(_request())
                self.assertIs(type(ctx.exception), error_cls)
                self.assertEqual(ctx.exception.status, status)
                self.assertEqual(urlopen.call_count, 1)
        self.assertEqual(self.sleeps, [])

    def test_error_message_is_extracted_from_provider_body(self) -> None:
        error = _http_error(400, {"error": {"message": "Invalid model"}})
        with mock.patch(URLOPEN, side_effect=[error]):
            with self.assertRaises(BadRequestError) as ctx:
                self.client.chat(_request())

        self.assertEqual(str(ctx.exception), "Invalid model")
        self.assertEqual(ctx.exception.raw, {"error": {"message": "Invalid model"}})

    def test_transport_failures_raise_network_error(self) -> None:
        for failure in (urllib_error.URLError("connection refused"), TimeoutError("timed out")):
            with self.subTest(failure=type(failure).__name__):
                with mock.patch(URLOPEN, side_effect=[failure]) as urlopen:
                    with self.assertRaises(NetworkError) as ctx:
                        self.client.chat(_request())
                self.assertIsNone(ctx.exception.status)
                self.assertEqual(urlopen.call_count, 1)

    def test_truncated_body_raises_network_error(self) -> None:
        response = _BrokenBodyResponse(error=http_client.IncompleteRead(b"{\"choi", 120))
        with mock.patch(URLOPEN, return_value=response) as urlopen:
            with self.assertRaises(NetworkError) as ctx:
                self.client.chat(_request())

        self.assertIsNone(ctx.exception.status)
        self.assertEqual(urlopen.call_count, 1)

    def test_non_utf8_body_raises_gateway_error(self) -> None:
        with mock.patch(URLOPEN, return_value=_BrokenBodyResponse(body=b"\xff\xfe\x00garbage")):
            with self.assertRaises(GatewayError) as ctx:
                self.client.chat(_request())

        self.assertIs(type(ctx.exception), GatewayError)
        self.assertIn("UTF-8", str(ctx.exception))

    def test_unexpected_payload_shape_raises_gateway_error(self) -> None:
        with mock.patch(URLOPEN, return_value=_FakeResponse({"choices": []})):
            with self.assertRaises(GatewayError):
                self.client.chat(_request())

    def test_model_list_is_cached_until_ttl_expires(self) -> None:
        with mock.patch(URLOPEN, side_effect=lambda *args, **kwargs: _FakeResponse(MODELS_OK)) as urlopen:
            first = self.client.list_models()
            self.now += 299
            second = self.client.list_models()
            self.assertEqual(urlopen.call_count, 1)

            self.now += 1
            third = self.client.list_models()
            self.assertEqual(urlopen.call_count, 2)

        sent = urlopen.call_args.args[0]
        self.assertEqual(sent.get_method(), "GET")
        self.assertEqual(sent.full_url, f"{BASE_URL}/models")
        self.assertEqual([model.id for model in first], ["openai/gpt-4o-mini", "anthropic/claude-3-haiku"])
        self.assertEqual(first, second)
        self.assertEqual(first, third)
        self.assertEqual(first[0].context_length, 128000)

    def test_cache_staleness_is_age_based(self) -> None:
        cache = ModelListCache(value=(), fetched_at=10.0)

        self.assertFalse(cache.is_stale(309.9, 300))
        self.assertTrue(cache.is_stale(310.0, 300))

    def test_build_messages_orders_system_history_then_user(self) -> None:
        messages = OpenRouterClient.build_messages(
            "system text",
            "latest question",
            [{"role": "user", "content": "earlier"}, {"role": "assistant", "content": "reply"}],
        )

        self.assertEqual([message.role for message in messages], ["system", "user", "assistant", "user"])
        self.assertEqual(messages[-1].content, "latest question")


if __name__ == "__main__":
    unittest.main()
