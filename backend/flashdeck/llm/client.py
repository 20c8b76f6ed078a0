"""OpenRouter-compatible chat completion client.

Wraps one HTTP completion API behind two operations:

- ``chat``: validated request, bearer auth, typed error classification and
  bounded exponential backoff for rate-limit and server errors.
- ``list_models``: provider model catalog cached per client for a fixed TTL.
"""

from __future__ import annotations

import http.client as http_client
import json
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from time import perf_counter
from typing import Any
from urllib import error as urllib_error
from urllib import request as urllib_request

from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from flashdeck.config import Settings
from flashdeck.llm.cache import ModelListCache
from flashdeck.llm.errors import (
    AuthError,
    BadRequestError,
    GatewayConfigurationError,
    GatewayError,
    NetworkError,
    RateLimitError,
    ServerError,
)
from flashdeck.llm.types import ChatMessage, ChatRequest, ChatResult, ModelInfo, RetryPolicy, TokenUsage

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
MODEL_LIST_TTL_SECONDS = 300.0


class OpenRouterClient:
    """Chat completion client for the OpenRouter HTTP API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 60,
        retry_policy: RetryPolicy | None = None,
        model_list_ttl_seconds: float = MODEL_LIST_TTL_SECONDS,
        app_url: str | None = None,
        app_title: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not api_key or not api_key.strip():
            raise GatewayConfigurationError("API key cannot be empty")
        self._api_key = api_key.strip()
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._retry_policy = retry_policy or RetryPolicy()
        self._model_list_ttl_seconds = model_list_ttl_seconds
        self._app_url = app_url
        self._app_title = app_title
        self._clock = clock
        self._sleep = sleep
        self._model_cache: ModelListCache | None = None
        self._exponential_wait = wait_exponential(
            multiplier=self._retry_policy.initial_delay_seconds,
            exp_base=self._retry_policy.backoff_multiplier,
            max=self._retry_policy.max_delay_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenRouterClient":
        if not settings.openrouter_api_key:
            raise GatewayConfigurationError(
                "OPENROUTER_API_KEY is not configured. Set it in backend/.env before generating flashcards."
            )
        return cls(
            settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            timeout_seconds=settings.openrouter_timeout_seconds,
            retry_policy=RetryPolicy(
                max_attempts=settings.llm_retry_max_attempts,
                initial_delay_seconds=settings.llm_retry_initial_delay_seconds,
                max_delay_seconds=settings.llm_retry_max_delay_seconds,
                backoff_multiplier=settings.llm_retry_backoff_multiplier,
            ),
            model_list_ttl_seconds=settings.model_list_cache_ttl_seconds,
            app_url=settings.openrouter_app_url,
            app_title=settings.openrouter_app_title,
        )

    @staticmethod
    def build_messages(
        system: str | None,
        user: str,
        history: Sequence[Mapping[str, str]] | None = None,
    ) -> list[ChatMessage]:
        """Build an ordered message list: system prompt, prior turns, then the user turn."""

        messages: list[ChatMessage] = []
        if system:
            messages.append(ChatMessage(role="system", content=system))
        for turn in history or []:
            messages.append(ChatMessage(role=turn["role"], content=turn["content"]))
        messages.append(ChatMessage(role="user", content=user))
        return messages

    def chat(self, request: ChatRequest | Mapping[str, Any]) -> ChatResult:
        """Run one chat completion, retrying rate-limit and server errors."""

        if not isinstance(request, ChatRequest):
            request = ChatRequest.model_validate(request)

        started = perf_counter()
        logger.info("llm.chat_started model=%s messages=%d", request.model, len(request.messages))
        body = self._build_request_body(request)
        headers = self._build_headers(request.metadata)
        try:
            payload = self._retrying()(self._request_json, "POST", "/chat/completions", body=body, headers=headers)
            result = self._parse_chat_payload(payload, fallback_model=request.model)
        except GatewayError as exc:
            logger.error(
                "llm.chat_failed model=%s error=%s status=%s elapsed_ms=%.2f",
                request.model,
                exc.__class__.__name__,
                exc.status,
                (perf_counter() - started) * 1000.0,
            )
            raise

        logger.info(
            "llm.chat_completed model=%s prompt_tokens=%d completion_tokens=%d elapsed_ms=%.2f",
            result.model,
            result.usage.prompt_tokens,
            result.usage.completion_tokens,
            (perf_counter() - started) * 1000.0,
        )
        return result

    def list_models(self) -> list[ModelInfo]:
        """Return the provider model catalog, served from cache while fresh."""

        now = self._clock()
        cache = self._model_cache
        if cache is not None and not cache.is_stale(now, self._model_list_ttl_seconds):
            logger.debug("llm.model_list_cache_hit age_s=%.1f", now - cache.fetched_at)
            return list(cache.value)

        logger.info("llm.model_list_fetch base_url=%s", self._base_url)
        payload = self._request_json("GET", "/models", headers=self._build_headers())
        entries = payload.get("data")
        if not isinstance(entries, list):
            raise GatewayError("Model list response is missing a data array", raw=payload)

        models = tuple(
            ModelInfo(
                id=str(entry["id"]),
                name=str(entry.get("name") or entry["id"]),
                description=entry.get("description"),
                context_length=entry.get("context_length"),
                pricing=entry.get("pricing"),
            )
            for entry in entries
            if isinstance(entry, dict) and entry.get("id")
        )
        self._model_cache = ModelListCache(value=models, fetched_at=now)
        return list(models)

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_policy.max_attempts),
            wait=self._backoff_seconds,
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )

    def _backoff_seconds(self, retry_state: RetryCallState) -> float:
        delay = self._exponential_wait(retry_state)
        exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
        if isinstance(exc, RateLimitError) and exc.retry_after:
            delay = max(delay, float(exc.retry_after))
        return min(delay, self._retry_policy.max_delay_seconds)

    def _build_headers(self, metadata: Mapping[str, Any] | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._app_url:
            headers["HTTP-Referer"] = self._app_url
        if self._app_title:
            headers["X-Title"] = self._app_title
        if metadata:
            headers["X-Metadata"] = json.dumps(metadata, default=str)
        return headers

    @staticmethod
    def _build_request_body(request: ChatRequest) -> dict[str, Any]:
        # Stable sort keeps caller order within each group.
        ordered = sorted(request.messages, key=lambda message: message.role != "system")
        body: dict[str, Any] = {
            "model": request.model,
            "messages": [message.model_dump(exclude_none=True) for message in ordered],
        }
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.max_tokens is not None:
            body["max_tokens"] = request.max_tokens
        if request.response_format:
            body["response_format"] = request.response_format
        return body

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        headers: dict[str, str],
    ) -> dict[str, Any]:
        req = urllib_request.Request(
            url=f"{self._base_url}{path}",
            data=json.dumps(body).encode("utf-8") if body is not None else None,
            method=method,
            headers=headers,
        )
        try:
            with urllib_request.urlopen(req, timeout=self._timeout_seconds) as resp:
                raw_bytes = resp.read()
        except urllib_error.HTTPError as exc:
            raise _classify_http_error(exc) from exc
        except urllib_error.URLError as exc:
            raise NetworkError(f"Request to {path} failed: {exc.reason}", raw=str(exc.reason)) from exc
        except (TimeoutError, OSError, http_client.HTTPException) as exc:
            raise NetworkError(f"Request to {path} failed: {exc!r}", raw=str(exc)) from exc

        try:
            raw = raw_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise GatewayError("Provider returned a non UTF-8 response", raw=raw_bytes[:200]) from exc
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GatewayError("Provider returned a non-JSON response", raw=raw) from exc
        if not isinstance(decoded, dict):
            raise GatewayError("Provider returned an unexpected response shape", raw=decoded)
        return decoded

    @staticmethod
    def _parse_chat_payload(payload: dict[str, Any], *, fallback_model: str) -> ChatResult:
        try:
            choice = payload["choices"][0]
            message = choice["message"]
            refusal = message.get("refusal")
            if isinstance(refusal, str) and refusal.strip():
                raise GatewayError(f"Provider refused the request: {refusal.strip()}", raw=payload)
            content = message["content"]
            if not isinstance(content, str):
                raise TypeError("completion content is not a string")
        except GatewayError:
            raise
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise GatewayError("Provider returned an unexpected response shape", raw=payload) from exc

        usage = payload.get("usage") or {}
        prompt_tokens = int(usage.get("prompt_tokens") or 0)
        completion_tokens = int(usage.get("completion_tokens") or 0)
        return ChatResult(
            id=payload.get("id"),
            model=str(payload.get("model") or fallback_model),
            content=content,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=int(usage.get("total_tokens") or prompt_tokens + completion_tokens),
            ),
            finish_reason=choice.get("finish_reason"),
        )


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, GatewayError) and exc.retryable


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
    logger.warning(
        "llm.chat_retry attempt=%d error=%s next_sleep_s=%.2f",
        retry_state.attempt_number,
        exc.__class__.__name__ if exc is not None else "none",
        retry_state.next_action.sleep if retry_state.next_action is not None else 0.0,
    )


def _classify_http_error(exc: urllib_error.HTTPError) -> GatewayError:
    status = exc.code
    raw_text = ""
    if exc.fp is not None:
        raw_text = exc.read().decode("utf-8", errors="replace")
    try:
        body: Any = json.loads(raw_text) if raw_text else None
    except json.JSONDecodeError:
        body = raw_text
    message = _error_message(status, body)

    if status == 400:
        return BadRequestError(message, raw=body)
    if status in (401, 403):
        return AuthError(message, status=status, raw=body)
    if status == 429:
        return RateLimitError(message, retry_after=_parse_retry_after(exc.headers), raw=body)
    if status >= 500:
        return ServerError(message, status, body)
    return GatewayError(message, status, body)


def _error_message(status: int, body: Any) -> str:
    if isinstance(body, dict) and "error" in body:
        error_field = body["error"]
        if isinstance(error_field, str):
            return error_field
        if isinstance(error_field, dict):
            return str(error_field.get("message") or error_field.get("code") or json.dumps(error_field))
        return str(error_field)
    return f"HTTP {status} error"


def _parse_retry_after(headers: Mapping[str, str] | None) -> int | None:
    if headers is None:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0, int(str(value).strip()))
    except ValueError:
        return None
