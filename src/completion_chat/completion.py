"""Single-shot async client for the remote text-completion endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .credentials import CredentialProvider, EnvCredentialProvider
from .exceptions import CompletionParseError, CompletionTransportError
from .models import (
    CompletionErr,
    CompletionOk,
    CompletionRequest,
    CompletionResponse,
    CompletionResult,
)

LOGGER = logging.getLogger(__name__)

TRANSPORT_ERROR_PREFIX = "fetch error: "
PARSE_ERROR_PREFIX = "json parse error: "


def build_payload(prompt: str) -> bytes:
    """Serialize a prompt into the endpoint's JSON request body."""
    return CompletionRequest(prompt=prompt).model_dump_json().encode("utf-8")


def _describe_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or str(exc)


def _decode_completion(body: bytes | str) -> str:
    try:
        return CompletionResponse.model_validate_json(body).completion
    except ValidationError as exc:
        raise CompletionParseError(_describe_validation_error(exc)) from exc


def parse_completion(body: bytes | str) -> CompletionResult:
    """Parse a response body into a completion result without raising."""
    try:
        return CompletionOk(_decode_completion(body))
    except CompletionParseError as exc:
        return CompletionErr(f"{PARSE_ERROR_PREFIX}{exc}")


class CompletionClient:
    """Perform exactly one POST per ``complete`` call and report the outcome.

    The client never retries and never raises for transport or parse
    problems; callers always get a ``CompletionOk`` or ``CompletionErr``.
    Request timeouts are left to the caller (the conversation store enforces
    its own response deadline), so the underlying HTTP client is created
    with ``timeout=None`` unless one is injected.
    """

    def __init__(
        self,
        endpoint_url: str,
        credential_provider: CredentialProvider | None = None,
        api_key_header: str = "X-API-Key",
        api_key_scheme: str = "",
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.api_key_header = api_key_header
        self.api_key_scheme = api_key_scheme
        self._credential_provider = credential_provider
        if http_client is not None:
            self._http = http_client
            self._owns_client = False
        else:
            self._http = httpx.AsyncClient(timeout=None, transport=transport)
            self._owns_client = True

    @classmethod
    def from_config(
        cls,
        completion_config: dict[str, Any],
        credential_provider: CredentialProvider | None = None,
        **kwargs: Any,
    ) -> CompletionClient:
        """Build a client from the ``completion`` config section."""
        provider = credential_provider or EnvCredentialProvider(
            str(completion_config.get("api_key_env", ""))
        )
        return cls(
            endpoint_url=str(completion_config["endpoint_url"]),
            credential_provider=provider,
            api_key_header=str(completion_config.get("api_key_header", "X-API-Key")),
            api_key_scheme=str(completion_config.get("api_key_scheme", "")),
            **kwargs,
        )

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._credential_provider is None:
            return headers
        key = self._credential_provider()
        if key:
            value = f"{self.api_key_scheme} {key}" if self.api_key_scheme else key
            headers[self.api_key_header] = value
        return headers

    async def _post(self, payload: bytes) -> httpx.Response:
        try:
            response = await self._http.post(
                self.endpoint_url,
                content=payload,
                headers=self._build_headers(),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            detail = str(exc) or exc.__class__.__name__
            raise CompletionTransportError(detail) from exc
        except ValueError as exc:
            # Header values that cannot be encoded (e.g. a non-ASCII key).
            raise CompletionTransportError(f"invalid request: {exc}") from exc

        if response.is_error:
            reason = response.reason_phrase or "error"
            raise CompletionTransportError(f"HTTP {response.status_code} {reason}")
        return response

    async def complete(self, prompt: str) -> CompletionResult:
        """Send ``prompt`` and return the completion text or a failure reason."""
        LOGGER.info(
            "completion.request.start",
            extra={
                "event": "completion.request.start",
                "endpoint": self.endpoint_url,
                "prompt_chars": len(prompt),
            },
        )
        try:
            response = await self._post(build_payload(prompt))
        except CompletionTransportError as exc:
            LOGGER.warning(
                "completion.request.failed",
                extra={"event": "completion.request.failed", "reason": str(exc)},
            )
            return CompletionErr(f"{TRANSPORT_ERROR_PREFIX}{exc}")

        try:
            text = _decode_completion(response.content)
        except CompletionParseError as exc:
            LOGGER.warning(
                "completion.response.invalid",
                extra={"event": "completion.response.invalid", "reason": str(exc)},
            )
            return CompletionErr(f"{PARSE_ERROR_PREFIX}{exc}")

        LOGGER.info(
            "completion.request.complete",
            extra={
                "event": "completion.request.complete",
                "status": response.status_code,
                "completion_chars": len(text),
            },
        )
        return CompletionOk(text)

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> CompletionClient:
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()
