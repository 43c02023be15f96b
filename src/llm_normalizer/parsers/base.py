"""Base class shared by all vendor response parsers."""
from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Final, NoReturn, Optional

import anthropic
import openai

from llm_normalizer.errors import (
    MalformedResponseError,
    ProviderError,
    ProviderErrorKind,
    classify_status,
)
from llm_normalizer.types import FinishReason, GenerateResult

__all__ = ["ResponseParser"]

_logger = logging.getLogger(__name__)

STATUS_ERRORS: Final[tuple[type[Exception], ...]] = (
    anthropic.APIStatusError,
    openai.APIStatusError,
)

CONN_ERRORS: Final[tuple[type[Exception], ...]] = (
    anthropic.APIConnectionError,
    openai.APIConnectionError,
    TimeoutError,
    ConnectionError,
)


class ResponseParser(ABC):
    """
    Turns one vendor's raw responses into ``GenerateResult`` values or typed errors.

    Parsers keep no state between calls and never mutate their input, so a single
    instance can be shared across threads and tasks.
    """

    #: Vendor stop/finish reason -> FinishReason. Anything missing maps to OTHER.
    stop_reasons: ClassVar[Mapping[str, FinishReason]] = {}
    #: Vendor error ``type`` -> kind, used when the status code does not classify.
    error_types: ClassVar[Mapping[str, ProviderErrorKind]] = {}

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Args:
            logger: Optional logger instance. If None, a logger named after
                    this module will be used.
            name: Optional name used to prefix log records.
                  If None, defaults to the concrete class's name.
        """
        self.logger = logger or _logger
        self.name = name if name is not None else self.__class__.__name__

    # --- entry points ------------------------------------------------------
    @abstractmethod
    def parse_success_response(self, response: Any) -> GenerateResult:
        """
        Decode a successful completion.

        Args:
            response: A JSON object (mapping) or the vendor SDK's response model.

        Raises:
            MalformedResponseError: If a structurally required field is missing
                or has the wrong type.
        """
        ...

    def parse_error_response(self, status_code: int, body: str) -> NoReturn:
        """
        Classify an error response and raise it as a ``ProviderError``.

        ``body`` need not be JSON; an undecodable body becomes the message as is.
        """
        error = self._build_error(status_code, body)
        self._log(f"Provider returned {error}", logging.DEBUG)
        raise error

    @classmethod
    def parse_stop_reason(cls, reason: Optional[str]) -> FinishReason:
        """Translate a vendor stop reason. Total: unknown values map to OTHER."""
        if isinstance(reason, str):
            mapped = cls.stop_reasons.get(reason)
            if mapped is not None:
                return mapped
        return FinishReason.OTHER

    def _finish_reason(self, reason: Optional[str]) -> FinishReason:
        finish_reason = self.parse_stop_reason(reason)
        if finish_reason is FinishReason.OTHER and reason not in self.stop_reasons:
            self._log(f"Unrecognized stop reason {reason!r}", logging.DEBUG)
        return finish_reason

    def parse_response(self, status_code: int, body: str) -> GenerateResult:
        """Dispatch a raw HTTP result to the success or error path."""
        if not 200 <= status_code <= 299:
            self.parse_error_response(status_code, body)
        try:
            document = json.loads(body)
        except (ValueError, TypeError, RecursionError) as exc:
            raise MalformedResponseError(
                f"Success response body is not valid JSON: {exc}"
            ) from exc
        return self.parse_success_response(document)

    def error_from_exception(self, exc: Exception) -> ProviderError:
        """Wrap an SDK or transport exception in a ``ProviderError``."""
        if isinstance(exc, STATUS_ERRORS):
            error = self._build_error(exc.status_code, exc.response.text)
        elif isinstance(exc, CONN_ERRORS):
            error = ProviderError(
                ProviderErrorKind.PROVIDER_UNAVAILABLE,
                0,
                f"Connection problem, unable to reach the LLM provider: {exc}",
            )
        else:
            error = ProviderError(
                ProviderErrorKind.UNKNOWN, 0, f"{exc.__class__.__name__}: {exc}"
            )
        self._log(f"Wrapping provider exception: {error}", logging.WARNING)
        error.__cause__ = exc
        return error

    # --- error decoding ----------------------------------------------------
    def _build_error(self, status_code: int, body: str) -> ProviderError:
        text = body if isinstance(body, str) else ""
        error_type, message = self._error_fields(text)

        kind = classify_status(status_code)
        if kind is ProviderErrorKind.UNKNOWN and error_type is not None:
            kind = self.error_types.get(error_type, ProviderErrorKind.UNKNOWN)

        if not message:
            message = text if text.strip() else f"HTTP {status_code}"
        return ProviderError(
            kind, status_code, message, error_type=error_type, body=text or None
        )

    def _error_fields(self, body: str) -> tuple[Optional[str], Optional[str]]:
        """Return ``(type, message)`` from an error body, or ``(None, None)``.

        Reads both ``{"type": ..., "message": ...}`` and the nested
        ``{"error": {"type": ..., "message": ...}}`` shape.
        """
        try:
            payload = json.loads(body)
        # deeply nested bodies exhaust the decoder's recursion limit
        except (ValueError, RecursionError):
            return None, None
        if not isinstance(payload, Mapping):
            return None, None

        nested = payload.get("error")
        if isinstance(nested, Mapping):
            payload = nested
        elif isinstance(nested, str) and "message" not in payload:
            payload = {"message": nested}

        error_type = payload.get("type")
        message = payload.get("message")
        return (
            error_type if isinstance(error_type, str) else None,
            message if isinstance(message, str) else None,
        )

    # --- success decoding helpers -----------------------------------------
    @staticmethod
    def _as_document(response: Any) -> Mapping[str, Any]:
        """Accept a JSON object or an SDK model; never copies a mapping."""
        if isinstance(response, Mapping):
            return response
        if hasattr(response, "model_dump"):
            return response.model_dump()
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(response).__name__}"
        )

    @staticmethod
    def _require(
        obj: Mapping[str, Any],
        key: str,
        expected: type | tuple[type, ...],
        path: str,
    ) -> Any:
        """Fetch a required field or raise ``MalformedResponseError``."""
        if key not in obj:
            raise MalformedResponseError(f"Missing required field '{path}'", field=path)
        value = obj[key]
        if not isinstance(value, expected):
            raise MalformedResponseError(
                f"Field '{path}' has type {type(value).__name__}", field=path
            )
        return value

    @staticmethod
    def _object_at(items: list[Any], index: int, path: str) -> Mapping[str, Any]:
        item = items[index]
        if not isinstance(item, Mapping):
            raise MalformedResponseError(
                f"Field '{path}' is {type(item).__name__}, expected an object",
                field=path,
            )
        return item

    def _decode_arguments(self, raw: Any, path: str) -> dict[str, Any]:
        """Decode tool arguments. Bad JSON degrades to ``{}`` with a warning."""
        if isinstance(raw, Mapping):
            return copy.deepcopy(dict(raw))
        if isinstance(raw, str) and raw.strip():
            try:
                decoded = json.loads(raw)
            except (ValueError, RecursionError) as exc:
                self._log(f"Bad JSON in tool call at {path}: {raw!r}", logging.WARNING)
                self.logger.debug("Decode failure", exc_info=exc)
                return {}
            if isinstance(decoded, dict):
                return decoded
            self._log(f"Tool arguments at {path} are not an object: {raw!r}", logging.WARNING)
        elif raw not in (None, ""):
            self._log(
                f"Unsupported tool arguments at {path}: {type(raw).__name__}",
                logging.WARNING,
            )
        return {}

    @staticmethod
    def _count(usage: Any, key: str) -> int:
        if not isinstance(usage, Mapping):
            return 0
        value = usage.get(key)
        # bool is an int subclass but never a token count
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    @staticmethod
    def _optional_str(obj: Mapping[str, Any], key: str) -> Optional[str]:
        value = obj.get(key)
        return value if isinstance(value, str) else None

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
