"""Tests for error classification and the error response path."""

import httpx
import anthropic
import openai
import pytest

from llm_normalizer import (
    AnthropicResponseParser,
    MalformedResponseError,
    OpenAIResponseParser,
    ProviderError,
    ProviderErrorKind,
    classify_status,
)


@pytest.fixture
def parser():
    return AnthropicResponseParser()


def _request():
    return httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class TestClassifyStatus:

    @pytest.mark.parametrize(
        "status, kind",
        [
            (401, ProviderErrorKind.AUTHENTICATION),
            (403, ProviderErrorKind.AUTHENTICATION),
            (429, ProviderErrorKind.RATE_LIMITED),
            (500, ProviderErrorKind.PROVIDER_UNAVAILABLE),
            (503, ProviderErrorKind.PROVIDER_UNAVAILABLE),
            (529, ProviderErrorKind.PROVIDER_UNAVAILABLE),
            (400, ProviderErrorKind.INVALID_REQUEST),
            (404, ProviderErrorKind.INVALID_REQUEST),
            (413, ProviderErrorKind.INVALID_REQUEST),
            (0, ProviderErrorKind.UNKNOWN),
            (200, ProviderErrorKind.UNKNOWN),
            (302, ProviderErrorKind.UNKNOWN),
        ],
    )
    def test_status_table(self, status, kind):
        """Test status codes map to error kinds."""
        assert classify_status(status) is kind


class TestParseErrorResponse:
    """parse_error_response always raises a ProviderError."""

    def test_rate_limit_with_flat_body(self, parser):
        """Test rate limit with flat body."""
        body = '{"type":"rate_limit_error","message":"Number of requests has exceeded your rate limit"}'

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(429, body)

        error = exc_info.value
        assert error.kind is ProviderErrorKind.RATE_LIMITED
        assert error.status_code == 429
        assert error.message == "Number of requests has exceeded your rate limit"
        assert error.error_type == "rate_limit_error"
        assert error.retryable

    def test_nested_anthropic_body(self, parser):
        """Test the nested Anthropic error body is read."""
        body = '{"type":"error","error":{"type":"invalid_request_error","message":"max_tokens: field required"}}'

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(400, body)

        assert exc_info.value.kind is ProviderErrorKind.INVALID_REQUEST
        assert exc_info.value.message == "max_tokens: field required"
        assert exc_info.value.error_type == "invalid_request_error"
        assert not exc_info.value.retryable

    def test_html_body_uses_raw_text(self, parser):
        """Test html body uses raw text."""
        body = "<html><body>Bad Gateway</body></html>"

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(500, body)

        assert exc_info.value.kind is ProviderErrorKind.PROVIDER_UNAVAILABLE
        assert exc_info.value.message == body
        assert exc_info.value.error_type is None
        assert exc_info.value.body == body

    @pytest.mark.parametrize("body", ['{"type": "rate', "null", "[1, 2]", "42", '"text"'])
    def test_truncated_or_non_object_json(self, parser, body):
        """Test truncated or non object json."""
        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(429, body)

        assert exc_info.value.kind is ProviderErrorKind.RATE_LIMITED
        assert exc_info.value.message == body

    def test_deeply_nested_body_degrades_to_status(self, parser):
        """Test a body too deeply nested to decode is classified by status alone."""
        body = "[" * 100000 + "]" * 100000

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(500, body)

        assert exc_info.value.kind is ProviderErrorKind.PROVIDER_UNAVAILABLE
        assert exc_info.value.message == body
        assert exc_info.value.error_type is None

    def test_surrounding_whitespace_is_kept_in_message(self, parser):
        """Test the raw body is used verbatim as the message."""
        body = "  upstream request timeout\n"

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(504, body)

        assert exc_info.value.message == body

    def test_whitespace_only_body(self, parser):
        """Test a blank body falls back to the status line."""
        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(502, " \n\t")

        assert exc_info.value.message == "HTTP 502"

    def test_empty_body(self, parser):
        """Test an empty body falls back to the status line."""
        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(503, "")

        assert exc_info.value.message == "HTTP 503"
        assert exc_info.value.body is None

    def test_status_wins_over_body_type(self, parser):
        """Test status wins over body type."""
        body = '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}'

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(401, body)

        assert exc_info.value.kind is ProviderErrorKind.AUTHENTICATION

    def test_body_type_used_when_status_does_not_classify(self, parser):
        """Test body type used when status does not classify."""
        body = '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}'

        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(200, body)

        assert exc_info.value.kind is ProviderErrorKind.PROVIDER_UNAVAILABLE

    def test_unknown_status_and_type(self, parser):
        """Test unknown status and type."""
        with pytest.raises(ProviderError) as exc_info:
            parser.parse_error_response(0, '{"type": "mystery_error", "message": "?"}')

        assert exc_info.value.kind is ProviderErrorKind.UNKNOWN

    def test_openai_error_body(self):
        """Test the OpenAI error body is read."""
        body = '{"error": {"message": "You exceeded your current quota", "type": "insufficient_quota", "code": "insufficient_quota"}}'

        with pytest.raises(ProviderError) as exc_info:
            OpenAIResponseParser().parse_error_response(429, body)

        assert exc_info.value.kind is ProviderErrorKind.RATE_LIMITED
        assert exc_info.value.message == "You exceeded your current quota"

    def test_error_string_format(self, parser):
        """Test the error renders kind, status and message."""
        with pytest.raises(ProviderError, match=r"Rate limit error \(429\): slow down"):
            parser.parse_error_response(429, '{"type": "rate_limit_error", "message": "slow down"}')


class TestParseResponse:
    """parse_response dispatches on the status code."""

    def test_success_status(self, parser):
        """Test a 2xx status goes to the success path."""
        body = '{"content": [{"type": "text", "text": "ok"}], "stop_reason": "end_turn"}'

        assert parser.parse_response(200, body).text == "ok"

    def test_error_status(self, parser):
        """Test a non-2xx status goes to the error path."""
        with pytest.raises(ProviderError):
            parser.parse_response(529, '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}')

    def test_success_status_with_invalid_json(self, parser):
        """Test success status with invalid json."""
        with pytest.raises(MalformedResponseError):
            parser.parse_response(200, "<html>")

    def test_success_status_with_deeply_nested_json(self, parser):
        """Test a success body too deeply nested to decode is malformed."""
        body = '{"content": [], "x": ' + "[" * 100000 + "]" * 100000 + "}"

        with pytest.raises(MalformedResponseError):
            parser.parse_response(200, body)


class TestErrorFromException:
    """SDK exceptions are converted, not raised."""

    def test_anthropic_status_error(self, parser):
        """Test an Anthropic SDK status error is classified."""
        response = httpx.Response(
            429,
            request=_request(),
            text='{"type":"error","error":{"type":"rate_limit_error","message":"Too many requests"}}',
        )
        exc = anthropic.RateLimitError("rate limited", response=response, body=None)

        error = parser.error_from_exception(exc)

        assert isinstance(error, ProviderError)
        assert error.kind is ProviderErrorKind.RATE_LIMITED
        assert error.status_code == 429
        assert error.message == "Too many requests"
        assert error.__cause__ is exc

    def test_openai_status_error(self, parser):
        """Test an OpenAI SDK status error is classified."""
        response = httpx.Response(
            401,
            request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
            text='{"error": {"message": "Incorrect API key provided", "type": "invalid_request_error"}}',
        )
        exc = openai.AuthenticationError("bad key", response=response, body=None)

        error = OpenAIResponseParser().error_from_exception(exc)

        assert error.kind is ProviderErrorKind.AUTHENTICATION
        assert error.message == "Incorrect API key provided"

    @pytest.mark.parametrize(
        "exc",
        [
            anthropic.APIConnectionError(request=_request()),
            TimeoutError("timed out"),
            ConnectionError("reset"),
        ],
    )
    def test_connection_errors(self, parser, exc):
        """Test connection failures become provider unavailable."""
        error = parser.error_from_exception(exc)

        assert error.kind is ProviderErrorKind.PROVIDER_UNAVAILABLE
        assert error.status_code == 0
        assert error.retryable

    def test_other_exception(self, parser):
        """Test other exceptions become unknown errors."""
        error = parser.error_from_exception(KeyError("boom"))

        assert error.kind is ProviderErrorKind.UNKNOWN
        assert error.message.startswith("KeyError")
