"""Normalize a live Anthropic response with llm-normalizer."""

import asyncio

import anthropic
from anthropic import AsyncAnthropic

from llm_normalizer import Provider, ProviderError, get_parser


async def basic_anthropic_example():
    """Send one request and print the normalized result."""
    print("=== Basic Anthropic Example ===")

    parser = get_parser(Provider.ANTHROPIC)

    # Reads ANTHROPIC_API_KEY from the environment
    async with AsyncAnthropic() as client:
        try:
            message = await client.messages.create(
                model="claude-3-5-haiku-20241022",
                max_tokens=150,
                messages=[{"role": "user", "content": "What is the capital of Italy?"}],
            )
        except anthropic.APIError as exc:
            error = parser.error_from_exception(exc)
            print(f"❌ {error.kind}: {error.message} (retryable={error.retryable})")
            return

    result = parser.parse_success_response(message)
    print(f"🤖 {result.text}")
    print(f"🏁 Finish reason: {result.finish_reason}")
    print(f"📊 Usage: {result.usage.input_tokens} in / {result.usage.output_tokens} out")


def raw_http_example():
    """Parse status code + body pairs, as a transport layer would hand them over."""
    print("\n=== Raw HTTP Example ===")

    parser = get_parser("anthropic")

    ok = '{"content": [{"type": "text", "text": "Rome."}], "stop_reason": "end_turn"}'
    print(f"🤖 {parser.parse_response(200, ok).text}")

    try:
        parser.parse_response(529, '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}')
    except ProviderError as exc:
        print(f"❌ {exc}")


if __name__ == "__main__":
    raw_http_example()
    asyncio.run(basic_anthropic_example())
