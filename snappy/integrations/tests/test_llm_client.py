import io
import json
import urllib.error
from unittest import mock

import pytest

from snappy.integrations.llm.client import GeminiClient
from snappy.integrations.llm.client import LLMClient
from snappy.integrations.llm.client import LLMConfig
from snappy.integrations.llm.client import LLMNotConfiguredError
from snappy.integrations.llm.client import PermanentLLMError
from snappy.integrations.llm.client import TransientLLMError
from snappy.integrations.llm.client import get_llm_client_from_settings


class ScriptedClient(LLMClient):
    """Replays a fixed sequence of outcomes, one per attempt."""

    def __init__(self, outcomes, **cfg):
        self.sleeps = []
        super().__init__(LLMConfig(**cfg), sleep=self.sleeps.append)
        self.outcomes = list(outcomes)
        self.calls = 0

    def _generate_once(self, prompt, images):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_transient_failures_are_retried_with_linear_backoff():
    client = ScriptedClient(
        [TransientLLMError("429"), TransientLLMError("503"), "ok"],
        max_retries=3,
        backoff_seconds=1.0,
    )
    assert client.generate("hi") == "ok"
    assert client.calls == 3
    assert client.sleeps == [1.0, 2.0]


def test_last_transient_failure_surfaces():
    client = ScriptedClient([TransientLLMError("x")] * 3, max_retries=3, backoff_seconds=0.5)
    with pytest.raises(TransientLLMError):
        client.generate("hi")
    assert client.calls == 3
    assert client.sleeps == [0.5, 1.0]


def test_permanent_failure_is_not_retried():
    client = ScriptedClient([PermanentLLMError("400"), "never"], max_retries=3)
    with pytest.raises(PermanentLLMError):
        client.generate("hi")
    assert client.calls == 1
    assert client.sleeps == []


def _http_error(code):
    return urllib.error.HTTPError(
        "https://example.invalid",
        code,
        "error",
        {},
        io.BytesIO(b'{"error": "nope"}'),
    )


@pytest.fixture
def gemini():
    return GeminiClient(
        LLMConfig(api_key="test-key", max_retries=2, backoff_seconds=0),
        sleep=lambda _: None,
    )


def test_gemini_extracts_text(gemini):
    payload = {"candidates": [{"content": {"parts": [{"text": "hello "}, {"text": "world"}]}}]}
    with mock.patch("urllib.request.urlopen") as urlopen:
        urlopen.return_value.__enter__.return_value.read.return_value = json.dumps(payload).encode()
        assert gemini.generate("say hi") == "hello world"

    request = urlopen.call_args.args[0]
    assert request.get_header("X-goog-api-key") == "test-key"
    assert "gemini-2.5-flash" in request.full_url


@pytest.mark.parametrize("code", [429, 500, 503])
def test_gemini_retries_retryable_status(gemini, code):
    with mock.patch("urllib.request.urlopen", side_effect=_http_error(code)) as urlopen:
        with pytest.raises(TransientLLMError):
            gemini.generate("x")
    assert urlopen.call_count == 2


def test_gemini_client_error_is_permanent(gemini):
    with mock.patch("urllib.request.urlopen", side_effect=_http_error(400)) as urlopen:
        with pytest.raises(PermanentLLMError):
            gemini.generate("x")
    assert urlopen.call_count == 1


def test_gemini_network_error_is_transient(gemini):
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        with pytest.raises(TransientLLMError):
            gemini.generate("x")


def test_gemini_blocked_prompt_is_permanent(gemini):
    with mock.patch("urllib.request.urlopen") as urlopen:
        urlopen.return_value.__enter__.return_value.read.return_value = json.dumps(
            {"promptFeedback": {"blockReason": "SAFETY"}},
        ).encode()
        with pytest.raises(PermanentLLMError, match="SAFETY"):
            gemini.generate("x")


def test_gemini_requires_key():
    with pytest.raises(LLMNotConfiguredError):
        GeminiClient(LLMConfig(api_key=None))


def test_factory_respects_settings(settings):
    settings.SNAPPY_AI_ENABLED = False
    assert get_llm_client_from_settings() is None

    settings.SNAPPY_AI_ENABLED = True
    settings.GEMINI_API_KEY = None
    assert get_llm_client_from_settings() is None

    settings.GEMINI_API_KEY = "k"
    settings.LLM_PROVIDER = "gemini"
    client = get_llm_client_from_settings()
    assert isinstance(client, GeminiClient)
    assert client.cfg.api_key == "k"
