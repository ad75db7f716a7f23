from unittest.mock import AsyncMock, Mock

import pytest

from standup_assistant.agents.response_synthesizer import (
    NO_INFORMATION_TEXT,
    SYSTEM_PROMPT,
    ResponseSynthesizer,
    is_uncertain,
)
from standup_assistant.services.llm_provider import LLMError, LLMProvider

CONTEXTS = ["Alice is out of the office right now (all day). Reason: Sick.", "", "Bob is working."]
JOINED = "Alice is out of the office right now (all day). Reason: Sick.\n\nBob is working."


@pytest.fixture
def llm():
    provider = Mock(spec=LLMProvider)
    provider.is_configured = True
    provider.generate_completion = AsyncMock(return_value={"content": "Alice is out sick today."})
    return provider


class TestSynthesize:
    @pytest.mark.asyncio
    async def test_empty_context_skips_model(self, llm):
        synthesizer = ResponseSynthesizer(llm)

        result = await synthesizer.synthesize("where is alice?", [])

        assert result.text == NO_INFORMATION_TEXT
        llm.generate_completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_without_model_returns_joined_context(self):
        result = await ResponseSynthesizer(None).synthesize("q", CONTEXTS)
        assert result.text == JOINED
        assert not result.used_model

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_not_called(self, llm):
        llm.is_configured = False

        result = await ResponseSynthesizer(llm).synthesize("q", CONTEXTS)

        assert result.text == JOINED
        llm.generate_completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_confident_answer_is_used(self, llm):
        synthesizer = ResponseSynthesizer(llm, temperature=0.1, max_tokens=120)

        result = await synthesizer.synthesize("where is alice?", CONTEXTS)

        assert result.text == "Alice is out sick today."
        assert result.model_answer == "Alice is out sick today."
        kwargs = llm.generate_completion.await_args.kwargs
        assert kwargs["system_prompt"] == SYSTEM_PROMPT
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 120
        assert "Question: where is alice?" in kwargs["prompt"]
        assert JOINED in kwargs["prompt"]

    @pytest.mark.asyncio
    async def test_uncertain_answer_falls_back(self, llm):
        llm.generate_completion.return_value = {"content": "I don’t know where Alice is."}

        result = await ResponseSynthesizer(llm).synthesize("where is alice?", CONTEXTS)

        assert result.text == JOINED
        assert result.model_answer is None

    @pytest.mark.asyncio
    async def test_model_error_falls_back(self, llm):
        llm.generate_completion.side_effect = LLMError("rate limited")

        result = await ResponseSynthesizer(llm).synthesize("where is alice?", CONTEXTS)

        assert result.text == JOINED


@pytest.mark.parametrize("answer,expected", [
    ("I'm not sure about that.", True),
    ("There is NOT ENOUGH INFORMATION here", True),
    ("The context doesn't mention where Alice is.", True),
    ("The provided context does not say when Bob is back.", True),
    ("Alice is on vacation until Monday.", False),
])
def test_is_uncertain(answer, expected):
    assert is_uncertain(answer) is expected


def test_prompt_asks_for_a_recognizable_non_answer():
    non_answer = SYSTEM_PROMPT.split("reply with exactly: ", 1)[1].splitlines()[0]
    assert is_uncertain(non_answer)
