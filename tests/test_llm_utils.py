"""
Tests for model routing and the LangChain model provider
"""

import json

import pytest
from langchain_core.exceptions import OutputParserException
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from content_brain import config
from content_brain.models import CallToAction
from content_brain.utils.llm_utils import LangChainModelProvider, get_llm


class TestGetLLM:

    @pytest.fixture(autouse=True)
    def api_keys(self, monkeypatch):
        monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "anthropic-key")
        monkeypatch.setattr(config, "OPENAI_API_KEY", "openai-key")
        monkeypatch.setattr(config, "GROQ_API_KEY", "groq-key")

    def test_claude_models_use_anthropic(self):
        from langchain_anthropic import ChatAnthropic
        assert isinstance(get_llm("claude-sonnet-4-20250514"), ChatAnthropic)

    @pytest.mark.parametrize("model_name", ["gpt-4o", "o3-2025-04-16", "o4-mini"])
    def test_openai_models(self, model_name):
        from langchain_openai import ChatOpenAI
        assert isinstance(get_llm(model_name), ChatOpenAI)

    def test_other_models_use_groq(self):
        from langchain_groq import ChatGroq
        assert isinstance(get_llm("openai/gpt-oss-120b"), ChatGroq)

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(config, "ANTHROPIC_API_KEY", None)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            get_llm("claude-3-5-haiku")


class TestLangChainModelProvider:

    @staticmethod
    def provider_with(*responses) -> LangChainModelProvider:
        models = []

        def factory(model_name, temperature):
            model = FakeListChatModel(responses=list(responses))
            models.append(model_name)
            return model

        provider = LangChainModelProvider(llm_factory=factory)
        provider.created = models
        return provider

    @pytest.mark.asyncio
    async def test_parses_json_output(self):
        cta = {"type": "contact_us", "message": "Talk to us", "url": None}
        provider = self.provider_with(f"```json\n{json.dumps(cta)}\n```")

        result = await provider.complete("gpt-4o", "system", "user", CallToAction)

        assert result == cta

    @pytest.mark.asyncio
    async def test_unparseable_output(self):
        provider = self.provider_with("this is not json")
        with pytest.raises(OutputParserException):
            await provider.complete("gpt-4o", "system", "user", CallToAction)

    @pytest.mark.asyncio
    async def test_models_cached_per_name(self):
        provider = self.provider_with('{"type": "a", "message": "b"}', '{"type": "a", "message": "b"}')
        await provider.complete("gpt-4o", "s", "u", CallToAction)
        await provider.complete("gpt-4o", "s", "u", CallToAction)
        assert provider.created == ["gpt-4o"]
