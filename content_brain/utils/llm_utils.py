"""
Utility functions for LLM initialization and structured completions
"""

import logging
from typing import Callable, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from pydantic import BaseModel

from .. import config

logger = logging.getLogger(__name__)

OPENAI_PREFIXES = ("gpt", "o1", "o3", "o4", "chatgpt")
REASONING_PREFIXES = ("o1", "o3", "o4")


def get_llm(model_name: Optional[str] = None, temperature: float = config.DEFAULT_TEMPERATURE):
    """
    Initialize and return the chat model for a model name.

    Args:
        model_name: Model identifier from the agent's prompt config (default: DEFAULT_MODEL)
        temperature: Temperature setting for the LLM (ignored by OpenAI reasoning models)

    Returns:
        LLM instance (ChatAnthropic, ChatOpenAI or ChatGroq)

    Environment Variables:
        ANTHROPIC_API_KEY: required for "claude*" models
        OPENAI_API_KEY: required for "gpt*", "o1*", "o3*" and "o4*" models
        GROQ_API_KEY: required for every other model name
    """
    model_name = model_name or config.DEFAULT_MODEL
    lowered = model_name.lower()

    if lowered.startswith("claude"):
        from langchain_anthropic import ChatAnthropic

        if not config.ANTHROPIC_API_KEY:
            raise ValueError(f"ANTHROPIC_API_KEY environment variable is required for model {model_name}")

        return ChatAnthropic(
            model=model_name,
            temperature=temperature,
            max_tokens=config.MAX_OUTPUT_TOKENS,
            api_key=config.ANTHROPIC_API_KEY
        )

    if lowered.startswith(OPENAI_PREFIXES):
        from langchain_openai import ChatOpenAI

        if not config.OPENAI_API_KEY:
            raise ValueError(f"OPENAI_API_KEY environment variable is required for model {model_name}")

        # Reasoning models only accept the default temperature
        if lowered.startswith(REASONING_PREFIXES):
            return ChatOpenAI(model_name=model_name, openai_api_key=config.OPENAI_API_KEY)

        return ChatOpenAI(
            temperature=temperature,
            model_name=model_name,
            openai_api_key=config.OPENAI_API_KEY
        )

    from langchain_groq import ChatGroq

    if not config.GROQ_API_KEY:
        raise ValueError(f"GROQ_API_KEY environment variable is required for model {model_name}")

    return ChatGroq(
        temperature=temperature,
        model_name=model_name,
        groq_api_key=config.GROQ_API_KEY
    )


class LangChainModelProvider:
    """
    Model provider that calls LangChain chat models and parses JSON output.

    Parse failures surface as langchain's OutputParserException; every
    other exception comes from the provider or the network.
    """

    def __init__(self, temperature: float = config.DEFAULT_TEMPERATURE, llm_factory: Callable = get_llm):
        self.temperature = temperature
        self.llm_factory = llm_factory
        self._llms = {}

    def get_model(self, model_name: str):
        if model_name not in self._llms:
            self._llms[model_name] = self.llm_factory(model_name, self.temperature)
        return self._llms[model_name]

    async def complete(
        self,
        model_name: str,
        system_prompt: str,
        user_prompt: str,
        output_schema: type[BaseModel],
    ) -> dict:
        parser = JsonOutputParser(pydantic_object=output_schema)
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=f"{user_prompt}\n\n{parser.get_format_instructions()}"),
        ]
        chain = self.get_model(model_name) | parser
        return await chain.ainvoke(messages)
