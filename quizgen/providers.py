import logging
from abc import ABC, abstractmethod

from groq import AsyncGroq
from openai import AsyncOpenAI

from quizgen.config import Settings

logger = logging.getLogger(__name__)


class CompletionProvider(ABC):
    """Send one system + user prompt, get back one text reply."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        pass


class GroqProvider(CompletionProvider):
    def __init__(self, api_key: str, model: str):
        self.client = AsyncGroq(api_key=api_key, max_retries=0)
        self.model = model

    async def complete(self, system_prompt, user_prompt, max_tokens, temperature):
        chat_completion = await self.client.chat.completions.create(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return chat_completion.choices[0].message.content or ""


class OpenAIProvider(CompletionProvider):
    def __init__(self, api_key: str, model: str):
        self.client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model

    async def complete(self, system_prompt, user_prompt, max_tokens, temperature):
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return completion.choices[0].message.content or ""


def create_provider(settings: Settings) -> CompletionProvider:
    if settings.provider == "openai":
        provider = OpenAIProvider(api_key=settings.openai_api_key, model=settings.model)
    else:
        provider = GroqProvider(api_key=settings.groq_api_key, model=settings.model)

    logger.info(f"Completion provider: {settings.provider} ({settings.model})")
    return provider
