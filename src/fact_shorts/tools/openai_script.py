"""Narration script generation with OpenAI chat completions."""

from __future__ import annotations

import structlog
from openai import AsyncOpenAI, OpenAIError

from fact_shorts.config import Settings, settings as default_settings
from fact_shorts.errors import ScriptGenerationError

logger = structlog.get_logger()

SCRIPT_PROMPT_TEMPLATE = "Write a unique historical fact about {subject} in 60 to 70 words"


def build_script_prompt(subject: str) -> str:
    return SCRIPT_PROMPT_TEMPLATE.format(subject=subject)


class OpenAIScriptGenerator:
    def __init__(self, client: AsyncOpenAI | None = None, settings: Settings | None = None):
        self._settings = settings or default_settings
        self._client = client or AsyncOpenAI(api_key=self._settings.openai_api_key)

    async def generate(self, prompt: str) -> str:
        logger.info("openai_script.start", model=self._settings.script_model, prompt_len=len(prompt))
        try:
            response = await self._client.chat.completions.create(
                model=self._settings.script_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.9,
            )
        except OpenAIError as exc:
            raise ScriptGenerationError(f"Script generation failed: {exc}") from exc

        text = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not text:
            raise ScriptGenerationError("Script generation returned no text")

        logger.info("openai_script.done", words=len(text.split()))
        return text
