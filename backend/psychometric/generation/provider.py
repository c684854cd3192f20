import logging
from typing import Any

from openai import OpenAI

from psychometric.config import (
    MAX_QUESTIONS_PER_BATCH,
    openai_api_key,
    openai_model,
    provider_timeout_seconds,
)
from psychometric.generation.parsing import parse_provider_items
from psychometric.generation.prompts import SYSTEM_PROMPT, build_batch_prompt

LOGGER = logging.getLogger(__name__)

MAX_BATCH_CATEGORIES = MAX_QUESTIONS_PER_BATCH


class ContentProvider:
    """Sends one generation request per batch and returns ``(items, error)``.

    Failures of any kind are reported through ``error``; nothing is raised
    past this boundary and no request is retried.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        timeout_seconds: float | None = None,
        client: Any | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else openai_api_key()
        self.model = model or openai_model()
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else provider_timeout_seconds()
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout_seconds, max_retries=0)
        return self._client

    def generate_batch(
        self,
        section_number: int,
        categories: list[str],
        item_type: str,
        user_profile,
    ) -> tuple[list[dict], str | None]:
        if not categories or len(categories) > MAX_BATCH_CATEGORIES:
            return [], f"batch must carry 1..{MAX_BATCH_CATEGORIES} categories, got {len(categories)}"
        if not self.configured:
            return [], "provider not configured"

        prompt = build_batch_prompt(section_number, categories, item_type, user_profile)
        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.7,
            )
            content = response.choices[0].message.content or ""
            items = parse_provider_items(content, section_number, categories, item_type)
        except Exception as exc:
            LOGGER.warning(
                "Content provider batch failed for section %s (%d categories): %s",
                section_number,
                len(categories),
                exc,
            )
            return [], str(exc) or exc.__class__.__name__
        return items, None
