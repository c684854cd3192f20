import json
import math
import re
from typing import Any
from uuid import uuid4

from psychometric.generation.categories import ITEM_TYPE_MCQ, SECTION_BEHAVIORAL
from psychometric.generation.fallback_bank import default_options, select_best_option

DEFAULT_IMPACT_SCORE = 50

_ARRAY_PATTERN = re.compile(r"\[.*\]", re.DOTALL)


class ProviderResponseError(ValueError):
    """Raised when a provider payload cannot be turned into questions."""


def extract_json_array(content: str) -> str:
    text = str(content or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    text = text.strip()
    match = _ARRAY_PATTERN.search(text)
    if match:
        return match.group()
    return text


def parse_provider_items(
    content: str,
    section_number: int,
    categories: list[str],
    item_type: str,
) -> list[dict]:
    if not categories:
        raise ProviderResponseError("no categories supplied for parsing")
    try:
        payload = json.loads(extract_json_array(content))
    except (TypeError, ValueError) as exc:
        raise ProviderResponseError(f"provider returned invalid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise ProviderResponseError("provider payload is not a JSON array")

    questions: list[dict] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            continue
        category = categories[index % len(categories)]
        if section_number == SECTION_BEHAVIORAL:
            question = _parse_behavioral_item(raw, category, item_type)
        else:
            question = _parse_choice_item(raw, section_number, category, item_type)
        if question is not None:
            questions.append(question)

    if not questions:
        raise ProviderResponseError("provider payload contained no usable questions")
    return questions


def _parse_choice_item(raw: dict[str, Any], section_number: int, category: str, item_type: str) -> dict | None:
    prompt = raw.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        return None

    raw_options = raw.get("options")
    options = [str(option) for option in raw_options if isinstance(option, (str, int, float))] if isinstance(raw_options, list) else []
    if len(options) < 2:
        options = default_options(item_type)

    fallback_index = 0 if item_type == ITEM_TYPE_MCQ else None
    correct_index = raw.get("correctOptionIndex")
    if (
        isinstance(correct_index, bool)
        or not isinstance(correct_index, (int, float))
        or not math.isfinite(correct_index)
    ):
        correct_index = fallback_index
    else:
        correct_index = int(correct_index)
        if correct_index < 0 or correct_index >= len(options):
            correct_index = fallback_index

    return {
        "id": str(uuid4()),
        "sectionNumber": section_number,
        "category": category,
        "type": item_type,
        "prompt": prompt.strip(),
        "options": options,
        "scenario": None,
        "correctOptionIndex": correct_index,
        "traitImpactScores": None,
        "rationales": None,
        "source": "provider",
    }


def _parse_behavioral_item(raw: dict[str, Any], category: str, item_type: str) -> dict | None:
    scenario = raw.get("scenario") if isinstance(raw.get("scenario"), str) else None
    prompt_text = raw.get("prompt") if isinstance(raw.get("prompt"), str) else None
    if scenario is None and prompt_text is not None:
        scenario = prompt_text

    if scenario and prompt_text and prompt_text.strip() and prompt_text != scenario:
        combined_prompt = f"{scenario} {prompt_text}"
    else:
        combined_prompt = scenario or prompt_text
    if not combined_prompt or not combined_prompt.strip():
        return None

    options: list[str] = []
    impact_scores: list[int] = []
    rationales: list[str] = []
    raw_options = raw.get("options") if isinstance(raw.get("options"), list) else []
    for option in raw_options:
        if isinstance(option, dict):
            text = option.get("text")
            if not isinstance(text, str) or not text.strip():
                continue
            options.append(text.strip())
            impact_scores.append(_impact_score(option.get("traitImpactScore")))
            rationale = option.get("rationale")
            rationales.append(rationale.strip() if isinstance(rationale, str) else "")
        elif isinstance(option, str) and option.strip():
            options.append(option.strip())
            impact_scores.append(DEFAULT_IMPACT_SCORE)
            rationales.append("")

    if len(options) < 2:
        options = default_options(item_type)
        impact_scores = [DEFAULT_IMPACT_SCORE] * len(options)
        rationales = [""] * len(options)

    return {
        "id": str(uuid4()),
        "sectionNumber": SECTION_BEHAVIORAL,
        "category": category,
        "type": item_type,
        "prompt": combined_prompt.strip(),
        "options": options,
        "scenario": scenario,
        "correctOptionIndex": select_best_option(impact_scores),
        "traitImpactScores": impact_scores,
        "rationales": rationales,
        "source": "provider",
    }


def _impact_score(value: Any) -> int:
    # json.loads accepts NaN and Infinity.
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return DEFAULT_IMPACT_SCORE
    return max(0, min(100, int(value)))
