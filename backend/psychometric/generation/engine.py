import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from psychometric.config import questions_per_batch, questions_per_section
from psychometric.generation import fallback_bank
from psychometric.generation.categories import SECTION_BEHAVIORAL

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchPlan:
    index: int
    start: int
    categories: list[str]


@dataclass
class SectionGenerationResult:
    section_number: int
    target: int
    questions: list[dict] = field(default_factory=list)
    provider_count: int = 0
    fallback_bank_count: int = 0
    placeholder_count: int = 0
    failed_batches: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def summary(self) -> dict:
        return {
            "sectionNumber": self.section_number,
            "target": self.target,
            "providerCount": self.provider_count,
            "fallbackBankCount": self.fallback_bank_count,
            "fallbackBankVersion": fallback_bank.BANK_VERSION if self.fallback_bank_count else None,
            "placeholderCount": self.placeholder_count,
            "failedBatches": list(self.failed_batches),
        }


def plan_batches(categories: list[str], target: int, batch_size: int) -> list[BatchPlan]:
    if not categories:
        raise ValueError("at least one category is required to plan batches")
    if target <= 0 or batch_size <= 0:
        raise ValueError("target and batch size must be positive")

    plans: list[BatchPlan] = []
    for index in range(math.ceil(target / batch_size)):
        start = index * batch_size
        size = min(batch_size, target - start)
        batch_categories = [categories[(start + offset) % len(categories)] for offset in range(size)]
        plans.append(BatchPlan(index=index, start=start, categories=batch_categories))
    return plans


class QuestionGenerationEngine:
    """Fans a section out into provider batches and guarantees the target count."""

    def __init__(self, provider, *, target: int | None = None, batch_size: int | None = None) -> None:
        self.provider = provider
        self.target = target if target is not None else questions_per_section()
        self.batch_size = batch_size if batch_size is not None else questions_per_batch()

    def generate_section(
        self,
        section_number: int,
        categories: list[str],
        item_type: str,
        user_profile,
        *,
        target: int | None = None,
        batch_size: int | None = None,
    ) -> SectionGenerationResult:
        target = target if target is not None else self.target
        batch_size = batch_size if batch_size is not None else self.batch_size
        categories = list(categories)
        plans = plan_batches(categories, target, batch_size)

        result = SectionGenerationResult(section_number=section_number, target=target)
        for plan, items, error in self._run_batches(section_number, item_type, user_profile, plans):
            if error is not None:
                result.failed_batches.append(plan.index)
                result.errors.append(error)
                continue
            # A batch never contributes more than it asked for.
            result.questions.extend(items[: len(plan.categories)])
        result.provider_count = len(result.questions)

        if result.failed_batches:
            LOGGER.warning(
                "Section %s: %d of %d batches failed; %d/%d questions from provider",
                section_number,
                len(result.failed_batches),
                len(plans),
                result.provider_count,
                target,
            )

        self._backfill(result, categories, item_type)
        if len(result.questions) != target:
            raise RuntimeError(
                f"section {section_number} produced {len(result.questions)} questions, expected {target}"
            )
        LOGGER.info(
            "Section %s generated %d questions (provider=%d, fallback_bank=%d, placeholder=%d)",
            section_number,
            len(result.questions),
            result.provider_count,
            result.fallback_bank_count,
            result.placeholder_count,
        )
        return result

    def _run_batches(self, section_number: int, item_type: str, user_profile, plans: list[BatchPlan]):
        outcomes: list[tuple[BatchPlan, list[dict], str | None]] = []
        with ThreadPoolExecutor(max_workers=len(plans), thread_name_prefix=f"section{section_number}-batch") as pool:
            futures = [
                pool.submit(
                    self.provider.generate_batch,
                    section_number,
                    plan.categories,
                    item_type,
                    user_profile,
                )
                for plan in plans
            ]

        for plan, future in zip(plans, futures):
            try:
                items, error = future.result()
            except Exception as exc:
                LOGGER.warning("Section %s batch %d raised: %s", section_number, plan.index, exc)
                items, error = [], str(exc) or exc.__class__.__name__
            if error is None and not items:
                error = "provider returned no items"
            outcomes.append((plan, list(items or []), error))
        return outcomes

    def _backfill(self, result: SectionGenerationResult, categories: list[str], item_type: str) -> None:
        missing = result.target - len(result.questions)
        if missing <= 0:
            return

        if result.section_number == SECTION_BEHAVIORAL:
            slot_categories = [
                categories[(len(result.questions) + offset) % len(categories)] for offset in range(missing)
            ]
            drawn = fallback_bank.draw_for_categories(slot_categories, item_type)
            result.questions.extend(drawn)
            result.fallback_bank_count = len(drawn)
            missing -= len(drawn)

        for _ in range(missing):
            position = len(result.questions)
            result.questions.append(
                fallback_bank.build_placeholder(
                    result.section_number,
                    categories[position % len(categories)],
                    item_type,
                    position + 1,
                )
            )
            result.placeholder_count += 1

        LOGGER.warning(
            "Section %s backfilled %d questions (fallback_bank=%d, placeholder=%d)",
            result.section_number,
            result.fallback_bank_count + result.placeholder_count,
            result.fallback_bank_count,
            result.placeholder_count,
        )
