import logging

from psychometric.generation.categories import (
    BIG_FIVE_TRAITS,
    SECTION_APTITUDE,
    SECTION_BEHAVIORAL,
    SECTION_DOMAIN,
    SECTION_NAMES,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_TRAIT_SCORE = 50
LEGACY_LIKERT_STEP = 25

RESULT_SOURCE_SNAPSHOT = "submission_snapshot"
RESULT_SOURCE_RECOMPUTED = "recomputed"


def _answer_lookup(answers: list[dict] | None) -> dict[str, int | None]:
    lookup: dict[str, int | None] = {}
    for answer in answers or []:
        question_id = answer.get("questionId")
        if question_id is None or question_id in lookup:
            continue
        lookup[str(question_id)] = answer.get("selectedOptionIndex")
    return lookup


def _selected_index(question: dict, lookup: dict[str, int | None]) -> int | None:
    selected = lookup.get(str(question.get("id")))
    if isinstance(selected, bool) or not isinstance(selected, int):
        return None
    return selected


def _impact_for_selection(question: dict, selected: int) -> int:
    impacts = question.get("traitImpactScores")
    if isinstance(impacts, list) and 0 <= selected < len(impacts):
        return int(impacts[selected])
    return selected * LEGACY_LIKERT_STEP


def _trait_for_category(category: str | None) -> str | None:
    lowered = str(category or "").lower()
    for trait in BIG_FIVE_TRAITS:
        if trait in lowered:
            return trait
    return None


def calculate_trait_scores(questions: list[dict] | None, answers: list[dict] | None) -> dict[str, int]:
    scores = {trait: DEFAULT_TRAIT_SCORE for trait in BIG_FIVE_TRAITS}
    if not questions or not answers:
        return scores

    lookup = _answer_lookup(answers)
    collected: dict[str, list[int]] = {trait: [] for trait in BIG_FIVE_TRAITS}
    for question in questions:
        if question.get("sectionNumber") != SECTION_BEHAVIORAL:
            continue
        trait = _trait_for_category(question.get("category"))
        if trait is None:
            continue
        selected = _selected_index(question, lookup)
        if selected is None:
            continue
        collected[trait].append(_impact_for_selection(question, selected))

    for trait, values in collected.items():
        if values:
            scores[trait] = max(0, min(100, sum(values) // len(values)))
    return scores


def calculate_section_stats(questions: list[dict] | None, answers: list[dict] | None) -> dict[str, dict[str, int]]:
    """Per-section counters.

    A behavioral item counts as correct when the best-impact option was chosen;
    aptitude and domain items need a matching ``correctOptionIndex``.
    """
    stats = {
        name: {"total": 0, "attempted": 0, "notAttempted": 0, "correct": 0, "wrong": 0}
        for name in SECTION_NAMES.values()
    }
    lookup = _answer_lookup(answers)
    for question in questions or []:
        name = SECTION_NAMES.get(question.get("sectionNumber"))
        if name is None:
            continue
        bucket = stats[name]
        bucket["total"] += 1
        selected = _selected_index(question, lookup)
        if selected is None:
            continue
        bucket["attempted"] += 1
        correct_index = question.get("correctOptionIndex")
        if correct_index is not None and selected == correct_index:
            bucket["correct"] += 1

    for bucket in stats.values():
        bucket["notAttempted"] = bucket["total"] - bucket["attempted"]
        bucket["wrong"] = bucket["attempted"] - bucket["correct"]
    return stats


def calculate_section_scores(questions: list[dict] | None, answers: list[dict] | None) -> dict[str, float]:
    scores = {name: 0.0 for name in SECTION_NAMES.values()}
    if not questions:
        return scores

    stats = calculate_section_stats(questions, answers)
    for section_number in (SECTION_APTITUDE, SECTION_DOMAIN):
        bucket = stats[SECTION_NAMES[section_number]]
        if bucket["total"] > 0:
            scores[SECTION_NAMES[section_number]] = bucket["correct"] * 100.0 / bucket["total"]

    lookup = _answer_lookup(answers)
    impacts: list[int] = []
    for question in questions:
        if question.get("sectionNumber") != SECTION_BEHAVIORAL:
            continue
        selected = _selected_index(question, lookup)
        if selected is not None:
            impacts.append(_impact_for_selection(question, selected))
    if impacts:
        scores[SECTION_NAMES[SECTION_BEHAVIORAL]] = sum(impacts) / len(impacts)
    return scores


def calculate_aggregate(
    questions: list[dict] | None,
    answers: list[dict] | None,
    test_results: dict | None = None,
) -> dict:
    """Overall counters and score.

    A submission snapshot wins over recomputation. Without one, only the
    aptitude and domain sections count, since behavioral answers are not
    right or wrong.
    """
    if test_results:
        total = int(test_results.get("totalQuestions") or 0)
        attempted = int(test_results.get("attempted") or 0)
        correct = int(test_results.get("correct") or 0)
        wrong = int(test_results.get("wrong") or 0)
        not_attempted = int(test_results.get("notAttempted") or 0)
        source = RESULT_SOURCE_SNAPSHOT
    else:
        stats = calculate_section_stats(questions, answers)
        counted = [stats[SECTION_NAMES[SECTION_APTITUDE]], stats[SECTION_NAMES[SECTION_DOMAIN]]]
        total = sum(bucket["total"] for bucket in counted)
        attempted = sum(bucket["attempted"] for bucket in counted)
        correct = sum(bucket["correct"] for bucket in counted)
        wrong = attempted - correct
        not_attempted = total - attempted
        source = RESULT_SOURCE_RECOMPUTED

    overall = correct * 100.0 / total if total > 0 else 0.0
    return {
        "totalQuestions": total,
        "attempted": attempted,
        "notAttempted": not_attempted,
        "correct": correct,
        "wrong": wrong,
        "overallScore": overall,
        "resultSource": source,
    }


def determine_performance_bucket(overall_score: float) -> str:
    if overall_score >= 85:
        return "BEST"
    if overall_score >= 70:
        return "GOOD"
    if overall_score >= 50:
        return "AVERAGE"
    return "POOR"


def calculate_percentile(overall_score: float) -> float:
    # Static band mapping until historical score data exists.
    if overall_score >= 90:
        return 95.0
    if overall_score >= 80:
        return 85.0
    if overall_score >= 70:
        return 70.0
    if overall_score >= 60:
        return 55.0
    if overall_score >= 50:
        return 40.0
    return 25.0


def score_session(
    questions: list[dict] | None,
    answers: list[dict] | None,
    test_results: dict | None = None,
) -> dict:
    aggregate = calculate_aggregate(questions, answers, test_results)
    overall = aggregate["overallScore"]
    report = {
        "bigFive": calculate_trait_scores(questions, answers),
        "sectionScores": calculate_section_scores(questions, answers),
        "sectionStats": calculate_section_stats(questions, answers),
        **aggregate,
        "candidatePercentage": overall,
        "candidatePercentile": calculate_percentile(overall),
        "performanceBucket": determine_performance_bucket(overall),
    }
    LOGGER.info(
        "Scored %d questions: overall=%.2f bucket=%s source=%s",
        len(questions or []),
        overall,
        report["performanceBucket"],
        aggregate["resultSource"],
    )
    return report
