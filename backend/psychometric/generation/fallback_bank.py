"""Curated behavioral items used when generation under-produces.

Behavioral items need consistent impact scores and rationales, which a
generic placeholder cannot invent, so shortfalls in section 2 are covered
from this bank first.
"""

from uuid import uuid4

from psychometric.generation.categories import ITEM_TYPE_LIKERT, ITEM_TYPE_MCQ, SECTION_BEHAVIORAL

BANK_VERSION = "2024.1"

PLACEHOLDER_IMPACT_SCORES = [0, 25, 50, 75, 100]

LIKERT_OPTIONS = ["Strongly disagree", "Disagree", "Neutral", "Agree", "Strongly agree"]
DEFAULT_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]

BEHAVIORAL_TEMPLATES: list[dict] = [
    {
        "category": "conflict_resolution",
        "scenario": "Two team members strongly disagree on how to complete a task.",
        "prompt": "When two team members strongly disagree on how to complete a task, what do you usually do first?",
        "options": [
            "Allow them to resolve it on their own",
            "Take control and decide the solution yourself",
            "Listen to both sides and help reach a compromise",
            "Escalate the issue to a senior authority",
        ],
        "traitImpactScores": [50, 25, 100, 0],
        "rationales": [
            "Gives them space, but may allow the disagreement to intensify without guidance.",
            "Ends the conflict quickly, but can reduce ownership and miss important context.",
            "Balances viewpoints and de-escalates tension while keeping the team aligned.",
            "Escalating immediately can undermine trust and skips direct resolution.",
        ],
    },
    {
        "category": "attention_to_detail",
        "scenario": "You notice a small error in your work just before submission, but fixing it may delay the deadline.",
        "prompt": "What do you do?",
        "options": [
            "Submit the work as it is to meet the deadline",
            "Fix the error and inform the concerned person about the delay",
            "Ignore the error since it is minor",
            "Ask someone else to review and decide",
        ],
        "traitImpactScores": [25, 100, 0, 50],
        "rationales": [
            "Meets timing but risks quality and credibility due to a known error.",
            "Protects quality and communicates proactively about impact to timelines.",
            "Knowingly shipping an error shows low accountability for outcomes.",
            "Seeking help can reduce risk, but avoids taking ownership of the fix.",
        ],
    },
    {
        "category": "leadership",
        "scenario": "Your team is falling behind schedule and motivation is low.",
        "prompt": "What is your most likely action?",
        "options": [
            "Focus only on completing your own assigned tasks",
            "Inform the manager about the team's performance",
            "Motivate the team, redistribute tasks, and set short goals",
            "Wait for instructions from leadership",
        ],
        "traitImpactScores": [0, 50, 100, 25],
        "rationales": [
            "Helps your output, but does not address the team's shared risk or coordination needs.",
            "Escalation can help, but it does not directly restore momentum or clarity for the team.",
            "Creates structure, increases motivation, and improves execution through ownership and clarity.",
            "Waiting delays action and can worsen the schedule and morale.",
        ],
    },
    {
        "category": "adaptability",
        "scenario": "You are asked to work on a task that requires a tool or skill you are not familiar with.",
        "prompt": "How do you respond?",
        "options": [
            "Decline the task due to lack of experience",
            "Ask for the task to be reassigned",
            "Learn the basics quickly and attempt the task",
            "Delay the task until proper training is provided",
        ],
        "traitImpactScores": [0, 25, 100, 50],
        "rationales": [
            "Avoids short-term risk, but blocks growth and reduces contribution.",
            "May protect quality, but reduces flexibility and ownership.",
            "Shows learning agility and adapts while still delivering progress.",
            "Training can help, but delaying without action risks timeline and momentum.",
        ],
    },
    {
        # Emotional stability and conscientiousness; higher score means steadier behavior.
        "category": "big_five_conscientiousness",
        "scenario": "You receive critical feedback on your work.",
        "prompt": "What is your usual reaction?",
        "options": [
            "Feel discouraged and lose motivation",
            "Ignore the feedback",
            "Defend your work without considering the feedback",
            "Analyze the feedback and improve your performance",
        ],
        "traitImpactScores": [25, 0, 25, 100],
        "rationales": [
            "A setback is normal, but losing motivation reduces follow-through and growth.",
            "Ignoring feedback misses an opportunity to improve and align expectations.",
            "Defensiveness blocks learning and can damage collaboration.",
            "Processing feedback calmly and improving shows maturity and strong ownership.",
        ],
    },
]


def bank_size() -> int:
    return len(BEHAVIORAL_TEMPLATES)


def bank_categories() -> list[str]:
    return [template["category"] for template in BEHAVIORAL_TEMPLATES]


def default_options(item_type: str) -> list[str]:
    if item_type == ITEM_TYPE_LIKERT:
        return list(LIKERT_OPTIONS)
    return list(DEFAULT_OPTIONS)


def select_best_option(scores: list[int]) -> int | None:
    if not scores:
        return None
    best = 0
    for idx in range(1, len(scores)):
        if scores[idx] > scores[best]:
            best = idx
    return best


def _clone_template(template: dict, item_type: str) -> dict:
    return {
        "id": str(uuid4()),
        "sectionNumber": SECTION_BEHAVIORAL,
        "category": template["category"],
        "type": item_type,
        "prompt": template["prompt"],
        "options": list(template["options"]),
        "scenario": template["scenario"],
        "correctOptionIndex": select_best_option(template["traitImpactScores"]),
        "traitImpactScores": list(template["traitImpactScores"]),
        "rationales": list(template["rationales"]),
        "source": "fallback_bank",
    }


def draw(n: int, category: str | None = None, item_type: str = ITEM_TYPE_LIKERT) -> list[dict]:
    """Return up to ``n`` fresh copies of bank items, never more than the bank holds.

    Templates whose category equals ``category`` come first; the remainder
    follow in bank order. Each copy gets a new id.
    """
    if n <= 0:
        return []
    ordered = [template for template in BEHAVIORAL_TEMPLATES if template["category"] == category]
    ordered += [template for template in BEHAVIORAL_TEMPLATES if template["category"] != category]
    return [_clone_template(template, item_type) for template in ordered[:n]]


def draw_for_categories(categories: list[str], item_type: str = ITEM_TYPE_LIKERT) -> list[dict]:
    """Draw one item per requested category slot, each template used at most once.

    Category matches are served first in slot order; any leftover bank items
    fill the remaining slots. The result length is ``min(len(categories), bank_size())``.
    """
    limit = min(len(categories), bank_size())
    if limit <= 0:
        return []
    remaining = list(BEHAVIORAL_TEMPLATES)
    chosen: list[dict] = []
    for category in categories:
        if len(chosen) >= limit:
            break
        match = next((template for template in remaining if template["category"] == category), None)
        if match is not None:
            remaining.remove(match)
            chosen.append(match)
    for template in remaining:
        if len(chosen) >= limit:
            break
        chosen.append(template)
    return [_clone_template(template, item_type) for template in chosen]


def build_placeholder(section_number: int, category: str, item_type: str, index: int) -> dict:
    question = {
        "id": str(uuid4()),
        "sectionNumber": section_number,
        "category": category,
        "type": item_type,
        "prompt": (
            f"Placeholder prompt for {category} question {index} in section {section_number}. "
            "Replace with generated text."
        ),
        "options": default_options(item_type),
        "scenario": None,
        "correctOptionIndex": 0 if item_type == ITEM_TYPE_MCQ else None,
        "traitImpactScores": None,
        "rationales": None,
        "source": "placeholder",
    }
    if section_number == SECTION_BEHAVIORAL:
        question["traitImpactScores"] = list(PLACEHOLDER_IMPACT_SCORES)
        # LIKERT defaults carry five options, matching the five impact levels.
        question["options"] = default_options(ITEM_TYPE_LIKERT)
        question["correctOptionIndex"] = select_best_option(question["traitImpactScores"])
    return question
