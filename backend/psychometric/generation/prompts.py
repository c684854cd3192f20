from psychometric.generation.categories import ITEM_TYPE_LIKERT, SECTION_APTITUDE, SECTION_BEHAVIORAL

SYSTEM_PROMPT = (
    "You are a psychometric assessment question generator."
    " Return only a valid JSON array, no markdown and no commentary."
)

APTITUDE_GUIDANCE = """
Section: Aptitude & Cognitive Assessment
Question Type: Multiple Choice (MCQ)
Difficulty Level: HARD (multi-step reasoning)

Design requirements per category:
- numerical: multi-step percentage, ratio and time-speed-distance problems with numbers that do not simplify easily.
- verbal: graduate-level analogies, inference-based comprehension and sentence completion.
- abstract: pattern sequences with two or three simultaneous transformation rules.
- logical: syllogisms with 3+ premises, conditional logic, necessary vs sufficient conditions.
- situational: workplace problems with multiple constraints and trade-offs.
Distractors must be plausible. Ensure mathematical precision and logical correctness.
""".strip()

BEHAVIORAL_GUIDANCE = """
Section: Behavioral & Personality Assessment
Question Format: Situational Judgment Test (SJT), scenario-based and objectively scorable.
{profile_lines}
Design requirements:
1. Each stem describes a concrete situation and ends with an explicit question.
2. Options describe observable actions only; no Agree/Disagree scales, no "I feel", "I am" statements.
3. Exactly 4 action options with one clearly best option.
4. Each option carries "traitImpactScore" (0, 25, 50, 75 or 100; higher is more effective for the category's target trait),
   "effectivenessLevel" (LOW, MEDIUM, HIGH) and a one-sentence "rationale".
5. For big_five_* categories the category names the target trait.
6. Vary the position of the best option across questions; no position should hold more than 30% of best answers.
""".strip()

DOMAIN_GUIDANCE = """
Section: Domain and Career Alignment Assessment
Question Type: Scenario-based
Difficulty Level: MEDIUM

User Background:
- Education/Degree: {degree}
- Specialization: {specialization}
- Career Interest: {career_interest}
{profile_lines}
Guidelines:
1. Most questions test practical application of the technical skills and specialization.
2. Some questions draw on education and interests.
3. Scenarios relate to real-world use of the candidate's skills.
""".strip()

BEHAVIORAL_SHAPE = """
Each element must follow this JSON shape:
[
  {
    "scenario": "2-3 line real-world situation",
    "prompt": "What should the person do next?",
    "options": [
      {"text": "action 1", "traitImpactScore": 25, "effectivenessLevel": "LOW", "rationale": "..."},
      {"text": "action 2", "traitImpactScore": 100, "effectivenessLevel": "HIGH", "rationale": "..."},
      {"text": "action 3", "traitImpactScore": 50, "effectivenessLevel": "MEDIUM", "rationale": "..."},
      {"text": "action 4", "traitImpactScore": 0, "effectivenessLevel": "LOW", "rationale": "..."}
    ]
  }
]
""".strip()

CHOICE_SHAPE = """
Each element must follow this JSON shape:
[
  {{
    "prompt": "The question text",
    "options": {options_example},
    "correctOptionIndex": 0
  }}
]
Every element MUST include "correctOptionIndex" (0-based index of the correct option).
""".strip()


def _tag_lines(profile, fields: list[tuple[str, str]]) -> str:
    lines = []
    for label, attribute in fields:
        tags = list(getattr(profile, attribute, None) or [])
        if tags:
            lines.append(f"- {label}: {', '.join(tags)}")
    return "\n".join(lines)


def _section_guidance(section_number: int, profile) -> str:
    if section_number == SECTION_APTITUDE:
        return APTITUDE_GUIDANCE
    if section_number == SECTION_BEHAVIORAL:
        return BEHAVIORAL_GUIDANCE.format(
            profile_lines=_tag_lines(profile, [("Soft Skills", "softSkills"), ("Hobbies", "hobbies")]),
        )
    return DOMAIN_GUIDANCE.format(
        degree=getattr(profile, "degree", None) or "Not specified",
        specialization=getattr(profile, "specialization", None) or "Not specified",
        career_interest=getattr(profile, "careerInterest", None) or "Not specified",
        profile_lines=_tag_lines(
            profile,
            [
                ("Technical Skills", "technicalSkills"),
                ("Soft Skills", "softSkills"),
                ("Study Areas", "studyAreas"),
                ("Interests", "interests"),
            ],
        ),
    )


def build_batch_prompt(section_number: int, categories: list[str], item_type: str, profile) -> str:
    count = len(categories)
    category_lines = "\n".join(f"{idx + 1}. {category}" for idx, category in enumerate(categories))
    if section_number == SECTION_BEHAVIORAL:
        shape = BEHAVIORAL_SHAPE
    else:
        options_example = (
            '["Strongly disagree", "Disagree", "Neutral", "Agree", "Strongly agree"]'
            if item_type == ITEM_TYPE_LIKERT
            else '["First option", "Second option", "Third option", "Fourth option"]'
        )
        shape = CHOICE_SHAPE.format(options_example=options_example)

    return "\n\n".join(
        [
            f"Generate {count} high-quality questions for a psychometric test.",
            _section_guidance(section_number, profile),
            f"Categories for this batch:\n{category_lines}",
            f"Generate exactly {count} questions, one for each category, in the order listed.",
            shape,
            "Return ONLY the JSON array.",
        ]
    )
