"""Declared profile tags and the assessment categories they unlock.

Profiles carry tags from a fixed vocabulary; each tag maps to one or more
question categories by plain lookup. Anything outside the vocabulary is
rejected before a session is created.
"""

from dataclasses import dataclass

SECTION_APTITUDE = 1
SECTION_BEHAVIORAL = 2
SECTION_DOMAIN = 3

SECTION_NAMES = {
    SECTION_APTITUDE: "aptitude",
    SECTION_BEHAVIORAL: "behavioral",
    SECTION_DOMAIN: "domain",
}

ITEM_TYPE_MCQ = "MCQ"
ITEM_TYPE_LIKERT = "LIKERT"
ITEM_TYPE_SCENARIO = "SCENARIO"

APTITUDE_CATEGORIES = ["numerical", "verbal", "situational", "abstract", "logical"]

BIG_FIVE_TRAITS = ["openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism"]

BEHAVIORAL_CORE_CATEGORIES = [
    "conflict_resolution",
    "attention_to_detail",
    "leadership",
    "adaptability",
    *[f"big_five_{trait}" for trait in BIG_FIVE_TRAITS],
]

SOFT_SKILL_BEHAVIORAL = {
    "communication": ["communication_effectiveness"],
    "teamwork": ["teamwork_and_collaboration"],
    "problem_solving": ["problem_solving_approach"],
    "creativity": ["creativity_and_innovation"],
    "time_management": ["time_management"],
    "empathy": ["emotional_intelligence"],
    "resilience": ["resilience_and_perseverance"],
    "leadership": [],
}

HOBBY_BEHAVIORAL = {
    "reading": ["intellectual_curiosity"],
    "music": ["artistic_expression"],
    "sports": ["discipline_and_commitment"],
    "art": ["aesthetic_sensitivity"],
    "travel": ["openness_to_experience"],
    "writing": ["self_expression"],
    "volunteering": ["social_responsibility"],
    "cooking": ["patience_and_precision"],
    "gaming": ["strategic_thinking"],
    "dance": ["coordination_and_expression"],
}

TECHNICAL_SKILL_DOMAIN = {
    "frontend": ["frontend_development"],
    "backend": ["backend_development"],
    "data": ["data_analysis"],
    "databases": ["database_management"],
    "enterprise_java": ["enterprise_development"],
}

SOFT_SKILL_DOMAIN = {
    "leadership": ["leadership_application"],
    "communication": ["communication_skills"],
}

STUDY_AREA_DOMAIN = {
    "computer_science": ["software_engineering", "system_design"],
    "finance": ["financial_analysis", "financial_planning"],
    "marketing": ["marketing_strategy", "business_development"],
    "engineering": ["technical_problem_solving", "engineering_principles"],
    "business_administration": ["business_analysis", "operational_excellence"],
    "commerce": ["commercial_awareness", "financial_literacy"],
    "management": ["strategic_thinking", "organizational_management"],
}

INTEREST_DOMAIN = {
    "design": ["design_thinking"],
    "data_analytics": ["data_driven_decision_making"],
    "entrepreneurship": ["entrepreneurial_mindset"],
}

DOMAIN_FILLER_CATEGORIES = ["career_alignment", "domain_expertise", "professional_application"]
DOMAIN_MIN_CATEGORIES = 5
DOMAIN_FILLER_THRESHOLD = 10

TAG_VOCABULARY = {
    "technicalSkills": set(TECHNICAL_SKILL_DOMAIN),
    "softSkills": set(SOFT_SKILL_BEHAVIORAL) | set(SOFT_SKILL_DOMAIN),
    "hobbies": set(HOBBY_BEHAVIORAL),
    "interests": set(INTEREST_DOMAIN),
    "studyAreas": set(STUDY_AREA_DOMAIN),
}


@dataclass(frozen=True)
class SectionGenerationSpec:
    section_number: int
    item_type: str
    categories: tuple[str, ...]

    @property
    def name(self) -> str:
        return SECTION_NAMES[self.section_number]


def unknown_tags(field_name: str, tags: list[str]) -> list[str]:
    allowed = TAG_VOCABULARY.get(field_name, set())
    return [tag for tag in tags if tag not in allowed]


def _extend_unique(target: list[str], additions: list[str]) -> None:
    for category in additions:
        if category not in target:
            target.append(category)


def aptitude_categories() -> list[str]:
    return list(APTITUDE_CATEGORIES)


def behavioral_categories(soft_skills: list[str], hobbies: list[str]) -> list[str]:
    categories = list(BEHAVIORAL_CORE_CATEGORIES)
    for tag in soft_skills:
        _extend_unique(categories, SOFT_SKILL_BEHAVIORAL.get(tag, []))
    for tag in hobbies:
        _extend_unique(categories, HOBBY_BEHAVIORAL.get(tag, []))
    return categories


def domain_categories(
    technical_skills: list[str],
    soft_skills: list[str],
    study_areas: list[str],
    interests: list[str],
) -> list[str]:
    categories: list[str] = []
    for tag in technical_skills:
        _extend_unique(categories, TECHNICAL_SKILL_DOMAIN.get(tag, []))
    for tag in soft_skills:
        _extend_unique(categories, SOFT_SKILL_DOMAIN.get(tag, []))
    for tag in study_areas:
        _extend_unique(categories, STUDY_AREA_DOMAIN.get(tag, []))
    for tag in interests:
        _extend_unique(categories, INTEREST_DOMAIN.get(tag, []))

    if len(categories) < DOMAIN_FILLER_THRESHOLD:
        _extend_unique(categories, DOMAIN_FILLER_CATEGORIES)
    while len(categories) < DOMAIN_MIN_CATEGORIES:
        categories.append("general_career_alignment")
    return categories


def build_section_plan(profile) -> list[SectionGenerationSpec]:
    return [
        SectionGenerationSpec(
            section_number=SECTION_APTITUDE,
            item_type=ITEM_TYPE_MCQ,
            categories=tuple(aptitude_categories()),
        ),
        SectionGenerationSpec(
            section_number=SECTION_BEHAVIORAL,
            item_type=ITEM_TYPE_LIKERT,
            categories=tuple(behavioral_categories(profile.softSkills, profile.hobbies)),
        ),
        SectionGenerationSpec(
            section_number=SECTION_DOMAIN,
            item_type=ITEM_TYPE_SCENARIO,
            categories=tuple(
                domain_categories(
                    profile.technicalSkills,
                    profile.softSkills,
                    profile.studyAreas,
                    profile.interests,
                )
            ),
        ),
    ]
