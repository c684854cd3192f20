import unittest

try:
    from pydantic import ValidationError

    from psychometric.generation import fallback_bank
    from psychometric.generation.categories import (
        APTITUDE_CATEGORIES,
        BEHAVIORAL_CORE_CATEGORIES,
        ITEM_TYPE_LIKERT,
        ITEM_TYPE_MCQ,
        ITEM_TYPE_SCENARIO,
        SECTION_APTITUDE,
        SECTION_BEHAVIORAL,
        SECTION_DOMAIN,
        build_section_plan,
        domain_categories,
    )
    from psychometric.models.session import UserProfile

    DEPENDENCIES_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - environment dependent
    DEPENDENCIES_AVAILABLE = False


@unittest.skipUnless(DEPENDENCIES_AVAILABLE, "generation dependencies are not installed")
class FallbackBankTests(unittest.TestCase):
    def test_draw_never_exceeds_bank(self) -> None:
        items = fallback_bank.draw(50)
        self.assertEqual(len(items), fallback_bank.bank_size())
        self.assertEqual(fallback_bank.draw(0), [])

    def test_draw_prefers_matching_category(self) -> None:
        items = fallback_bank.draw(2, category="adaptability")
        self.assertEqual(items[0]["category"], "adaptability")
        self.assertEqual(items[1]["category"], fallback_bank.bank_categories()[0])

    def test_drawn_items_are_fresh_copies(self) -> None:
        first = fallback_bank.draw(1, category="leadership")[0]
        second = fallback_bank.draw(1, category="leadership")[0]
        self.assertNotEqual(first["id"], second["id"])
        self.assertEqual(first["prompt"], second["prompt"])
        first["options"].append("mutated")
        self.assertNotIn("mutated", fallback_bank.draw(1, category="leadership")[0]["options"])

    def test_bank_items_carry_argmax_index(self) -> None:
        for item in fallback_bank.draw(fallback_bank.bank_size()):
            scores = item["traitImpactScores"]
            self.assertEqual(item["correctOptionIndex"], scores.index(max(scores)))
            self.assertEqual(len(item["rationales"]), len(item["options"]))
            self.assertEqual(item["source"], "fallback_bank")

    def test_draw_for_categories_uses_each_template_once(self) -> None:
        items = fallback_bank.draw_for_categories(["leadership", "leadership", "unknown"])
        self.assertEqual(len(items), 3)
        self.assertEqual(items[0]["category"], "leadership")
        self.assertEqual(len({item["category"] for item in items}), 3)

    def test_select_best_option_ties_take_first(self) -> None:
        self.assertEqual(fallback_bank.select_best_option([50, 75, 75, 10]), 1)
        self.assertIsNone(fallback_bank.select_best_option([]))

    def test_placeholders(self) -> None:
        mcq = fallback_bank.build_placeholder(SECTION_APTITUDE, "numerical", ITEM_TYPE_MCQ, 3)
        self.assertEqual(mcq["correctOptionIndex"], 0)
        self.assertIn("numerical question 3 in section 1", mcq["prompt"])

        scenario = fallback_bank.build_placeholder(SECTION_DOMAIN, "career_alignment", ITEM_TYPE_SCENARIO, 1)
        self.assertIsNone(scenario["correctOptionIndex"])

        behavioral = fallback_bank.build_placeholder(SECTION_BEHAVIORAL, "leadership", ITEM_TYPE_LIKERT, 1)
        self.assertEqual(behavioral["traitImpactScores"], [0, 25, 50, 75, 100])
        self.assertEqual(behavioral["correctOptionIndex"], 4)
        self.assertEqual(len(behavioral["options"]), 5)


@unittest.skipUnless(DEPENDENCIES_AVAILABLE, "generation dependencies are not installed")
class SectionPlanTests(unittest.TestCase):
    def test_plan_covers_three_sections(self) -> None:
        profile = UserProfile(
            name="Ravi",
            degree="MBA",
            specialization="Finance",
            careerInterest="Analyst",
            softSkills=["teamwork"],
            hobbies=["travel"],
            studyAreas=["finance"],
        )
        plan = build_section_plan(profile)

        self.assertEqual([spec.section_number for spec in plan], [1, 2, 3])
        self.assertEqual(list(plan[0].categories), APTITUDE_CATEGORIES)
        self.assertEqual(plan[1].categories[: len(BEHAVIORAL_CORE_CATEGORIES)], tuple(BEHAVIORAL_CORE_CATEGORIES))
        self.assertIn("teamwork_and_collaboration", plan[1].categories)
        self.assertIn("openness_to_experience", plan[1].categories)
        self.assertIn("financial_analysis", plan[2].categories)
        self.assertEqual(plan[2].name, "domain")

    def test_domain_categories_have_a_minimum(self) -> None:
        categories = domain_categories([], [], [], [])
        self.assertGreaterEqual(len(categories), 5)
        self.assertIn("career_alignment", categories)

    def test_unknown_tags_are_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            UserProfile(
                name="Ravi",
                degree="MBA",
                specialization="Finance",
                careerInterest="Analyst",
                technicalSkills=["knows a bit of python"],
            )

    def test_tags_are_normalized(self) -> None:
        profile = UserProfile(
            name="Ravi",
            degree="MBA",
            specialization="Finance",
            careerInterest="Analyst",
            softSkills=[" Leadership "],
        )
        self.assertEqual(profile.softSkills, ["leadership"])


if __name__ == "__main__":
    unittest.main()
