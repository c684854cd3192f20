import json
import os
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

try:
    from psychometric.config import questions_per_batch
    from psychometric.generation.categories import (
        ITEM_TYPE_LIKERT,
        ITEM_TYPE_MCQ,
        ITEM_TYPE_SCENARIO,
        SECTION_APTITUDE,
        SECTION_BEHAVIORAL,
        SECTION_DOMAIN,
    )
    from psychometric.generation.parsing import ProviderResponseError, extract_json_array, parse_provider_items
    from psychometric.generation.prompts import build_batch_prompt
    from psychometric.generation.provider import MAX_BATCH_CATEGORIES, ContentProvider
    from psychometric.models.session import UserProfile

    DEPENDENCIES_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - environment dependent
    DEPENDENCIES_AVAILABLE = False


def _completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@unittest.skipUnless(DEPENDENCIES_AVAILABLE, "generation dependencies are not installed")
class ProviderParsingTests(unittest.TestCase):
    def test_code_fences_are_stripped(self) -> None:
        content = '```json\n[{"prompt": "2 + 2?", "options": ["3", "4"], "correctOptionIndex": 1}]\n```'
        self.assertTrue(extract_json_array(content).startswith("["))
        items = parse_provider_items(content, SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ)
        self.assertEqual(items[0]["correctOptionIndex"], 1)
        self.assertEqual(items[0]["category"], "numerical")

    def test_categories_assigned_by_position(self) -> None:
        payload = json.dumps([{"prompt": f"Q{index}", "options": ["a", "b"]} for index in range(3)])
        items = parse_provider_items(payload, SECTION_APTITUDE, ["verbal", "logical"], ITEM_TYPE_MCQ)
        self.assertEqual([item["category"] for item in items], ["verbal", "logical", "verbal"])

    def test_invalid_mcq_index_defaults_to_zero(self) -> None:
        payload = json.dumps(
            [
                {"prompt": "Q1", "options": ["a", "b", "c"], "correctOptionIndex": 7},
                {"prompt": "Q2", "options": ["a", "b", "c"], "correctOptionIndex": "two"},
                {"prompt": "Q3", "options": ["a", "b", "c"]},
            ]
        )
        items = parse_provider_items(payload, SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ)
        self.assertEqual([item["correctOptionIndex"] for item in items], [0, 0, 0])

    def test_invalid_index_is_dropped_for_scenario_items(self) -> None:
        payload = json.dumps([{"prompt": "Q1", "options": ["a", "b"], "correctOptionIndex": -1}])
        items = parse_provider_items(payload, SECTION_DOMAIN, ["data_analysis"], ITEM_TYPE_SCENARIO)
        self.assertIsNone(items[0]["correctOptionIndex"])

    def test_missing_options_fall_back_to_defaults(self) -> None:
        payload = json.dumps([{"prompt": "Rate yourself"}])
        items = parse_provider_items(payload, SECTION_DOMAIN, ["career_alignment"], ITEM_TYPE_LIKERT)
        self.assertEqual(len(items[0]["options"]), 5)

    def test_behavioral_index_is_argmax_with_first_tie(self) -> None:
        payload = json.dumps(
            [
                {
                    "scenario": "A teammate misses a deadline.",
                    "prompt": "What do you do?",
                    "options": [
                        {"text": "Ignore it", "traitImpactScore": 25},
                        {"text": "Talk privately", "traitImpactScore": 100, "rationale": "Direct and kind."},
                        {"text": "Escalate", "traitImpactScore": 100},
                        {"text": "Complain", "traitImpactScore": 0},
                    ],
                }
            ]
        )
        items = parse_provider_items(payload, SECTION_BEHAVIORAL, ["leadership"], ITEM_TYPE_LIKERT)
        item = items[0]
        self.assertEqual(item["correctOptionIndex"], 1)
        self.assertEqual(item["traitImpactScores"], [25, 100, 100, 0])
        self.assertEqual(item["prompt"], "A teammate misses a deadline. What do you do?")
        self.assertEqual(item["rationales"][1], "Direct and kind.")

    def test_behavioral_missing_impact_defaults_and_clamps(self) -> None:
        payload = json.dumps(
            [
                {
                    "prompt": "Choose an action.",
                    "options": [
                        {"text": "One"},
                        {"text": "Two", "traitImpactScore": 250},
                        {"text": "Three", "traitImpactScore": "high"},
                        "Four",
                    ],
                }
            ]
        )
        item = parse_provider_items(payload, SECTION_BEHAVIORAL, ["adaptability"], ITEM_TYPE_LIKERT)[0]
        self.assertEqual(item["traitImpactScores"], [50, 100, 50, 50])
        self.assertEqual(item["correctOptionIndex"], 1)

    def test_non_finite_numbers_fall_back_without_dropping_siblings(self) -> None:
        behavioral = """[
            {"prompt": "Choose an action.", "options": [
                {"text": "One", "traitImpactScore": NaN},
                {"text": "Two", "traitImpactScore": 80}
            ]},
            {"prompt": "Choose again.", "options": [
                {"text": "One", "traitImpactScore": Infinity},
                {"text": "Two", "traitImpactScore": -Infinity}
            ]}
        ]"""
        items = parse_provider_items(behavioral, SECTION_BEHAVIORAL, ["adaptability"], ITEM_TYPE_LIKERT)
        self.assertEqual(len(items), 2)
        self.assertEqual(items[0]["traitImpactScores"], [50, 80])
        self.assertEqual(items[0]["correctOptionIndex"], 1)
        self.assertEqual(items[1]["traitImpactScores"], [50, 50])

        choice = """[
            {"prompt": "Q1", "options": ["a", "b", "c"], "correctOptionIndex": Infinity},
            {"prompt": "Q2", "options": ["a", "b", "c"], "correctOptionIndex": NaN},
            {"prompt": "Q3", "options": ["a", "b", "c"], "correctOptionIndex": 2}
        ]"""
        items = parse_provider_items(choice, SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ)
        self.assertEqual([item["correctOptionIndex"] for item in items], [0, 0, 2])

    def test_malformed_payloads_raise(self) -> None:
        with self.assertRaises(ProviderResponseError):
            parse_provider_items("not json at all", SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ)
        with self.assertRaises(ProviderResponseError):
            parse_provider_items('{"prompt": "x"}', SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ)
        with self.assertRaises(ProviderResponseError):
            parse_provider_items("[]", SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ)


@unittest.skipUnless(DEPENDENCIES_AVAILABLE, "generation dependencies are not installed")
class ContentProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.profile = UserProfile(
            name="Asha Rao",
            degree="B.Tech",
            specialization="Computer Science",
            careerInterest="Data Engineer",
            technicalSkills=["data"],
            softSkills=["communication"],
            hobbies=["reading"],
        )

    def test_successful_batch(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _completion(
            json.dumps([{"prompt": "Q", "options": ["a", "b", "c", "d"], "correctOptionIndex": 3}])
        )
        provider = ContentProvider(api_key="test-key", client=client)

        items, error = provider.generate_batch(SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ, self.profile)

        self.assertIsNone(error)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["correctOptionIndex"], 3)
        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["messages"][0]["role"], "system")
        self.assertIn("numerical", kwargs["messages"][1]["content"])

    def test_transport_failure_is_returned_not_raised(self) -> None:
        client = MagicMock()
        client.chat.completions.create.side_effect = TimeoutError("read timed out")
        provider = ContentProvider(api_key="test-key", client=client)

        items, error = provider.generate_batch(SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ, self.profile)

        self.assertEqual(items, [])
        self.assertIn("timed out", error)
        self.assertEqual(client.chat.completions.create.call_count, 1)

    def test_malformed_completion_is_an_error(self) -> None:
        client = MagicMock()
        client.chat.completions.create.return_value = _completion("Sorry, I cannot help with that.")
        provider = ContentProvider(api_key="test-key", client=client)

        items, error = provider.generate_batch(SECTION_DOMAIN, ["data_analysis"], ITEM_TYPE_SCENARIO, self.profile)

        self.assertEqual(items, [])
        self.assertIsNotNone(error)

    def test_unconfigured_provider_skips_network(self) -> None:
        provider = ContentProvider(api_key="")
        items, error = provider.generate_batch(SECTION_APTITUDE, ["numerical"], ITEM_TYPE_MCQ, self.profile)
        self.assertEqual(items, [])
        self.assertEqual(error, "provider not configured")

    def test_batch_size_limits(self) -> None:
        provider = ContentProvider(api_key="test-key", client=MagicMock())
        self.assertIsNotNone(provider.generate_batch(SECTION_APTITUDE, [], ITEM_TYPE_MCQ, self.profile)[1])
        too_many = [f"c{index}" for index in range(11)]
        self.assertIsNotNone(provider.generate_batch(SECTION_APTITUDE, too_many, ITEM_TYPE_MCQ, self.profile)[1])

    def test_configured_batch_size_is_capped_at_provider_limit(self) -> None:
        with patch.dict(os.environ, {"QUESTIONS_PER_BATCH": "25"}):
            self.assertEqual(questions_per_batch(), MAX_BATCH_CATEGORIES)
        with patch.dict(os.environ, {"QUESTIONS_PER_BATCH": "0"}):
            self.assertEqual(questions_per_batch(), 1)
        with patch.dict(os.environ, {"QUESTIONS_PER_BATCH": "4"}):
            self.assertEqual(questions_per_batch(), 4)

    def test_prompt_mentions_profile_tags(self) -> None:
        prompt = build_batch_prompt(SECTION_DOMAIN, ["data_analysis", "career_alignment"], ITEM_TYPE_SCENARIO, self.profile)
        self.assertIn("Generate exactly 2 questions", prompt)
        self.assertIn("Technical Skills: data", prompt)
        self.assertIn("Career Interest: Data Engineer", prompt)


if __name__ == "__main__":
    unittest.main()
