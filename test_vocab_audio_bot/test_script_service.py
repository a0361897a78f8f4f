import unittest
from unittest import mock

from vocab_audio_bot.services.script_service import ScriptGenerator, build_prompt, parse_pairs
from vocab_audio_bot.utils.exceptions import EmptyResultError, ExternalServiceError


class TestParsePairs(unittest.TestCase):
    def test_pairs_zip_in_order_and_are_trimmed(self):
        text = (
            "<SOURCE> casa </SOURCE>\n<TARGET>дом</TARGET>\n"
            "<SOURCE>perro</SOURCE>\n<TARGET> собака\n</TARGET>"
        )

        self.assertEqual(parse_pairs(text), [
            {"source": "casa", "target": "дом"},
            {"source": "perro", "target": "собака"},
        ])

    def test_unbalanced_tags_truncate_to_shorter_list(self):
        text = "<SOURCE>a</SOURCE><TARGET>1</TARGET><SOURCE>b</SOURCE><SOURCE>c</SOURCE>"

        self.assertEqual(parse_pairs(text), [{"source": "a", "target": "1"}])

    def test_unclosed_tag_is_ignored(self):
        text = "<SOURCE>a</SOURCE><TARGET>1</TARGET><SOURCE>b<TARGET>2</TARGET>"

        pairs = parse_pairs(text)

        self.assertEqual(pairs[0], {"source": "a", "target": "1"})
        self.assertEqual(len(pairs), 1)

    def test_empty_input(self):
        self.assertEqual(parse_pairs(""), [])
        self.assertEqual(parse_pairs(None), [])
        self.assertEqual(parse_pairs("no tags here"), [])


class TestBuildPrompt(unittest.TestCase):
    def test_avoid_list_included_only_when_present(self):
        with_avoid = build_prompt(20, "A2-B1", ["casa", "perro"], "Spanish (Spain)", "Russian")
        without_avoid = build_prompt(20, "A2-B1", [], "Spanish (Spain)", "Russian")

        self.assertIn("Generate 20 vocabulary words", with_avoid)
        self.assertIn("DO NOT repeat any Spanish (Spain) entries", with_avoid)
        self.assertIn("  - perro", with_avoid)
        self.assertNotIn("DO NOT repeat", without_avoid)
        self.assertIn("Level: A2-B1", without_avoid)


@mock.patch("vocab_audio_bot.services.script_service.genai")
class TestScriptGenerator(unittest.TestCase):
    def test_generate_returns_parsed_pairs(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.return_value = mock.MagicMock(text="<SOURCE>casa</SOURCE><TARGET>дом</TARGET>")
        generator = ScriptGenerator(api_key="key", model_name="gemini-test")

        pairs = generator.generate(5, "A1", ["perro"], "Spanish (Spain)", "Russian")

        self.assertEqual(pairs, [{"source": "casa", "target": "дом"}])
        mock_genai.configure.assert_called_once_with(api_key="key")
        model.generate_content.assert_called_once()
        self.assertIn("perro", model.generate_content.call_args[0][0])

    def test_generate_without_pairs_raises_empty_result(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.return_value = mock.MagicMock(text="Sorry, I cannot help.")
        generator = ScriptGenerator(api_key="key", model_name="gemini-test")

        with self.assertRaises(EmptyResultError):
            generator.generate(5, "A1", [], "Spanish (Spain)", "Russian")

    def test_api_failure_wrapped(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.side_effect = RuntimeError("quota")
        generator = ScriptGenerator(api_key="key", model_name="gemini-test")

        with self.assertRaises(ExternalServiceError) as ctx:
            generator.generate(5, "A1", [], "Spanish (Spain)", "Russian")
        self.assertIsInstance(ctx.exception.original_exception, RuntimeError)


if __name__ == "__main__":
    unittest.main()
