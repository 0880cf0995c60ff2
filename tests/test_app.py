import pathlib
import unittest
from unittest import mock

from streamlit.testing.v1 import AppTest

import cards
import session
from errors import ErrorKind, FlavorError


APP_PATH = str(pathlib.Path(__file__).resolve().parent.parent / "app.py")

REASONS = [
    "Dreamlike, layered heist structure",
    "Booming, time-bending score",
    "Puzzle-box plot that rewards rewatching",
    "Grief hidden inside a blockbuster",
]

RECOMMENDATIONS = [
    {"title": "Paprika", "year": 2006, "why": "Dream logic.", "poster_url": None},
    {"title": "Primer", "year": "2004", "why": "Pure puzzle.", "poster_url": None},
    {"title": "Coherence", "year": 2013, "why": "Many realities.", "poster_url": None},
]


def _button(at, label):
    return next(button for button in at.button if button.label == label)


def _subheaders(at):
    return [subheader.value for subheader in at.subheader]


class AppStepTests(unittest.TestCase):
    def setUp(self):
        self.at = AppTest.from_file(APP_PATH, default_timeout=10)
        self.at.secrets["GEMINI_API_KEY"] = "test-key"
        self.at.run()

    def _search(self, movie="Inception"):
        self.at.text_input(key="movie_text").input(movie)
        _button(self.at, "Find my flavor").click().run()

    def test_starts_on_input_step(self):
        self.assertFalse(self.at.exception)
        self.assertEqual(_subheaders(self.at), ["What's a movie you love?"])
        self.assertEqual(len(self.at.error), 0)

    @mock.patch("flavor_picker.fetch_reasons", return_value=list(REASONS))
    def test_submit_shows_reason_buttons(self, fetch):
        self._search()

        self.assertFalse(self.at.exception)
        fetch.assert_called_once_with("Inception", "test-key")
        labels = [button.label for button in self.at.button if button.key and button.key.startswith("reason-")]
        self.assertEqual(labels, [f"✨ {reason}" for reason in REASONS])
        self.assertEqual(self.at.session_state["step"], session.STEP_REASONS)

    @mock.patch(
        "flavor_picker.fetch_reasons",
        side_effect=FlavorError(ErrorKind.PARSE, "Expecting value"),
    )
    def test_failed_submit_shows_banner_and_stays_on_input(self, fetch):
        self._search()

        self.assertFalse(self.at.exception)
        self.assertEqual(self.at.error[0].value, session.REASONS_ERROR)
        self.assertEqual(_subheaders(self.at), ["What's a movie you love?"])

    @mock.patch("flavor_picker.generate_poster", return_value="data:image/png;base64,AAA")
    @mock.patch("flavor_picker.fetch_recommendations", return_value=[dict(rec) for rec in RECOMMENDATIONS])
    @mock.patch("flavor_picker.fetch_reasons", return_value=list(REASONS))
    def test_reason_to_recommendations_and_new_search(self, fetch_reasons, fetch_recs, poster):
        self._search()
        self.at.button(key="reason-2").click().run()

        self.assertFalse(self.at.exception)
        fetch_recs.assert_called_once_with("Inception", REASONS[2], "test-key")
        self.assertIn("Your Next Watch", _subheaders(self.at))
        markdown = [element.value for element in self.at.markdown]
        for rec in RECOMMENDATIONS:
            self.assertIn(cards.title_html(rec), markdown)

        self.at.button(key="new-search").click().run()

        self.assertFalse(self.at.exception)
        self.assertEqual(_subheaders(self.at), ["What's a movie you love?"])
        self.assertEqual(self.at.session_state["recommendations"], [])
        self.assertEqual(self.at.session_state["movie_input"], "")


class MissingKeyTests(unittest.TestCase):
    def test_missing_key_stops_with_error(self):
        at = AppTest.from_file(APP_PATH, default_timeout=10)
        at.run()

        self.assertFalse(at.exception)
        self.assertIn("GEMINI_API_KEY", at.error[0].value)
        self.assertEqual(len(at.subheader), 0)


if __name__ == "__main__":
    unittest.main()
