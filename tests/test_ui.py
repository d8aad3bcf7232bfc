import os

from hifzquiz.models import AudioSegment, QuestionMetadata, QuizMode, QuizQuestion
from hifzquiz.quiz_session import SessionScore
from hifzquiz.ui import UI


def make_ui():
    return UI(term_size=os.terminal_size((80, 24)))


class TestTextHelpers:

    def test_wrap_text(self):
        ui = make_ui()
        assert ui.wrap_text("aa bb cc dd", 5) == "aa bb\ncc dd"

    def test_long_word_gets_own_line(self):
        assert make_ui().wrap_text("a verylongword b", 4) == "a\nverylongword\nb"

    def test_empty_arabic(self):
        assert make_ui().fix_arabic_text("") == ""

    def test_latin_text_unchanged(self):
        assert make_ui().fix_arabic_text("abc def") == "abc def"

    def test_reversed_display(self):
        ui = UI(term_size=os.terminal_size((80, 24)), arabic_reversed=True)
        assert ui.fix_arabic_text("abc def") == "fed cba"


class TestScreens:

    def test_help_imam_lists_segments(self, capsys):
        question = QuizQuestion(
            mode=QuizMode.HELP_IMAM,
            verse_key="3:200",
            display_text="Listen to the ayat. What 2 ayat come next?",
            answer="x",
            audio=[AudioSegment(start=1000, end=1900, audio_url="https://audio.test/003.mp3")],
            metadata=QuestionMetadata(audio_range="3:200"),
        )
        make_ui().display_question(question, 1)
        out = capsys.readouterr().out
        assert "1000–1900 ms" in out
        assert "https://audio.test/003.mp3" in out

    def test_score_line(self, capsys):
        score = SessionScore()
        score.mark_correct()
        make_ui().display_score(score)
        assert "Accuracy: 100%" in capsys.readouterr().out
