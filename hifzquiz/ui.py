# hifzquiz/ui.py
import shutil
import sys
from typing import List, Optional

import arabic_reshaper
from bidi.algorithm import get_display
from colorama import Fore, Style

from .models import AudioSegment, QuizMode, QuizQuestion
from .quiz_session import SessionScore
from .utils import strip_ansi

THEME_COLORS = {
    'red': Fore.RED,
    'white': Fore.WHITE,
    'green': Fore.GREEN,
    'blue': Fore.BLUE,
    'yellow': Fore.YELLOW,
    'magenta': Fore.MAGENTA,
    'cyan': Fore.CYAN,
}

BOX_WIDTH = 52


class UI:
    """Renders quiz questions, answers and the score in the terminal."""

    def __init__(self, term_size=None, theme_color: str = 'red', arabic_reversed: bool = False):
        self.term_size = term_size or shutil.get_terminal_size()
        self.theme = THEME_COLORS.get(theme_color, Fore.RED)
        self.arabic_reversed = arabic_reversed

    def clear_terminal(self):
        """Clear terminal with fallback and scroll reset"""
        print("\033[2J", end="")
        print("\033[H", end="")
        sys.stdout.write("\033[3J")
        sys.stdout.flush()

    def display_header(self, ascii_art: str):
        print(self.theme + ascii_art + Style.RESET_ALL)
        print(self.theme + "╭──" + Style.BRIGHT + Fore.GREEN + "✨ As-salamu alaykum! " + self.theme + Style.NORMAL + "─" * 28 + "╮")
        print(self.theme + "│ " + Fore.LIGHTMAGENTA_EX + "HifzQuiz – Test your Quran memorization".ljust(BOX_WIDTH - 3) + self.theme + "│")
        print(self.theme + "├" + "─" * (BOX_WIDTH - 2) + "┤")
        print(self.theme + "│ " + Style.BRIGHT + "Instructions:".ljust(BOX_WIDTH - 3) + Style.NORMAL + "│")
        print(self.theme + "│ • " + Fore.WHITE + "Type " + self.theme + "'quit'" + Fore.WHITE + " or " + self.theme + "'exit'" + Fore.WHITE + " to close the program".ljust(BOX_WIDTH - 26) + self.theme + "│")
        print(self.theme + "│ • " + Fore.WHITE + "Type " + self.theme + "'download'" + Fore.WHITE + " to fetch the datasets".ljust(BOX_WIDTH - 21) + self.theme + "│")
        print(self.theme + "╰" + "─" * (BOX_WIDTH - 2) + "╯\n")

    # --- Text helpers ---

    def fix_arabic_text(self, text: str) -> str:
        """Reshapes and applies BiDi algorithm, optionally reversing for display."""
        if not text:
            return ""
        bidi_text = str(get_display(arabic_reshaper.reshape(text)))
        if self.arabic_reversed:
            return bidi_text[::-1]
        return bidi_text

    def wrap_text(self, text: str, width: int) -> str:
        """Greedy word wrap; words longer than `width` get a line of their own."""
        lines = []
        current_line: List[str] = []
        current_length = 0

        for word in text.split():
            needed = len(word) if not current_line else current_length + 1 + len(word)
            if needed <= width:
                current_line.append(word)
                current_length = needed
            else:
                if current_line:
                    lines.append(' '.join(current_line))
                current_line = [word]
                current_length = len(word)

        if current_line:
            lines.append(' '.join(current_line))
        return '\n'.join(lines)

    def _print_block(self, text: str, arabic: bool = True):
        width = max(20, self.term_size.columns - 4)
        for paragraph in text.split("\n\n"):
            shown = self.fix_arabic_text(paragraph) if arabic else paragraph
            for line in self.wrap_text(shown, width).split('\n'):
                print("    " + Fore.WHITE + line)
            print()

    # --- Quiz screens ---

    def display_question(self, question: QuizQuestion, question_number: Optional[int] = None):
        title = f"Question {question_number}" if question_number else "Question"
        print(self.theme + "╭─ " + Style.BRIGHT + Fore.GREEN + f"📖 {title}" + Style.NORMAL + Fore.WHITE + f" ({question.mode.label})")
        print(self.theme + "│ " + Style.DIM + Fore.WHITE + question.mode.instruction)
        print(self.theme + "╰" + "─" * BOX_WIDTH)

        if question.mode is QuizMode.HELP_IMAM:
            print(Fore.CYAN + "    " + question.display_text + "\n")
            self.display_audio_segments(question.audio or [])
        elif question.mode is QuizMode.WHAT_IS_X:
            print(Fore.CYAN + "    " + question.display_text + "\n")
        elif question.mode is QuizMode.REORDER:
            for i, text in enumerate(question.display_items, start=1):
                print(Style.BRIGHT + Fore.GREEN + f"[{i}]")
                self._print_block(text)
        else:
            self._print_block(question.display_text)

    def display_answer(self, question: QuizQuestion):
        print(self.theme + "╭─ " + Style.BRIGHT + Fore.GREEN + "✅ Answer")
        print(self.theme + "╰" + "─" * BOX_WIDTH)
        # Latin answers are printed as they are
        arabic = question.mode not in (QuizMode.TRANSLATION, QuizMode.GUESS_SURAH, QuizMode.AYAH_NUMBER)
        if question.mode is QuizMode.WHAT_DOESNT_BELONG:
            heading, _, text = question.answer.partition("\n\n")
            print(Style.BRIGHT + Fore.YELLOW + "    " + heading + "\n")
            self._print_block(text)
        else:
            self._print_block(question.answer, arabic=arabic)
        self.display_metadata(question)

    def display_metadata(self, question: QuizQuestion):
        meta = question.metadata
        rows = [
            ("Surah", meta.surah_name),
            ("Ayat", meta.verse_range),
            ("Recited", meta.audio_range),
            ("Correct", meta.correct_ayahs_info),
        ]
        rows = [(label, value) for label, value in rows if value]
        if rows:
            print(self.theme + "╭─ " + Style.BRIGHT + Fore.GREEN + "📜 Details")
            for label, value in rows:
                print(self.theme + f"│ • {Fore.CYAN}{label + ':':<9}{Fore.WHITE}{value}")
            print(self.theme + "╰" + "─" * BOX_WIDTH)
        if meta.translation:
            print(Style.BRIGHT + Fore.MAGENTA + "\nEnglish Translation:" + Style.NORMAL + Fore.WHITE)
            self._print_block(meta.translation, arabic=False)

    def display_audio_segments(self, segments: List[AudioSegment]):
        """List where each recited ayah can be heard (playback is left to the user's player)."""
        if not segments:
            print(Fore.YELLOW + "    No recitation available.")
            return
        for i, seg in enumerate(segments, start=1):
            print(self.theme + f"  {i}. " + Fore.CYAN + f"{seg.start}–{seg.end} ms " + Fore.WHITE + seg.audio_url)
        print()

    def display_reorder_result(self, user_order: List[str], results: List[bool]):
        for i, (text, ok) in enumerate(zip(user_order, results), start=1):
            mark = Fore.GREEN + "✓" if ok else Fore.RED + "✗"
            print(mark + Fore.WHITE + f" [{i}] " + self.fix_arabic_text(text)[:self.term_size.columns - 10])
        print()

    def display_score(self, score: SessionScore):
        line = (
            f"{Fore.GREEN}Correct: {score.correct}{Fore.WHITE} │ "
            f"{Fore.RED}Wrong: {score.wrong}{Fore.WHITE} │ "
            f"{Fore.CYAN}Accuracy: {score.accuracy}%"
        )
        print(self.theme + "─" * len(strip_ansi(line)))
        print(line)
        print(self.theme + "─" * len(strip_ansi(line)) + Style.RESET_ALL)

    def ask_yes_no(self, prompt: str) -> bool:
        while True:
            choice = input(Fore.BLUE + prompt + Fore.WHITE).strip().lower()
            if choice in ['y', 'yes']:
                return True
            if choice in ['n', 'no']:
                return False
            print(Fore.RED + "Invalid input. Please enter 'y' or 'n'.")
