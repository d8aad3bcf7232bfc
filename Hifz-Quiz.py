# Hifz-Quiz.py

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

from colorama import Fore, Style, init

from hifzquiz.models import FullScope, JuzScope, QuizMode, SurahScope
from hifzquiz.quiz_engine import QuizGenerationError, QuizGenerator
from hifzquiz.quiz_session import QuizSession, SessionScore, check_order, mode_available, supports_ayah_range
from hifzquiz.quran_api_client import DataLoadFailure, QuranDataClient
from hifzquiz.quran_cache import QuranCache
from hifzquiz.quran_data_handler import NotFound, QuranDataHandler
from hifzquiz.quran_index import TOTAL_JUZ, TOTAL_SURAHS, ayah_count, surah_name
from hifzquiz.settings import QuizSettings
from hifzquiz.ui import THEME_COLORS, UI

init(autoreset=True)

HIFZ_QUIZ_ASCII = """
██╗  ██╗██╗███████╗███████╗     ██████╗ ██╗   ██╗██╗███████╗
██║  ██║██║██╔════╝╚══███╔╝    ██╔═══██╗██║   ██║██║╚══███╔╝
███████║██║█████╗    ███╔╝     ██║   ██║██║   ██║██║  ███╔╝
██╔══██║██║██╔══╝   ███╔╝      ██║▄▄ ██║██║   ██║██║ ███╔╝
██║  ██║██║██║     ███████╗    ╚██████╔╝╚██████╔╝██║███████╗
╚═╝  ╚═╝╚═╝╚═╝     ╚══════╝     ╚══▀▀═╝  ╚═════╝ ╚═╝╚══════╝
"""

QUIT_WORDS = ('q', 'quit', 'exit')


class QuitRequested(Exception):
    pass


class HifzQuizApp:
    def __init__(self, settings: Optional[QuizSettings] = None, settings_path: Optional[Path] = None):
        self.settings_path = settings_path
        self.settings = settings or QuizSettings.load(settings_path)
        self.client = QuranDataClient(self.settings)
        self.data_handler = QuranDataHandler(QuranCache(self.client))
        self.session = QuizSession(QuizGenerator(self.data_handler, self.settings))
        self.score = SessionScore()
        self.ui = UI(theme_color=self.settings.theme_color, arabic_reversed=self.settings.arabic_reversed)
        # One loop for the whole run so cached dataset loads outlive a single question
        self.loop = asyncio.new_event_loop()

    def _prompt(self, label: str) -> str:
        print(Fore.GREEN + f"\n{label}" + Style.DIM + Fore.WHITE)
        answer = input(self.ui.theme + "  ❯ " + Fore.WHITE).strip().lower()
        if answer in QUIT_WORDS:
            raise QuitRequested()
        return answer

    def _prompt_number(self, label: str, low: int, high: int) -> int:
        while True:
            answer = self._prompt(f"{label} ({low}-{high}):")
            if answer.isdigit() and low <= int(answer) <= high:
                return int(answer)
            print(Fore.RED + f"Invalid input. Please enter a number between {low} and {high}.")

    # --- Menus ---

    def _select_scope(self):
        while True:
            print(self.ui.theme + "╭─ " + Style.BRIGHT + Fore.GREEN + "📜 Select Scope")
            print(self.ui.theme + f"│ • {Fore.CYAN}f{Fore.WHITE}: Full Quran")
            print(self.ui.theme + f"│ • {Fore.CYAN}j{Fore.WHITE}: One juz (1-{TOTAL_JUZ})")
            print(self.ui.theme + f"│ • {Fore.CYAN}s{Fore.WHITE}: One surah (1-{TOTAL_SURAHS})")
            print(self.ui.theme + f"│ • {Fore.CYAN}download{Fore.WHITE}: Download datasets")
            print(self.ui.theme + f"│ • {Fore.CYAN}settings{Fore.WHITE}: Theme and Arabic display")
            print(self.ui.theme + "╰" + "─" * 26)
            choice = self._prompt("Enter choice:")
            if choice in ('f', 'full'):
                return FullScope()
            if choice in ('j', 'juz'):
                return JuzScope(juz=self._prompt_number("Juz number", 1, TOTAL_JUZ))
            if choice in ('s', 'surah'):
                return SurahScope(surah=self._prompt_number("Surah number", 1, TOTAL_SURAHS))
            if choice == 'download':
                self._download()
                continue
            if choice == 'settings':
                self._settings_menu()
                continue
            print(Fore.RED + "Invalid input. Please enter 'f', 'j', 's', 'download' or 'settings'.")

    def _select_mode(self, scope) -> QuizMode:
        modes = [m for m in QuizMode if mode_available(m, scope)]
        print(self.ui.theme + "╭─ " + Style.BRIGHT + Fore.GREEN + "🎯 Select Mode")
        for i, mode in enumerate(modes, start=1):
            print(self.ui.theme + f"│ {Fore.CYAN}{i:>2}{Fore.WHITE}: {mode.label}")
        print(self.ui.theme + "╰" + "─" * 26)
        return modes[self._prompt_number("Mode", 1, len(modes)) - 1]

    def _select_ayah_range(self, surah: int) -> Optional[Tuple[int, int]]:
        """Empty input or 'all' means the whole surah."""
        total = ayah_count(surah)
        while True:
            start = self._prompt(f"Start ayah of {surah_name(surah)} (1-{total}, Enter for all):")
            if start in ('', 'all'):
                return None
            end = self._prompt("End ayah:")
            if start.isdigit() and end.isdigit() and 1 <= int(start) <= int(end) <= total:
                return int(start), int(end)
            print(Fore.RED + "└──╼ Invalid range. Please try again.")

    def _download(self):
        try:
            failed = self.client.download_datasets()
        except DataLoadFailure as e:
            print(Fore.RED + str(e))
            return
        if failed:
            print(Fore.RED + f"Could not download: {', '.join(sorted(failed))}")
        else:
            print(Fore.GREEN + "✓ Datasets ready.")

    def _settings_menu(self):
        reversal = "ON" if self.settings.arabic_reversed else "OFF"
        print(self.ui.theme + "╭─ " + Style.BRIGHT + Fore.GREEN + "⚙ Settings")
        print(self.ui.theme + f"│ • {Fore.CYAN}r{Fore.WHITE}: Reverse Arabic text ({reversal})")
        print(self.ui.theme + f"│ • {Fore.CYAN}t{Fore.WHITE}: Theme color ({self.settings.theme_color})")
        print(self.ui.theme + "╰" + "─" * 26)
        choice = self._prompt("Enter choice (Enter to go back):")
        if choice == 'r':
            self.settings.arabic_reversed = not self.settings.arabic_reversed
        elif choice == 't':
            color = self._prompt(f"Theme color ({', '.join(THEME_COLORS)}):")
            if color not in THEME_COLORS:
                print(Fore.RED + f"Unknown color '{color}'.")
                return
            self.settings.theme_color = color
        else:
            return

        self.ui = UI(theme_color=self.settings.theme_color, arabic_reversed=self.settings.arabic_reversed)
        try:
            self.settings.save(self.settings_path)
        except OSError as e:
            print(Fore.RED + f"\nError saving settings: {e}")

    # --- Quiz loop ---

    def _generate(self, mode: QuizMode, scope, ayah_range):
        task = self.loop.create_task(self.session.generate(mode, scope, ayah_range))
        try:
            return self.loop.run_until_complete(task)
        except KeyboardInterrupt:
            # Let the abandoned generation unwind so the session stops loading
            if not task.done():
                task.cancel()
                try:
                    self.loop.run_until_complete(task)
                except asyncio.CancelledError:
                    pass
            raise

    def _ask_reorder(self, question):
        count = len(question.display_items)
        while True:
            answer = self._prompt(f"Enter the correct order of [1-{count}], e.g. '2 1 3 5 4':")
            picks = answer.replace(',', ' ').split()
            if sorted(picks) == [str(i) for i in range(1, count + 1)]:
                user_order = [question.display_items[int(p) - 1] for p in picks]
                results = check_order(user_order, question.answer_items)
                self.ui.display_reorder_result(user_order, results)
                return all(results)
            print(Fore.RED + f"Please use each number from 1 to {count} once.")

    def _quiz(self, mode: QuizMode, scope, ayah_range):
        number = 0
        while True:
            try:
                question = self._generate(mode, scope, ayah_range)
            except (DataLoadFailure, NotFound, QuizGenerationError, ValueError):
                print(Fore.RED + "Could not generate a question.")
                return
            number += 1
            self.ui.clear_terminal()
            self.ui.display_score(self.score)
            self.ui.display_question(question, number)

            if mode is QuizMode.REORDER:
                got_it = self._ask_reorder(question)
                self.session.reveal()
                self.ui.display_answer(question)
            else:
                self._prompt("Press Enter to reveal the answer:")
                self.session.reveal()
                self.ui.display_answer(question)
                got_it = self.ui.ask_yes_no("Did you get it right? (y/n): ")

            if got_it:
                self.score.mark_correct()
            else:
                self.score.mark_wrong()
            self.ui.display_score(self.score)
            if not self.ui.ask_yes_no("Next question? (y/n): "):
                return

    def run(self):
        try:
            while True:
                self.ui.clear_terminal()
                self.ui.display_header(HIFZ_QUIZ_ASCII)
                try:
                    scope = self._select_scope()
                    mode = self._select_mode(scope)
                    ayah_range = None
                    if isinstance(scope, SurahScope) and supports_ayah_range(mode):
                        ayah_range = self._select_ayah_range(scope.surah)
                    self.session.reset()
                    self._quiz(mode, scope, ayah_range)
                except QuitRequested:
                    break
                except KeyboardInterrupt:
                    print(Fore.YELLOW + "\n\n⚠ Interrupted! Returning to main menu.")
                    continue
        finally:
            self.loop.close()


if __name__ == "__main__":
    try:
        HifzQuizApp().run()
        sys.exit(0)
    except KeyboardInterrupt:
        os.system('cls' if os.name == 'nt' else 'clear')
        print(Style.BRIGHT + Fore.YELLOW + "⚠ To exit, please type 'quit' or 'exit'")
        sys.exit(1)
