"""
Interactive operator prompts.

A Prompter is opened once at process start and closed once at the end
(``with Prompter() as prompter: ...``); everything that needs operator input
receives it explicitly.
"""

from __future__ import annotations

import sys
from typing import Callable, Sequence, TextIO


# ANSI color codes
CYAN = '\033[36m'
GREEN = '\033[32m'
YELLOW = '\033[33m'
RED = '\033[31m'
RESET = '\033[0m'

YES_ANSWERS = ('y', 'yes', 's', 'si', 'sí')


class PrompterClosed(RuntimeError):
    """Raised when a closed Prompter is asked for input."""
    pass


class Prompter:
    """
    Line-based prompts on a text stream.

    Args:
        input_func: Function reading one line given a prompt (defaults to input)
        output: Stream for menus and messages (defaults to sys.stdout)
        use_colors: Colorize output; defaults to output.isatty()
    """

    def __init__(
        self,
        input_func: Callable[[str], str] | None = None,
        output: TextIO | None = None,
        use_colors: bool | None = None,
    ):
        self._input = input_func or input
        self.output = output or sys.stdout
        if use_colors is None:
            isatty = getattr(self.output, "isatty", None)
            use_colors = bool(isatty and isatty())
        self.use_colors = use_colors
        self.closed = True

    def open(self) -> "Prompter":
        self.closed = False
        return self

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "Prompter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def colorize(self, color: str, text: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{RESET}"

    def show(self, text: str, color: str | None = None) -> None:
        """Print a line for the operator."""
        line = self.colorize(color, text) if color else text
        print(line, file=self.output)

    def ask(self, prompt_text: str) -> str:
        """
        Read a single line of operator input.

        Raises:
            PrompterClosed: If the prompter is not open
            EOFError: If the input stream is exhausted
        """
        if self.closed:
            raise PrompterClosed("Prompter is closed")
        return self._input(self.colorize(GREEN, prompt_text))

    def choose_from_menu(self, options: Sequence[str], title: str = "Select an option:") -> int:
        """
        Show a numbered menu until a valid entry is chosen.

        Args:
            options: Menu entries in display order
            title: Heading printed above the entries

        Returns:
            0-based index of the chosen option
        """
        if not options:
            raise ValueError("Menu needs at least one option")

        while True:
            self.show(f"\n{title}", CYAN)
            for index, option in enumerate(options, 1):
                self.show(f"{index}. {option}", YELLOW)

            answer = self.ask("Enter the number of your choice: ").strip()
            if answer.isdigit():
                index = int(answer) - 1
                if 0 <= index < len(options):
                    return index

            self.show("Invalid selection. Please try again.", RED)

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; anything but a yes answer means no."""
        answer = self.ask(f"{question} (y/n): ").strip().lower()
        return answer in YES_ANSWERS
