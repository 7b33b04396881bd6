"""
Confirmation Prompts.

The installer asks the user before replacing a plugin or building a project
that does not look like a plugin. Anything with a ``confirm`` method can
answer.
"""

import sys
from collections.abc import Callable
from typing import Protocol


class Prompt(Protocol):
    def confirm(self, message: str, default: bool) -> bool: ...


class ConsolePrompt:
    """
    Asks yes/no questions on the terminal.

    Args:
        assume_yes: Answer every question with yes without asking (--noconfirm)
        input_func: Line reader, ``input`` by default
    """

    def __init__(self, assume_yes: bool = False, input_func: Callable[[str], str] = input):
        self.assume_yes = assume_yes
        self.input_func = input_func

    def confirm(self, message: str, default: bool) -> bool:
        if self.assume_yes:
            return True

        suffix = " [Y/n] " if default else " [y/N] "
        while True:
            try:
                answer = self.input_func(message + suffix).strip().lower()
            except EOFError:
                return default

            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            print("Please answer 'y' or 'n'.", file=sys.stderr)


class StaticPrompt:
    """Answers every question the same way; handy for scripted installs."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.questions: list[str] = []

    def confirm(self, message: str, default: bool) -> bool:
        self.questions.append(message)
        return self.answer
