import os
import sys
from collections.abc import Mapping
from typing import TextIO

from ..output import debug
from .prompter import Prompter, TextPrompter, prompt_until


def dialog_capable(
	environ: Mapping[str, str] = os.environ,
	stdin: TextIO = sys.stdin,
	stdout: TextIO = sys.stdout,
) -> bool:
	term = environ.get('TERM', '')
	if not term or term == 'dumb':
		return False

	return stdin.isatty() and stdout.isatty()


def select_prompter(ui: str | None = None, title: str = 'Arch Gaming Setup') -> Prompter:
	"""
	Picks the prompt backend once for the whole run:
	``--ui`` first, then ``ARCHGAMING_UI``, then terminal capabilities.
	"""
	choice = ui if ui and ui != 'auto' else os.environ.get('ARCHGAMING_UI', 'auto')

	if choice == 'auto':
		choice = 'dialog' if dialog_capable() else 'text'

	debug(f'Using the {choice} prompt backend')

	if choice == 'dialog':
		from archgaming.tui.prompter import TuiPrompter

		return TuiPrompter(title=title)

	return TextPrompter()


__all__ = [
	'Prompter',
	'TextPrompter',
	'dialog_capable',
	'prompt_until',
	'select_prompter',
]
