from __future__ import annotations

import getpass
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

from archgaming.tui.menu_item import MenuItem

from ..exceptions import UserCancelled
from ..output import warn

T = TypeVar('T')

# returns None when the value is acceptable, otherwise the message to show
Validator = Callable[[str], str | None]

PASSWORD_MISMATCH = 'The confirmation password did not match, please try again'
PASSWORD_EMPTY = 'The password cannot be empty'


def prompt_until(
	ask: Callable[[], T],
	predicate: Callable[[T], bool],
	message: str,
	on_invalid: Callable[[str], None] = warn,
) -> T:
	"""
	Keeps asking until the answer satisfies ``predicate``,
	reporting ``message`` after every rejected answer.
	"""
	while True:
		value = ask()
		if predicate(value):
			return value
		on_invalid(message)


class Prompter(ABC):
	"""
	Yes/no, free text, secret, single and multiple choice questions.
	Invalid answers are asked again, a cancelled prompt raises UserCancelled.
	"""

	@abstractmethod
	def ask_yes_no(self, prompt: str, default: bool = False) -> bool: ...

	@abstractmethod
	def ask_choice(self, prompt: str, options: list[MenuItem], default: Any = None) -> Any: ...

	@abstractmethod
	def ask_multi_choice(self, prompt: str, options: list[MenuItem], defaults: set[Any] | None = None) -> set[Any]: ...

	@abstractmethod
	def show_message(self, text: str) -> None: ...

	@abstractmethod
	def _read_text(self, prompt: str, default: str) -> str: ...

	@abstractmethod
	def _read_secret(self, prompt: str) -> str: ...

	def invalid(self, message: str) -> None:
		warn(message)

	def ask_text(self, prompt: str, default: str = '', validator: Validator | None = None) -> str:
		def _ask() -> str:
			return self._read_text(prompt, default).strip() or default

		if validator is None:
			return _ask()

		while True:
			value = _ask()
			if (message := validator(value)) is None:
				return value
			self.invalid(message)

	def ask_secret(self, prompt: str) -> str:
		while True:
			first = prompt_until(
				lambda: self._read_secret(prompt),
				lambda value: bool(value),
				PASSWORD_EMPTY,
				on_invalid=self.invalid,
			)
			second = self._read_secret(f'{prompt} (confirm)')

			if first == second:
				return first

			self.invalid(PASSWORD_MISMATCH)


class TextPrompter(Prompter):
	"""
	Plain line based prompts on stdin/stdout, secrets through getpass.
	End of input counts as cancellation.
	"""

	def __init__(
		self,
		read_line: Callable[[str], str] = input,
		read_secret: Callable[[str], str] = getpass.getpass,
		write: Callable[[str], None] = print,
	):
		self._read_line = read_line
		self._read_password = read_secret
		self._write = write

	def _input(self, prompt: str) -> str:
		try:
			return self._read_line(prompt)
		except EOFError:
			self._write('')
			raise UserCancelled()

	def ask_yes_no(self, prompt: str, default: bool = False) -> bool:
		suffix = '[Y/n]' if default else '[y/N]'

		while True:
			answer = self._input(f'{prompt} {suffix} ').strip().lower()

			if not answer:
				return default
			if answer in ('y', 'yes'):
				return True
			if answer in ('n', 'no'):
				return False

			self.invalid('Please answer yes or no')

	def _read_text(self, prompt: str, default: str) -> str:
		if default:
			return self._input(f'{prompt} [{default}]: ')
		return self._input(f'{prompt}: ')

	def _read_secret(self, prompt: str) -> str:
		try:
			return self._read_password(f'{prompt}: ')
		except EOFError:
			self._write('')
			raise UserCancelled()

	def _print_options(self, prompt: str, options: list[MenuItem], marked: list[bool]) -> None:
		self._write(prompt)
		for index, (item, mark) in enumerate(zip(options, marked), start=1):
			self._write(f'  {index:>2}) {item.label()}{" *" if mark else ""}')

	def _lookup(self, options: list[MenuItem], token: str) -> MenuItem | None:
		if token.isdigit():
			index = int(token) - 1
			return options[index] if 0 <= index < len(options) else None

		for item in options:
			if token in (item.text.lower(), (item.key or '').lower(), str(item.value).lower()):
				return item

		return None

	def ask_choice(self, prompt: str, options: list[MenuItem], default: Any = None) -> Any:
		default_item = next((item for item in options if item.value == default), None)
		self._print_options(prompt, options, [item is default_item for item in options])

		while True:
			hint = f' [{options.index(default_item) + 1}]' if default_item else ''
			answer = self._input(f'Choice{hint}: ').strip().lower()

			if not answer and default_item is not None:
				return default_item.value

			if answer and (item := self._lookup(options, answer)):
				return item.value

			self.invalid(f'Please pick one of 1-{len(options)}')

	def ask_multi_choice(self, prompt: str, options: list[MenuItem], defaults: set[Any] | None = None) -> set[Any]:
		defaults = defaults or set()
		self._print_options(prompt, options, [item.value in defaults for item in options])
		self._write('Enter numbers separated by spaces, "none" for nothing, empty for the marked defaults.')

		while True:
			answer = self._input('Selection: ').strip().lower()

			if not answer:
				return set(defaults)
			if answer == 'none':
				return set()

			tokens = [t for t in re.split(r'[\s,]+', answer) if t]
			items = [self._lookup(options, t) for t in tokens]

			if all(item is not None for item in items):
				return {item.value for item in items if item is not None}

			self.invalid('Unknown selection, please try again')

	def show_message(self, text: str) -> None:
		self._write(text)
