from collections.abc import Callable, Iterator

import pytest

from conftest import ScriptedPrompter

from archgaming.lib.exceptions import UserCancelled
from archgaming.lib.interactions import dialog_capable, prompt_until
from archgaming.lib.interactions.prompter import PASSWORD_EMPTY, PASSWORD_MISMATCH, TextPrompter
from archgaming.lib.models.config import DesktopChoice
from archgaming.tui.menu_item import MenuItem, MenuItemGroup


def _reader(answers: list[str]) -> Callable[[str], str]:
	it: Iterator[str] = iter(answers)

	def _read(prompt: str) -> str:
		try:
			return next(it)
		except StopIteration:
			raise EOFError()

	return _read


def _text_prompter(lines: list[str], secrets: list[str] | None = None, output: list[str] | None = None) -> TextPrompter:
	out = output if output is not None else []
	return TextPrompter(read_line=_reader(lines), read_secret=_reader(secrets or []), write=out.append)


def _options() -> list[MenuItem]:
	return [MenuItem(choice.display_name(), value=choice, key=choice.value) for choice in DesktopChoice]


def test_yes_no_default_and_reprompt() -> None:
	prompter = _text_prompter(['', 'maybe', 'y'])

	assert prompter.ask_yes_no('Continue?', default=False) is False
	assert prompter.ask_yes_no('Continue?', default=False) is True


def test_end_of_input_cancels() -> None:
	prompter = _text_prompter([])

	with pytest.raises(UserCancelled) as err:
		prompter.ask_yes_no('Continue?')

	assert str(err.value) == 'Operation cancelled by user.'
	assert err.value.exit_code == 1


def test_choice_by_number_key_and_default() -> None:
	prompter = _text_prompter(['2', 'xfce', '', '42', 'skip'])

	assert prompter.ask_choice('Desktop', _options(), default=DesktopChoice.Skip) == DesktopChoice.Plasma
	assert prompter.ask_choice('Desktop', _options(), default=DesktopChoice.Skip) == DesktopChoice.Xfce
	assert prompter.ask_choice('Desktop', _options(), default=DesktopChoice.Gnome) == DesktopChoice.Gnome
	# out of range is asked again
	assert prompter.ask_choice('Desktop', _options()) == DesktopChoice.Skip


def test_multi_choice() -> None:
	prompter = _text_prompter(['', 'none', '1 3', 'gnome, bogus', '5'])
	defaults = {DesktopChoice.Gnome}

	assert prompter.ask_multi_choice('Pick', _options(), defaults) == defaults
	assert prompter.ask_multi_choice('Pick', _options(), defaults) == set()
	assert prompter.ask_multi_choice('Pick', _options(), defaults) == {DesktopChoice.Gnome, DesktopChoice.Xfce}
	assert prompter.ask_multi_choice('Pick', _options(), defaults) == {DesktopChoice.Skip}


def test_text_validator_reprompts() -> None:
	prompter = ScriptedPrompter()
	answers = iter(['Not Valid!', 'arch-box'])
	prompter._read_text = lambda prompt, default: next(answers)  # type: ignore[method-assign]

	value = prompter.ask_text('Hostname', 'x', validator=lambda v: None if v.islower() and ' ' not in v else 'bad hostname')

	assert value == 'arch-box'
	assert prompter.rejections == ['bad hostname']


def test_empty_text_takes_default() -> None:
	assert _text_prompter(['   ']).ask_text('Locale', 'en_US.UTF-8') == 'en_US.UTF-8'


def test_mismatched_passwords_are_reprompted() -> None:
	prompter = ScriptedPrompter(secrets=['hunter2', 'hunter3', 'hunter2', 'hunter2'])

	assert prompter.ask_secret('Password for root') == 'hunter2'
	assert prompter.rejections == [PASSWORD_MISMATCH]
	assert prompter.secrets == []


def test_empty_password_is_rejected() -> None:
	prompter = ScriptedPrompter(secrets=['', 'secret', 'secret'])

	assert prompter.ask_secret('Password') == 'secret'
	assert prompter.rejections == [PASSWORD_EMPTY]


def test_mismatched_passwords_are_never_accepted() -> None:
	prompter = _text_prompter([], secrets=['a', 'b', 'c', 'd'])

	# runs out of input before a matching pair is given
	with pytest.raises(UserCancelled):
		prompter.ask_secret('Password')


def test_prompt_until() -> None:
	answers = iter([0, 3, 8])
	rejected: list[str] = []

	value = prompt_until(lambda: next(answers), lambda v: v >= 1 and v % 2 == 0, 'even and positive', on_invalid=rejected.append)

	assert value == 8
	assert rejected == ['even and positive', 'even and positive']


def test_dialog_capable() -> None:
	class _Tty:
		def __init__(self, tty: bool):
			self._tty = tty

		def isatty(self) -> bool:
			return self._tty

	assert dialog_capable({'TERM': 'xterm-256color'}, _Tty(True), _Tty(True)) is True  # type: ignore[arg-type]
	assert dialog_capable({'TERM': 'dumb'}, _Tty(True), _Tty(True)) is False  # type: ignore[arg-type]
	assert dialog_capable({}, _Tty(True), _Tty(True)) is False  # type: ignore[arg-type]
	assert dialog_capable({'TERM': 'linux'}, _Tty(False), _Tty(True)) is False  # type: ignore[arg-type]


def test_menu_group_focus() -> None:
	group = MenuItemGroup([MenuItem(choice.value, value=choice, key=choice.value) for choice in DesktopChoice])
	group.set_focus_by_value(DesktopChoice.Skip)

	assert group.focus_item is not None and group.focus_item.value == DesktopChoice.Skip
	group.focus_next()
	assert group.focus_item.value == DesktopChoice.Gnome
	group.focus_prev()
	group.focus_prev()
	assert group.focus_item.value == DesktopChoice.Cinnamon

	yes_no = MenuItemGroup.yes_no(default=False)
	assert yes_no.focus_item is not None and yes_no.focus_item.value is False
