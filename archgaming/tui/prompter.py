from typing import Any, override

from archgaming.lib.exceptions import UserCancelled
from archgaming.lib.interactions.prompter import Prompter
from archgaming.lib.output import warn
from archgaming.tui.components import (
	BaseScreen,
	ConfirmationScreen,
	InputScreen,
	NotifyScreen,
	OptionListScreen,
	PromptApp,
	SelectListScreen,
)
from archgaming.tui.menu_item import MenuItem, MenuItemGroup
from archgaming.tui.result import Result


class TuiPrompter(Prompter):
	"""
	Dialog style prompts drawn with textual, one short-lived app per question.
	Escape (or quitting the app) cancels the run.
	"""

	def __init__(self, title: str = 'Arch Gaming Setup'):
		self._title = title

	def app_for(self, screen: BaseScreen[Any]) -> PromptApp:
		return PromptApp(screen, self._title)

	@staticmethod
	def unwrap(result: Result[Any] | None) -> Result[Any]:
		if result is None or result.is_cancelled():
			raise UserCancelled()

		return result

	def _show(self, screen: BaseScreen[Any]) -> Result[Any]:
		return self.unwrap(self.app_for(screen).run())

	@override
	def invalid(self, message: str) -> None:
		warn(message)
		self._show(NotifyScreen(message))

	@override
	def ask_yes_no(self, prompt: str, default: bool = False) -> bool:
		group = MenuItemGroup.yes_no(default)
		return bool(self._show(ConfirmationScreen(group, prompt)).value())

	@override
	def _read_text(self, prompt: str, default: str) -> str:
		return str(self._show(InputScreen(prompt, default_value=default)).value())

	@override
	def _read_secret(self, prompt: str) -> str:
		return str(self._show(InputScreen(prompt, password=True)).value())

	@override
	def ask_choice(self, prompt: str, options: list[MenuItem], default: Any = None) -> Any:
		group = MenuItemGroup(options)
		if default is not None:
			group.set_focus_by_value(default)

		return self._show(OptionListScreen(group, prompt)).value()

	@override
	def ask_multi_choice(self, prompt: str, options: list[MenuItem], defaults: set[Any] | None = None) -> set[Any]:
		group = MenuItemGroup(options)
		return set(self._show(SelectListScreen(group, prompt, defaults)).values())

	@override
	def show_message(self, text: str) -> None:
		self._show(NotifyScreen(text))
