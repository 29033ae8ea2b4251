from __future__ import annotations

from typing import Any, ClassVar, TypeVar, override

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Input, OptionList, SelectionList, Static
from textual.widgets.option_list import Option
from textual.widgets.selection_list import Selection

from archgaming.tui.menu_item import MenuItemGroup
from archgaming.tui.result import Result, ResultType

ValueT = TypeVar('ValueT')


class BaseScreen(Screen[Result[ValueT]]):
	BINDINGS: ClassVar = [
		Binding('escape', 'cancel_operation', 'Cancel', show=True),
	]

	def action_cancel_operation(self) -> None:
		_ = self.dismiss(Result.cancelled())

	def _compose_header(self) -> ComposeResult:
		if self.app.title:
			yield Static(self.app.title, classes='app-header')


class ConfirmationScreen(BaseScreen[ValueT]):
	BINDINGS: ClassVar = [
		Binding('l', 'focus_right', 'Focus right', show=True),
		Binding('h', 'focus_left', 'Focus left', show=True),
		Binding('right', 'focus_right', 'Focus right', show=True),
		Binding('left', 'focus_left', 'Focus left', show=True),
	]

	CSS = """
	ConfirmationScreen {
		align: center middle;
	}

	.dialog {
		width: 80;
		height: auto;
		padding: 1;
	}

	.message {
		text-align: center;
		margin-bottom: 1;
	}

	.buttons {
		align: center middle;
		height: auto;
	}

	Button {
		margin: 0 1;
	}

	Button.-active {
		background: #1793D1;
		color: white;
	}
	"""

	def __init__(self, group: MenuItemGroup, header: str):
		super().__init__()
		self._group = group
		self._header = header

	@override
	def compose(self) -> ComposeResult:
		yield from self._compose_header()

		with Center():
			with Vertical(classes='dialog'):
				yield Static(self._header, classes='message')
				with Horizontal(classes='buttons'):
					for item in self._group.items:
						yield Button(item.text, id=item.key)

	def on_mount(self) -> None:
		self.update_selection()

	def update_selection(self) -> None:
		focused = self._group.focus_item

		if not focused:
			return

		for button in self.query(Button):
			if button.id == focused.key:
				button.add_class('-active')
				button.focus()
			else:
				button.remove_class('-active')

	def action_focus_right(self) -> None:
		self._group.focus_next()
		self.update_selection()

	def action_focus_left(self) -> None:
		self._group.focus_prev()
		self.update_selection()

	def on_button_pressed(self, event: Button.Pressed) -> None:
		for item in self._group.items:
			if item.key == event.button.id:
				_ = self.dismiss(Result(ResultType.Selection, item.value))


class NotifyScreen(BaseScreen[None]):
	CSS = """
	NotifyScreen {
		align: center middle;
	}

	.dialog {
		width: 100;
		max-height: 90%;
		height: auto;
		padding: 1;
	}

	VerticalScroll {
		height: auto;
		max-height: 30;
	}

	Button {
		margin-top: 1;
	}
	"""

	def __init__(self, text: str):
		super().__init__()
		self._text = text

	@override
	def compose(self) -> ComposeResult:
		yield from self._compose_header()

		with Center():
			with Vertical(classes='dialog'):
				with VerticalScroll():
					yield Static(self._text, markup=False)
				with Center():
					yield Button('Ok', id='ok')

	def on_mount(self) -> None:
		self.query_one('#ok', Button).focus()

	def on_button_pressed(self, event: Button.Pressed) -> None:
		_ = self.dismiss(Result(ResultType.Selection, None))


class InputScreen(BaseScreen[str]):
	CSS = """
	InputScreen {
		align: center middle;
	}

	.input-dialog {
		width: 70;
		height: auto;
		padding: 1;
	}

	.input-header {
		text-align: center;
		text-style: bold;
	}

	Input {
		margin: 1 2;
		border: solid $accent;
	}

	Input:focus {
		border: solid $primary;
	}
	"""

	def __init__(
		self,
		header: str,
		password: bool = False,
		default_value: str | None = None,
	):
		super().__init__()
		self._header = header
		self._password = password
		self._default_value = default_value or ''

	@override
	def compose(self) -> ComposeResult:
		yield from self._compose_header()

		with Center():
			with Vertical(classes='input-dialog'):
				yield Static(self._header, classes='input-header')
				yield Input(
					placeholder=self._default_value,
					password=self._password,
					value=self._default_value,
					id='main_input',
				)

	def on_mount(self) -> None:
		self.query_one('#main_input', Input).focus()

	def on_input_submitted(self, event: Input.Submitted) -> None:
		_ = self.dismiss(Result(ResultType.Selection, event.value))


class OptionListScreen(BaseScreen[ValueT]):
	CSS = """
	OptionListScreen {
		align: center middle;
	}

	.dialog {
		width: 90;
		height: auto;
		padding: 1;
	}

	.header {
		text-align: center;
		margin-bottom: 1;
	}

	OptionList {
		height: auto;
		max-height: 20;
	}
	"""

	def __init__(self, group: MenuItemGroup, header: str):
		super().__init__()
		self._group = group
		self._header = header

	@override
	def compose(self) -> ComposeResult:
		yield from self._compose_header()

		with Center():
			with Vertical(classes='dialog'):
				yield Static(self._header, classes='header')
				yield OptionList(*[Option(item.label()) for item in self._group.items])

	def on_mount(self) -> None:
		option_list = self.query_one(OptionList)

		if self._group.focus_item is not None:
			option_list.highlighted = self._group.index_of(self._group.focus_item)

		option_list.focus()

	def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
		item = self._group.items[event.option_index]
		_ = self.dismiss(Result(ResultType.Selection, item.value))


class SelectListScreen(BaseScreen[ValueT]):
	CSS = """
	SelectListScreen {
		align: center middle;
	}

	.dialog {
		width: 90;
		height: auto;
		padding: 1;
	}

	.header {
		text-align: center;
		margin-bottom: 1;
	}

	SelectionList {
		height: auto;
		max-height: 20;
	}

	Button {
		margin-top: 1;
	}
	"""

	def __init__(self, group: MenuItemGroup, header: str, defaults: set[Any] | None = None):
		super().__init__()
		self._group = group
		self._header = header
		self._defaults = defaults or set()

	@override
	def compose(self) -> ComposeResult:
		yield from self._compose_header()

		selections = [
			Selection(item.label(), index, item.value in self._defaults)
			for index, item in enumerate(self._group.items)
		]

		with Center():
			with Vertical(classes='dialog'):
				yield Static(f'{self._header}\n(space toggles, tab moves to Confirm)', classes='header')
				yield SelectionList[int](*selections)
				with Center():
					yield Button('Confirm', id='confirm')

	def on_mount(self) -> None:
		self.query_one(SelectionList).focus()

	def on_button_pressed(self, event: Button.Pressed) -> None:
		selected: list[int] = list(self.query_one(SelectionList).selected)
		values = [self._group.items[index].value for index in sorted(selected)]
		_ = self.dismiss(Result(ResultType.Selection, values))


class PromptApp(App[Result[Any]]):
	"""
	Runs a single prompt screen and exits with its result.
	"""

	CSS = """
	.app-header {
		dock: top;
		height: auto;
		width: 100%;
		content-align: center middle;
		background: $primary;
		color: white;
		text-style: bold;
	}
	"""

	def __init__(self, screen: BaseScreen[Any], title: str) -> None:
		super().__init__(ansi_color=True)
		self._prompt_screen = screen
		self.title = title

	def on_mount(self) -> None:
		self.push_screen(self._prompt_screen, callback=self.exit)
