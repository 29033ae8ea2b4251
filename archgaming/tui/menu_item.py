from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Self, override


@dataclass
class MenuItem:
	text: str
	value: Any | None = None
	description: str = ''
	key: str | None = None

	_id: str = field(default='', repr=False)

	def __post_init__(self) -> None:
		if self.key is not None:
			self._id = self.key
		else:
			self._id = str(id(self))

	@override
	def __hash__(self) -> int:
		return hash(self._id)

	def label(self) -> str:
		if self.description:
			return f'{self.text} - {self.description}'
		return self.text


class MenuItemGroup:
	def __init__(
		self,
		menu_items: list[MenuItem],
		focus_item: MenuItem | None = None,
	) -> None:
		if len(menu_items) < 1:
			raise ValueError('Menu must have at least one item')

		self._menu_items: list[MenuItem] = menu_items
		self.focus_item: MenuItem | None = focus_item or menu_items[0]

		if self.focus_item not in self.items:
			raise ValueError(f'Selected item not in menu: {self.focus_item}')

	@classmethod
	def yes_no(cls, default: bool) -> Self:
		yes = MenuItem('Yes', value=True, key='yes')
		no = MenuItem('No', value=False, key='no')
		return cls([yes, no], focus_item=yes if default else no)

	@property
	def items(self) -> list[MenuItem]:
		return self._menu_items

	def index_of(self, item: MenuItem) -> int:
		return self._menu_items.index(item)

	def find_by_value(self, value: Any) -> MenuItem | None:
		for item in self._menu_items:
			if item.value == value:
				return item
		return None

	def set_focus_by_value(self, value: Any) -> None:
		if item := self.find_by_value(value):
			self.focus_item = item

	def focus_next(self) -> None:
		if self.focus_item is None:
			return
		index = (self.index_of(self.focus_item) + 1) % len(self._menu_items)
		self.focus_item = self._menu_items[index]

	def focus_prev(self) -> None:
		if self.focus_item is None:
			return
		index = (self.index_of(self.focus_item) - 1) % len(self._menu_items)
		self.focus_item = self._menu_items[index]
