from dataclasses import dataclass
from enum import Enum, auto
from typing import cast


class ResultType(Enum):
	Selection = auto()
	Cancel = auto()


@dataclass
class Result[ValueT]:
	type_: ResultType
	_data: ValueT | list[ValueT] | None

	@classmethod
	def cancelled(cls) -> 'Result[ValueT]':
		return cls(ResultType.Cancel, None)

	def is_cancelled(self) -> bool:
		return self.type_ == ResultType.Cancel

	def value(self) -> ValueT:
		assert type(self._data) is not list
		return cast(ValueT, self._data)

	def values(self) -> list[ValueT]:
		assert type(self._data) is list
		return cast(list[ValueT], self._data)
