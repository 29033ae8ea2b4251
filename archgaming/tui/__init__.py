from .menu_item import MenuItem, MenuItemGroup
from .result import Result, ResultType

__all__ = [
	'MenuItem',
	'MenuItemGroup',
	'Result',
	'ResultType',
]
