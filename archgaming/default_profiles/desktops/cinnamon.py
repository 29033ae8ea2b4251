from typing import override

from archgaming.default_profiles.profile import DesktopProfile


class CinnamonProfile(DesktopProfile):
	def __init__(self) -> None:
		super().__init__('Cinnamon')

	@property
	@override
	def packages(self) -> list[str]:
		return ['cinnamon']
