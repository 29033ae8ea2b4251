from typing import override

from archgaming.default_profiles.profile import DesktopProfile


class Xfce4Profile(DesktopProfile):
	def __init__(self) -> None:
		super().__init__('Xfce')

	@property
	@override
	def packages(self) -> list[str]:
		return [
			'xfce4',
			'xfce4-goodies',
		]
