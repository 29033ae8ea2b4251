from typing import override

from archgaming.default_profiles.profile import DesktopProfile, GreeterType


class PlasmaProfile(DesktopProfile):
	def __init__(self) -> None:
		super().__init__('KDE Plasma')

	@property
	@override
	def packages(self) -> list[str]:
		return [
			'plasma-meta',
			'kde-applications',
		]

	@property
	@override
	def default_greeter_type(self) -> GreeterType:
		return GreeterType.Sddm
