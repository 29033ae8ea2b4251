from typing import override

from archgaming.default_profiles.profile import DesktopProfile, GreeterType


class GnomeProfile(DesktopProfile):
	def __init__(self) -> None:
		super().__init__('GNOME')

	@property
	@override
	def packages(self) -> list[str]:
		return [
			'gnome',
			'gnome-tweaks',
			'gnome-shell-extensions',
			'power-profiles-daemon',
		]

	@property
	@override
	def default_greeter_type(self) -> GreeterType:
		return GreeterType.Gdm
