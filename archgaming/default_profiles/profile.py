from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from archgaming.lib.exceptions import ServiceException
from archgaming.lib.output import info

if TYPE_CHECKING:
	from archgaming.lib.pacman import Pacman
	from archgaming.lib.runner import CommandRunner


class GreeterType(Enum):
	Lightdm = 'lightdm-gtk-greeter'
	Sddm = 'sddm'
	Gdm = 'gdm'

	@property
	def packages(self) -> list[str]:
		match self:
			case GreeterType.Lightdm:
				return ['lightdm', 'lightdm-gtk-greeter', 'lightdm-gtk-greeter-settings']
			case GreeterType.Sddm:
				return ['sddm', 'sddm-kcm']
			case GreeterType.Gdm:
				return ['gdm']

	@property
	def service(self) -> str:
		match self:
			case GreeterType.Lightdm:
				return 'lightdm.service'
			case GreeterType.Sddm:
				return 'sddm.service'
			case GreeterType.Gdm:
				return 'gdm.service'


class DesktopProfile:
	def __init__(self, name: str, packages: list[str] | None = None) -> None:
		self.name = name
		self._packages = list(packages or [])

	@property
	def packages(self) -> list[str]:
		"""
		Returns a list of packages that should be installed when
		this desktop is the chosen one, the greeter not included
		"""
		return self._packages

	@property
	def core_packages(self) -> list[str]:
		"""
		The packages without which the desktop is considered missing.
		"""
		return self.packages[:1]

	@property
	def default_greeter_type(self) -> GreeterType:
		return GreeterType.Lightdm

	def all_packages(self) -> list[str]:
		return self.packages + self.default_greeter_type.packages

	def install(self, pacman: Pacman) -> None:
		info(f'Installing the {self.name} desktop')
		pacman.install(self.all_packages())

	def enable_greeter(self, runner: CommandRunner) -> None:
		# enabled for the next boot, starting it now would replace the running session
		service = self.default_greeter_type.service
		info(f'Enabling display manager {service}')

		status = runner.run(['systemctl', 'enable', service], privileged=True)
		if not status.ok:
			raise ServiceException(f'Unable to enable display manager {service} (exit code {status.exit_code})')
