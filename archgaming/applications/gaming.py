from pathlib import Path
from typing import TYPE_CHECKING

from archgaming.lib.models.config import GamingComponent
from archgaming.lib.output import debug, info, warn

if TYPE_CHECKING:
	from archgaming.lib.pacman import Pacman
	from archgaming.lib.runner import CommandRunner

GAMEMODE_UNIT = 'gamemoded.service'

MANGOHUD_DEFAULTS = """\
# Minimal MangoHud defaults (toggle with F12 by default)
cpu_temp
gpu_temp
gpu_core_clock
gpu_mem_clock
vram
fps
frame_timing
"""


def _ordered(components: set[GamingComponent]) -> list[GamingComponent]:
	return [c for c in GamingComponent if c in components]


class GamingApp:
	def __init__(self, runner: 'CommandRunner', pacman: 'Pacman'):
		self._runner = runner
		self._pacman = pacman

	@staticmethod
	def packages_for(components: set[GamingComponent], multilib: bool) -> tuple[list[str], list[GamingComponent]]:
		"""
		Returns the repository packages for the selected components and
		the components dropped because they need the multilib repository.
		AUR components are left to the AUR helper.
		"""
		packages: list[str] = []
		dropped: list[GamingComponent] = []

		for component in _ordered(components):
			if component.requires_multilib and not multilib:
				dropped.append(component)
				continue

			if component.from_aur:
				continue

			packages += [p for p in component.packages if multilib or not p.startswith('lib32-')]

		return packages, dropped

	def install(self, components: set[GamingComponent], multilib: bool) -> list[GamingComponent]:
		packages, dropped = self.packages_for(components, multilib)

		for component in dropped:
			warn(f'Skipping {component.value} because the multilib repository is disabled')

		if not packages:
			debug('No gaming packages to install')
			return dropped

		self._pacman.install(packages)
		return dropped

	def user_unit_available(self, unit: str) -> bool:
		status = self._runner.query(['systemctl', '--user', 'list-unit-files', unit])
		return status.ok and unit in status.output

	def enable_gamemode(self) -> bool:
		unit = GAMEMODE_UNIT

		if not self.user_unit_available(unit):
			warn(f'{unit} user service not found (is gamemode installed?)')
			return False

		info(f'Enabling {unit} user service')
		self._runner.run(['systemctl', '--user', 'enable', '--now', unit], check=True)
		return True

	def write_mangohud_defaults(self, home: Path) -> bool:
		config_file = home / '.config' / 'MangoHud' / 'MangoHud.conf'

		if config_file.exists():
			info('MangoHud configuration already exists, leaving untouched')
			return False

		self._runner.write_file(config_file, MANGOHUD_DEFAULTS, privileged=False)
		info(f'Created baseline MangoHud configuration at {config_file}')
		return True
