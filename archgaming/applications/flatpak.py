from typing import TYPE_CHECKING

from archgaming.lib.output import info

if TYPE_CHECKING:
	from archgaming.lib.pacman import Pacman
	from archgaming.lib.runner import CommandRunner

FLATHUB_URL = 'https://flathub.org/repo/flathub.flatpakrepo'


class FlatpakApp:
	def __init__(self, runner: 'CommandRunner', pacman: 'Pacman'):
		self._runner = runner
		self._pacman = pacman

	def remotes(self) -> list[str]:
		if not self._runner.has_binary('flatpak'):
			return []

		status = self._runner.query(['flatpak', 'remote-list', '--columns=name'])
		if not status.ok:
			return []
		return [line.strip() for line in status.output.splitlines() if line.strip()]

	def flathub_configured(self) -> bool:
		return 'flathub' in self.remotes()

	def install(self) -> None:
		self._pacman.install('flatpak')

		if self._runner.dry_run or not self.flathub_configured():
			info('Adding the Flathub remote')
			self._runner.run(
				['flatpak', 'remote-add', '--if-not-exists', 'flathub', FLATHUB_URL],
				privileged=True,
				check=True,
			)
