import time
from pathlib import Path

from ..exceptions import PackageError
from ..output import error, info, warn
from ..runner import CommandRunner, ExitStatus, pacman_flags
from .config import PacmanConfig


class Pacman:
	def __init__(self, runner: CommandRunner, chrooted: bool = False, lock_timeout: float = 60 * 10):
		self.runner = runner
		self.chrooted = chrooted
		self.lock_timeout = lock_timeout
		self.synced = False

	def _wait_for_lock(self) -> None:
		"""
		Protects us from colliding with other running pacman sessions.
		The grace period is 10 minutes before giving up.
		"""
		root = self.runner.target if self.chrooted else Path('/')
		pacman_db_lock = root / 'var/lib/pacman/db.lck'

		if pacman_db_lock.exists():
			warn('Pacman is already running, waiting maximum 10 minutes for it to terminate.')

		started = time.time()
		while pacman_db_lock.exists():
			time.sleep(0.25)

			if time.time() - started > self.lock_timeout:
				error('Pre-existing pacman lock never exited. Please clean up any existing pacman sessions.')
				raise PackageError(f'pacman database is locked ({pacman_db_lock})')

	def run(self, args: list[str], check: bool = True) -> ExitStatus:
		self._wait_for_lock()
		return self.runner.run(['pacman', *args], privileged=True, chrooted=self.chrooted, check=check)

	def sync(self) -> None:
		if self.synced:
			return

		info('Synchronising package databases')
		self.run(['-Sy'])
		self.synced = True

	def upgrade(self) -> None:
		info('Upgrading the system')
		self.run(['-Syu', *pacman_flags()])
		self.synced = True

	def install(self, packages: str | list[str]) -> None:
		if isinstance(packages, str):
			packages = [packages]

		# keep the given order, drop duplicates
		packages = list(dict.fromkeys(packages))

		if not packages:
			return

		info(f'Installing packages: {" ".join(packages)}')
		status = self.run(['-S', *pacman_flags(), *packages], check=False)

		if not status.ok:
			raise PackageError(f'Could not install {", ".join(packages)} (pacman exit code {status.exit_code})')

	def exists(self, package: str) -> bool:
		return self.runner.succeeds(['pacman', '-Si', package])


__all__ = [
	'Pacman',
	'PacmanConfig',
]
