import os
import shlex
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from shutil import which

from .exceptions import SysCallError
from .general import SysCommand, locate_binary
from .output import debug, info

DEFAULT_PACMAN_FLAGS = ['--needed', '--noconfirm']


def pacman_flags() -> list[str]:
	if flags := os.environ.get('PACMAN_FLAGS'):
		return shlex.split(flags)
	return list(DEFAULT_PACMAN_FLAGS)


@dataclass(frozen=True)
class ExitStatus:
	argv: list[str]
	exit_code: int
	output: str = ''

	@property
	def ok(self) -> bool:
		return self.exit_code == 0


class CommandRunner:
	"""
	The single place external commands are started from.

	``privileged`` inserts ``sudo`` when the process is not root,
	``chrooted`` runs the command inside the target root with ``arch-chroot``
	and ``run_as`` runs it as another user through ``runuser``.
	"""

	def __init__(self, target: Path = Path('/mnt'), dry_run: bool = False, is_root: bool | None = None):
		self.target = target
		self.dry_run = dry_run
		self.is_root = os.geteuid() == 0 if is_root is None else is_root

	def build(
		self,
		argv: list[str],
		privileged: bool = False,
		chrooted: bool = False,
		run_as: str | None = None,
	) -> list[str]:
		cmd = list(argv)

		if run_as:
			cmd = ['runuser', '-l', run_as, '-c', shlex.join(cmd)]
			privileged = True

		if chrooted:
			cmd = ['arch-chroot', str(self.target), *cmd]
			privileged = True

		if privileged and not self.is_root:
			cmd = ['sudo', *cmd]

		return cmd

	def run(
		self,
		argv: list[str],
		privileged: bool = False,
		chrooted: bool = False,
		run_as: str | None = None,
		input_data: bytes | None = None,
		capture: bool = False,
		check: bool = False,
		cwd: Path | None = None,
	) -> ExitStatus:
		cmd = self.build(argv, privileged=privileged, chrooted=chrooted, run_as=run_as)

		if self.dry_run:
			info(f'[dry-run] {shlex.join(cmd)}')
			return ExitStatus(cmd, 0)

		debug(f'Executing: {shlex.join(cmd)}')
		status = self._execute(cmd, input_data=input_data, capture=capture, cwd=cwd)

		if check and not status.ok:
			raise SysCallError(
				f'{shlex.join(cmd)} exited with abnormal exit code [{status.exit_code}]',
				status.exit_code,
				worker_log=status.output.encode(),
			)

		return status

	def query(self, argv: list[str], privileged: bool = False, chrooted: bool = False) -> ExitStatus:
		"""
		Read-only commands, executed even in dry-run mode and always captured.
		"""
		cmd = self.build(argv, privileged=privileged, chrooted=chrooted)
		return self._execute(cmd, input_data=None, capture=True, cwd=None)

	def succeeds(self, argv: list[str], privileged: bool = False, chrooted: bool = False) -> bool:
		return self.query(argv, privileged=privileged, chrooted=chrooted).ok

	def has_binary(self, name: str) -> bool:
		return which(name) is not None

	def _execute(
		self,
		cmd: list[str],
		input_data: bytes | None,
		capture: bool,
		cwd: Path | None,
	) -> ExitStatus:
		# a missing binary is a RequirementError, not an exit status
		locate_binary(cmd[0])

		try:
			worker = SysCommand(cmd, peek_output=not capture, input_data=input_data, working_directory=cwd)
		except SysCallError as err:
			exit_code = err.exit_code if err.exit_code is not None else 1
			return ExitStatus(cmd, exit_code, err.worker_log.decode('utf-8', errors='backslashreplace'))

		return ExitStatus(cmd, worker.exit_code or 0, worker.decode())

	def read_file(self, path: Path) -> str:
		if os.access(path, os.R_OK):
			return path.read_text()

		return self.query(['cat', str(path)], privileged=True).output

	def write_file(self, path: Path, content: str, append: bool = False, privileged: bool = True) -> None:
		if self.dry_run:
			info(f'[dry-run] {"append to" if append else "write"} {path}')
			return

		if not privileged or self.is_root:
			path.parent.mkdir(parents=True, exist_ok=True)
			with path.open('a' if append else 'w') as fp:
				fp.write(content)
			return

		cmd = ['tee', '-a', str(path)] if append else ['tee', str(path)]
		self.run(cmd, privileged=True, input_data=content.encode(), capture=True, check=True)

	def backup(self, path: Path) -> Path | None:
		"""
		Copies a file to ``<name>.bak.<timestamp>`` before it is edited in place.
		"""
		if not path.exists():
			return None

		stamp = datetime.now().strftime('%Y%m%d%H%M%S')
		destination = path.with_name(f'{path.name}.bak.{stamp}')

		info(f'Backing up {path} to {destination}')
		self.run(['cp', '-a', str(path), str(destination)], privileged=True, check=True)
		return destination
