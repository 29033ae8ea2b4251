import signal
from pathlib import Path
from types import FrameType, TracebackType
from typing import Any

from pydantic import ValidationError

from .exceptions import DiskError, SysCallError
from .models.device import BootMode, LsblkInfo, LsblkOutput, PartitionLayout
from .output import debug, info, warn
from .runner import CommandRunner

_CLEANUP_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def list_disks(runner: CommandRunner) -> list[LsblkInfo]:
	cmd = ['lsblk', '--json', '--bytes', '--paths', '--nodeps', '--output', ','.join(LsblkInfo.fields())]
	status = runner.query(cmd)

	if not status.ok:
		debug(f'Error calling lsblk: {status.output}')
		raise DiskError('Failed to list block devices with lsblk')

	try:
		output = LsblkOutput.model_validate_json(status.output)
	except ValidationError as err:
		raise DiskError(f'Could not parse lsblk output: {err}')

	return [dev for dev in output.blockdevices if dev.type == 'disk']


def _sgdisk(runner: CommandRunner, disk: str, *args: str) -> None:
	try:
		runner.run(['sgdisk', *args, disk], privileged=True, check=True)
	except SysCallError as err:
		raise DiskError(f'Could not partition {disk}: {err}')


def partition_disk(runner: CommandRunner, layout: PartitionLayout) -> None:
	disk = layout.disk
	info(f'Creating a new GPT partition table on {disk}')

	_sgdisk(runner, disk, '--zap-all')

	match layout.boot_mode:
		case BootMode.Uefi:
			_sgdisk(runner, disk, '-n1:0:+512M', '-t1:ef00', '-c1:EFI System')
		case BootMode.Bios:
			_sgdisk(runner, disk, '-a1', '-n1:34:2047', '-t1:ef02', '-c1:BIOS Boot')

	_sgdisk(runner, disk, '-n2:0:0', '-t2:8300', '-c2:Linux Root')

	try:
		runner.run(['partprobe', disk], privileged=True, check=True)
	except SysCallError as err:
		raise DiskError(f'The kernel did not pick up the new partition table on {disk}: {err}')


def format_partitions(runner: CommandRunner, layout: PartitionLayout) -> None:
	try:
		if layout.efi:
			info(f'Formatting {layout.efi} as FAT32')
			runner.run(['mkfs.fat', '-F32', layout.efi], privileged=True, check=True)

		info(f'Formatting {layout.root} as ext4')
		runner.run(['mkfs.ext4', '-F', layout.root], privileged=True, check=True)
	except SysCallError as err:
		raise DiskError(f'Could not format partitions: {err}')


def mount_partitions(runner: CommandRunner, layout: PartitionLayout, target: Path) -> None:
	try:
		info(f'Mounting {layout.root} on {target}')
		runner.run(['mount', layout.root, str(target)], privileged=True, check=True)

		if layout.efi:
			boot = target / 'boot'
			runner.run(['mkdir', '-p', str(boot)], privileged=True, check=True)
			info(f'Mounting {layout.efi} on {boot}')
			runner.run(['mount', layout.efi, str(boot)], privileged=True, check=True)
	except SysCallError as err:
		raise DiskError(f'Could not mount the target filesystems: {err}')


class MountGuard:
	"""
	Unmounts ``<target>/boot`` and ``<target>`` when the block is left,
	however it is left. SIGTERM and SIGHUP are turned into SystemExit
	while the guard is active so they unwind through it as well.
	"""

	def __init__(self, runner: CommandRunner, target: Path):
		self._runner = runner
		self._target = target
		self._previous_handlers: dict[int, Any] = {}
		self._released = False

	def __enter__(self) -> 'MountGuard':
		for signum in _CLEANUP_SIGNALS:
			self._previous_handlers[signum] = signal.signal(signum, self._on_signal)
		return self

	def __exit__(
		self,
		exc_type: type[BaseException] | None,
		exc_value: BaseException | None,
		traceback: TracebackType | None,
	) -> None:
		try:
			self.release()
		finally:
			for signum, handler in self._previous_handlers.items():
				signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
			self._previous_handlers.clear()

	def _on_signal(self, signum: int, frame: FrameType | None) -> None:
		warn(f'Received signal {signal.Signals(signum).name}, cleaning up mounts')
		raise SystemExit(128 + signum)

	def release(self) -> None:
		if self._released:
			return

		for mountpoint in (self._target / 'boot', self._target):
			if self._runner.succeeds(['mountpoint', '-q', str(mountpoint)]):
				info(f'Unmounting {mountpoint}')
				status = self._runner.run(['umount', str(mountpoint)], privileged=True)

				if not status.ok:
					warn(f'Could not unmount {mountpoint} (exit code {status.exit_code})')

		self._released = True
