from archgaming.lib.context import InstallContext
from archgaming.lib.disk import MountGuard, format_partitions, list_disks, mount_partitions, partition_disk
from archgaming.lib.exceptions import DiskError, DiskWipeDeclined, PrivilegeError, RequirementError, StepError
from archgaming.lib.installer import Installer
from archgaming.lib.interactions.general_conf import (
	ask_boot_mode,
	ask_disk,
	ask_for_a_timezone,
	ask_hostname,
	ask_keymap,
	ask_locale,
	ask_mirror_countries,
	ask_password,
	ask_username,
	confirm_disk_wipe,
)
from archgaming.lib.mirrors import optimize_mirrors, parse_countries
from archgaming.lib.models.device import BootMode
from archgaming.lib.output import FormattedOutput, info, warn
from archgaming.lib.sequencer import FailurePolicy, Sequencer, SequencerState, Step

REQUIRED_BINARIES = ['lsblk', 'sgdisk', 'mkfs.ext4', 'mkfs.fat', 'pacstrap', 'genfstab', 'arch-chroot', 'partprobe']
LIVE_ISO_DEPENDENCIES = ['reflector', 'git']


class FullInstall:
	"""
	Installs Arch Linux from the live ISO onto a wiped disk:
	one EFI (or BIOS boot) partition and one ext4 root partition,
	then configures and optionally continues with the gaming setup.
	"""

	def __init__(self, ctx: InstallContext):
		self._ctx = ctx
		self._config = ctx.config
		self._prompter = ctx.prompter
		self._runner = ctx.runner

		self._installation = Installer(self._runner, self._config.mountpoint)
		self._mount_guard: MountGuard | None = None
		self._wipe_confirmed = False
		self._root_password = ''
		self._user_password = ''

		self.sequencer = Sequencer('Full install', self._steps())

	def _steps(self) -> list[Step]:
		return [
			Step('Check prerequisites', self.check_prerequisites),
			Step('Install live ISO dependencies', self.install_live_dependencies, FailurePolicy.Warn),
			Step('System identity', self.ask_identity),
			Step('Boot mode', self.select_boot_mode),
			Step('Target disk', self.select_disk),
			Step('Partition layout', self.set_partition_paths),
			Step('Optimize mirrors', self.optimize_mirrors, FailurePolicy.Warn),
			Step('Partition disk', self.partition),
			Step('Format partitions', self.format),
			Step('Mount partitions', self.mount),
			Step('Install base system', self.bootstrap),
			Step('Firmware updater', self.install_fwupd, FailurePolicy.Warn, precondition=self._is_uefi),
			Step('Configure system', self.configure_system),
			Step('Install bootloader', self.install_bootloader),
			Step('Continue with gaming setup', self.continue_postinstall, FailurePolicy.Warn),
			Step('Unmount', self.unmount, FailurePolicy.Warn),
		]

	def _is_uefi(self) -> bool:
		return self._config.boot_mode == BootMode.Uefi

	def check_prerequisites(self) -> None:
		if not self._runner.is_root:
			raise PrivilegeError('Full install mode has to run as root from the Arch Linux live ISO')

		missing = [binary for binary in REQUIRED_BINARIES if not self._runner.has_binary(binary)]
		if missing:
			raise RequirementError(f'Missing required commands: {", ".join(missing)}')

	def install_live_dependencies(self) -> None:
		missing = [binary for binary in LIVE_ISO_DEPENDENCIES if not self._runner.has_binary(binary)]

		if missing:
			self._ctx.pacman.install(missing)

	def ask_identity(self) -> None:
		config = self._config

		config.hostname = ask_hostname(self._prompter, config.hostname)
		config.timezone = ask_for_a_timezone(self._prompter, config.timezone or self._ctx.facts.timezone)
		config.locale = ask_locale(self._prompter, config.locale)
		config.keymap = ask_keymap(self._prompter, config.keymap)
		config.username = ask_username(self._prompter, config.username)

		self._root_password = ask_password(self._prompter, 'root')
		self._user_password = ask_password(self._prompter, config.username)

	def select_boot_mode(self) -> None:
		detected = self._ctx.facts.boot_mode
		mode = ask_boot_mode(self._prompter, 'Select boot mode for the new installation', self._config.boot_mode or detected)
		self._config.boot_mode = mode

		if mode != detected:
			match mode:
				case BootMode.Bios:
					warn('Legacy BIOS install selected while firmware is in UEFI mode, ensure this is intentional')
				case BootMode.Uefi:
					warn('UEFI install selected but the system booted in BIOS mode, the installation will only boot via UEFI')

	def select_disk(self) -> None:
		disks = list_disks(self._runner)
		if not disks:
			raise DiskError('No disks detected')

		disk = ask_disk(self._prompter, 'Select the disk to install Arch Linux on', disks, self._config.disk)
		self._config.disk = disk

		confirm_disk_wipe(self._prompter, disk)
		self._wipe_confirmed = True

	def set_partition_paths(self) -> None:
		layout = self._config.set_partition_paths()
		info(FormattedOutput.as_table([layout]))

	def optimize_mirrors(self) -> None:
		if not self._prompter.ask_yes_no('Optimize pacman mirrors for speed using reflector?', default=True):
			return

		countries = parse_countries(ask_mirror_countries(self._prompter, self._config.mirror_countries))
		self._config.mirror_countries = countries
		optimize_mirrors(self._runner, self._ctx.pacman, countries)

	def partition(self) -> None:
		if not self._wipe_confirmed:
			raise DiskWipeDeclined('The target disk was not confirmed for wiping, refusing to partition it')

		self._mount_guard = self.sequencer.defer(MountGuard(self._runner, self._config.mountpoint))
		partition_disk(self._runner, self._config.partitions)

	def format(self) -> None:
		format_partitions(self._runner, self._config.partitions)

	def mount(self) -> None:
		mount_partitions(self._runner, self._config.partitions, self._config.mountpoint)

	def bootstrap(self) -> None:
		packages = []

		if microcode := self._ctx.facts.cpu_vendor.microcode_package():
			packages.append(microcode)

		if self._is_uefi():
			packages.append('efibootmgr')

		self._installation.pacstrap(packages)
		self._installation.genfstab()

	def install_fwupd(self) -> None:
		if self._prompter.ask_yes_no('Install fwupd (firmware updates) in the new system?', default=False):
			self._installation.add_additional_packages('fwupd')

	def configure_system(self) -> None:
		config = self._config
		installation = self._installation

		installation.set_timezone(config.timezone or 'UTC')
		installation.set_locale(config.locale)
		installation.set_keymap(config.keymap)
		installation.set_hostname(config.hostname)
		installation.set_password('root', self._root_password)
		installation.create_user(config.username)
		installation.set_password(config.username, self._user_password)
		installation.enable_sudo()
		installation.enable_service('NetworkManager.service')

	def install_bootloader(self) -> None:
		if self._config.boot_mode is None or self._config.disk is None:
			raise StepError('Boot mode and disk have to be selected before installing a bootloader')

		self._installation.add_bootloader(self._config.boot_mode, self._config.disk)

	def continue_postinstall(self) -> None:
		if not self._prompter.ask_yes_no('Continue with the gaming setup inside the new system now?', default=True):
			info('You can run "archgaming --mode postinstall" after the first boot')
			return

		self._installation.stage_self()
		status = self._installation.run_postinstall(self._config.username)

		if not status.ok:
			raise StepError(f'The gaming setup inside the new system exited with code {status.exit_code}')

	def unmount(self) -> None:
		if self._mount_guard is not None:
			self._mount_guard.release()

	def run(self) -> int:
		with self._installation:
			state = self.sequencer.run()

		info(self.sequencer.summary())

		if state == SequencerState.Completed:
			info(f'Installation complete. Remove the installation medium and reboot into {self._config.hostname}.')

		return self.sequencer.exit_code


def run(ctx: InstallContext) -> int:
	return FullInstall(ctx).run()
