import re
from pathlib import Path
from types import TracebackType

import archgaming

from .bootloader import install_grub
from .exceptions import RequirementError, ServiceException, SysCallError
from .models.device import BootMode
from .output import debug, error, info, logger, warn
from .pacman import Pacman
from .runner import CommandRunner, ExitStatus, pacman_flags
from .system_conf import enable_wheel_sudo

# Any package the Installer() puts into a fresh system
__packages__ = ['base', 'linux', 'linux-firmware', 'networkmanager', 'sudo', 'grub']

# Needed inside the target to run the post-install sequence there
__runtime_packages__ = ['python', 'python-pydantic', 'python-textual']

USER_GROUPS = ['wheel', 'audio', 'video', 'storage']

STAGING_DIR = '/opt/archgaming'


class Installer:
	def __init__(self, runner: CommandRunner, target: Path, base_packages: list[str] | None = None):
		"""
		`Installer()` wraps the steps that bootstrap and configure
		the system mounted on `target`, most of them through arch-chroot.
		"""
		self.runner = runner
		self.target = target
		self._base_packages = list(base_packages or __packages__)
		self.pacman = Pacman(runner, chrooted=True)

	def __enter__(self) -> 'Installer':
		return self

	def __exit__(self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None) -> bool | None:
		if exc_type is not None:
			error(str(exc_value))
			warn(f'A log file has been created here: {logger.path}')

		# Return None to propagate the exception
		return None

	def arch_chroot(self, cmd: list[str], run_as: str | None = None, input_data: bytes | None = None, check: bool = True) -> ExitStatus:
		return self.runner.run(cmd, chrooted=True, run_as=run_as, input_data=input_data, capture=input_data is not None, check=check)

	def pacstrap(self, packages: list[str] | None = None) -> None:
		packages = list(dict.fromkeys(self._base_packages + (packages or [])))
		info(f'Installing packages: {packages}')

		try:
			self.runner.run(['pacstrap', '-K', str(self.target), *packages], privileged=True, check=True)
		except SysCallError as err:
			raise RequirementError(f'Pacstrap failed. See {logger.path} or above message for error details: {err}')

	def genfstab(self, flags: str = '-U') -> None:
		fstab_path = self.target / 'etc' / 'fstab'
		info(f'Updating {fstab_path}')

		try:
			status = self.runner.run(['genfstab', flags, str(self.target)], privileged=True, capture=True, check=True)
		except SysCallError as err:
			raise RequirementError(f'Could not generate fstab, strapping in packages most likely failed (disk out of space?)\n Error: {err}')

		self.runner.write_file(fstab_path, status.output.rstrip('\n') + '\n', append=True)

	def add_additional_packages(self, packages: str | list[str]) -> None:
		self.pacman.install(packages)

	def set_timezone(self, zone: str) -> bool:
		if not (self.target / 'usr/share/zoneinfo' / zone).exists():
			warn(f'Time zone {zone} does not exist, continuing with UTC')
			zone = 'UTC'

		self.arch_chroot(['ln', '-sf', f'/usr/share/zoneinfo/{zone}', '/etc/localtime'])
		self.arch_chroot(['hwclock', '--systohc'], check=False)
		return zone != 'UTC'

	def set_locale(self, locale: str) -> None:
		lang, _, encoding = locale.partition('.')
		encoding = encoding or 'UTF-8'

		locale_gen = self.target / 'etc/locale.gen'
		locale_gen_lines = self.runner.read_file(locale_gen).splitlines(True) if locale_gen.exists() else []

		# A locale entry in /etc/locale.gen may or may not contain the encoding
		# in the first column of the entry; check for both cases.
		entry_re = re.compile(rf'#\s*{re.escape(lang)}(\.{re.escape(encoding)})? {re.escape(encoding)}')

		lang_value = None
		for index, line in enumerate(locale_gen_lines):
			if entry_re.match(line):
				uncommented_line = re.sub(r'^#\s*', '', line)
				locale_gen_lines[index] = uncommented_line
				lang_value = uncommented_line.split()[0]
				break

		if lang_value is None:
			debug(f'No commented entry for {locale} in {locale_gen}, appending one')
			lang_value = locale
			locale_gen_lines.append(f'{locale} {encoding}\n')

		self.runner.write_file(locale_gen, ''.join(locale_gen_lines))
		self.arch_chroot(['locale-gen'])
		self.runner.write_file(self.target / 'etc/locale.conf', f'LANG={lang_value}\n')

	def set_keymap(self, keymap: str) -> None:
		self.runner.write_file(self.target / 'etc/vconsole.conf', f'KEYMAP={keymap}\n')

	def set_hostname(self, hostname: str) -> None:
		self.runner.write_file(self.target / 'etc/hostname', hostname + '\n')
		self.runner.write_file(
			self.target / 'etc/hosts',
			'127.0.0.1   localhost\n'
			'::1         localhost\n'
			f'127.0.1.1   {hostname}.localdomain {hostname}\n',
		)

	def set_password(self, username: str, password: str) -> None:
		info(f'Setting password for {username}')
		input_data = f'{username}:{password}'.encode()
		self.arch_chroot(['chpasswd'], input_data=input_data)

	def create_user(self, username: str, groups: list[str] = USER_GROUPS) -> None:
		if self.arch_chroot(['id', '-u', username], check=False).ok:
			info(f'User {username} already exists')
			return

		info(f'Creating user {username}')
		self.arch_chroot(['useradd', '-m', '-G', ','.join(groups), username])

	def enable_sudo(self) -> None:
		enable_wheel_sudo(self.runner, self.target / 'etc/sudoers')

	def enable_service(self, services: str | list[str]) -> None:
		if isinstance(services, str):
			services = [services]

		for service in services:
			info(f'Enabling service {service}')

			try:
				self.arch_chroot(['systemctl', 'enable', service])
			except SysCallError as err:
				raise ServiceException(f'Unable to enable service {service}: {err}')

	def add_bootloader(self, boot_mode: BootMode, disk: str) -> None:
		install_grub(self.runner, boot_mode, disk=disk, chrooted=True)

	def stage_self(self) -> Path:
		"""
		Copies this tool into the target so it can run there after the chroot bootstrap.
		"""
		self.add_additional_packages(__runtime_packages__)

		source = Path(archgaming.__file__).parent
		destination = self.target / STAGING_DIR.lstrip('/')

		self.runner.run(['mkdir', '-p', str(destination)], privileged=True, check=True)
		self.runner.run(['cp', '-a', str(source), str(destination)], privileged=True, check=True)
		return destination

	def run_postinstall(self, username: str) -> ExitStatus:
		info(f'Continuing with the post-install steps inside the new system as {username}')
		cmd = ['env', f'PYTHONPATH={STAGING_DIR}', 'python', '-m', 'archgaming', '--mode', 'postinstall']

		if pacman_flags() != ['--needed', '--noconfirm']:
			cmd.insert(1, f'PACMAN_FLAGS={" ".join(pacman_flags())}')

		return self.arch_chroot(cmd, run_as=username, check=False)
