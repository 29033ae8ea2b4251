from .exceptions import RequirementError
from .models.device import BootMode
from .output import info, warn
from .runner import CommandRunner

GRUB_CONFIG = '/boot/grub/grub.cfg'


def install_grub(
	runner: CommandRunner,
	boot_mode: BootMode,
	disk: str | None = None,
	chrooted: bool = False,
	efi_directory: str = '/boot',
) -> None:
	match boot_mode:
		case BootMode.Uefi:
			info(f'Installing GRUB for UEFI into {efi_directory}')
			cmd = [
				'grub-install',
				'--target=x86_64-efi',
				f'--efi-directory={efi_directory}',
				'--bootloader-id=ArchLinux',
				'--recheck',
			]
		case BootMode.Bios:
			if not disk:
				raise RequirementError('A target disk is required to install GRUB in BIOS mode')

			info(f'Installing GRUB for BIOS onto {disk}')
			cmd = ['grub-install', '--target=i386-pc', disk]

	runner.run(cmd, privileged=True, chrooted=chrooted, check=True)
	make_grub_config(runner, chrooted=chrooted)


def make_grub_config(runner: CommandRunner, chrooted: bool = False) -> bool:
	"""
	Regenerates grub.cfg so new kernels show up in the boot menu.
	Returns False when GRUB is not in use on the running system.
	"""
	if not chrooted and not runner.has_binary('grub-mkconfig'):
		warn('grub-mkconfig not found, regenerate your boot loader configuration manually')
		return False

	info(f'Generating {GRUB_CONFIG}')
	runner.run(['grub-mkconfig', '-o', GRUB_CONFIG], privileged=True, chrooted=chrooted, check=True)
	return True
