from pathlib import Path

from archgaming.applications.flatpak import FlatpakApp
from archgaming.applications.gaming import GamingApp
from archgaming.applications.graphics import GraphicsApp
from archgaming.default_profiles import profile_for
from archgaming.lib import aur
from archgaming.lib.bootloader import install_grub, make_grub_config
from archgaming.lib.context import InstallContext
from archgaming.lib.disk import list_disks
from archgaming.lib.exceptions import DiskError, RequirementError, StepError, UserAbort
from archgaming.lib.hardware import GfxDriver
from archgaming.lib.interactions.general_conf import (
	ask_aur_helper,
	ask_aur_kernel,
	ask_boot_mode,
	ask_desktop,
	ask_disk,
	ask_existing_user,
	ask_gaming_components,
	ask_gfx_driver,
	ask_mirror_countries,
	ask_swap_size,
)
from archgaming.lib.mirrors import optimize_mirrors, parse_countries
from archgaming.lib.models.config import GamingComponent
from archgaming.lib.models.device import BootMode
from archgaming.lib.output import FormattedOutput, info, warn
from archgaming.lib.pacman import PacmanConfig
from archgaming.lib.sequencer import FailurePolicy, Sequencer, SequencerState, Step
from archgaming.lib.system_conf import add_user_to_wheel, create_swapfile, enable_wheel_sudo, regular_users
from archgaming.lib.validation import LiveSystem, render_report, validate

UEFI_TOOLING = ['grub', 'efibootmgr', 'fwupd']

OVERVIEW = """\
==============================================
 Arch Linux Gaming Setup
 This will apply the following:
  * Update system packages
    * (Optional) optimize pacman mirrors via reflector
  * (Optional) enable multilib + install linux-zen
  * Install GPU drivers and tools
  * (Optional) install a desktop environment + display manager
  * Install the gaming stack (Steam, Lutris, Wine, etc.)
  * (Optional) configure Flatpak + Flathub
  * (Optional) enable an AUR helper + install Heroic/ProtonUp
=============================================="""

NEXT_STEPS = """\
Setup complete! Recommended next steps:
  * Reboot to use the new kernel/microcode if installed.
  * Launch Steam and enable Proton Experimental under Settings > Steam Play.
  * Run ProtonUp-Qt to install the latest GE-Proton builds.
  * Use MangoHud (F12) and GOverlay to fine-tune overlays.
  * Customize your chosen desktop environment (themes, extensions, panels, etc.).
  * Use your AUR helper to grab any extra community packages you rely on."""


class PostInstall:
	"""
	Turns an installed Arch Linux system into a gaming desktop.
	Apart from the prerequisites and the system update every step
	is optional and a failing step is reported without stopping the run.
	"""

	def __init__(self, ctx: InstallContext, pacman_conf: Path = Path('/etc/pacman.conf'), home: Path | None = None):
		self._ctx = ctx
		self._config = ctx.config
		self._facts = ctx.facts
		self._prompter = ctx.prompter
		self._runner = ctx.runner
		self._pacman_config = PacmanConfig(self._runner, pacman_conf)
		self._home = home or Path.home()

		self._gaming = GamingApp(self._runner, ctx.pacman)

		self.sequencer = Sequencer('Post install', self._steps())

	def _steps(self) -> list[Step]:
		return [
			Step('Check prerequisites', self.check_prerequisites),
			Step('Overview', self.overview),
			Step('Optimize mirrors', self.optimize_mirrors, FailurePolicy.Warn),
			Step('System update', self.update_system),
			Step('UEFI tooling', self.install_uefi_tooling, FailurePolicy.Warn),
			Step('Bootloader', self.configure_bootloader, FailurePolicy.Warn),
			Step('Multilib repository', self.enable_multilib, FailurePolicy.Warn),
			Step('linux-zen kernel', self.install_linux_zen, FailurePolicy.Warn),
			Step('Graphics drivers', self.install_graphics, FailurePolicy.Warn),
			Step('Desktop environment', self.install_desktop, FailurePolicy.Warn),
			Step('Gaming components', self.install_gaming, FailurePolicy.Warn),
			Step('Gamemode and MangoHud', self.configure_gaming, FailurePolicy.Warn),
			Step('Flatpak', self.setup_flatpak, FailurePolicy.Warn),
			Step('AUR support', self.configure_aur, FailurePolicy.Warn),
			Step('AUR packages', self.install_aur_packages, FailurePolicy.Warn, precondition=lambda: self._config.aur_enabled),
			Step('Swap file', self.configure_swapfile, FailurePolicy.Warn),
			Step('Sudo access', self.grant_sudo, FailurePolicy.Warn),
			Step('Validation', self.report, FailurePolicy.Warn),
		]

	def check_prerequisites(self) -> None:
		required = ['pacman', 'systemctl']
		if not self._runner.is_root:
			required.append('sudo')

		missing = [binary for binary in required if not self._runner.has_binary(binary)]
		if missing:
			raise RequirementError(f'Missing required commands: {", ".join(missing)}')

		self._config.multilib_enabled = self._pacman_config.is_enabled('multilib')

	def overview(self) -> None:
		facts = FormattedOutput.as_table([self._facts])
		self._prompter.show_message(f'{OVERVIEW}\n\n{facts}')

		if not self._prompter.ask_yes_no('Continue?', default=True):
			raise UserAbort('Aborted by user.', exit_code=0)

	def optimize_mirrors(self) -> None:
		if not self._prompter.ask_yes_no('Optimize pacman mirrors for speed using reflector?', default=True):
			return

		countries = parse_countries(ask_mirror_countries(self._prompter, self._config.mirror_countries))
		self._config.mirror_countries = countries
		optimize_mirrors(self._runner, self._ctx.pacman, countries)

	def update_system(self) -> None:
		self._ctx.pacman.upgrade()

	def install_uefi_tooling(self) -> None:
		if not self._prompter.ask_yes_no('Install/verify UEFI tooling (grub, efibootmgr, fwupd)?', default=True):
			return

		missing = [package for package in UEFI_TOOLING if not self._facts.has_package(package)]
		if not missing:
			info('UEFI tooling already installed')
			return

		self._ctx.pacman.install(missing)

	def configure_bootloader(self) -> None:
		if not self._prompter.ask_yes_no('Install or repair a bootloader now?', default=False):
			return

		mode = ask_boot_mode(self._prompter, 'Select bootloader target mode', self._facts.boot_mode)

		match mode:
			case BootMode.Uefi:
				self._install_uefi_bootloader()
			case BootMode.Bios:
				self._install_bios_bootloader()

	def _install_uefi_bootloader(self) -> None:
		if self._facts.boot_mode != BootMode.Uefi:
			warn('System is not currently booted in UEFI mode, skipping GRUB install')
			return

		default_mount = '/boot/efi' if Path('/boot/efi').is_dir() else '/boot'
		efi_mount = self._prompter.ask_text('EFI system partition mount point', default_mount)

		if not Path(efi_mount).is_dir():
			raise StepError(f"EFI mount point '{efi_mount}' not found, create and mount it, then re-run this step")

		if not self._runner.succeeds(['mountpoint', '-q', efi_mount]):
			raise StepError(f'EFI mount point {efi_mount} is not mounted, mount it and re-run this step')

		self._ctx.pacman.install(['grub', 'efibootmgr'])
		install_grub(self._runner, BootMode.Uefi, efi_directory=efi_mount)

	def _install_bios_bootloader(self) -> None:
		if not self._facts.has_package('grub'):
			self._ctx.pacman.install('grub')

		disks = list_disks(self._runner)
		if not disks:
			raise DiskError('No disks detected')

		disk = ask_disk(self._prompter, 'Select disk for BIOS GRUB install', disks, self._config.disk)
		install_grub(self._runner, BootMode.Bios, disk=disk)

	def enable_multilib(self) -> None:
		if not self._prompter.ask_yes_no('Enable multilib repo?', default=True):
			return

		if self._pacman_config.enable('multilib'):
			self._ctx.pacman.synced = False
			self._ctx.pacman.sync()

		self._config.multilib_enabled = True

	def install_linux_zen(self) -> None:
		if not self._prompter.ask_yes_no('Install linux-zen kernel and headers?', default=False):
			return

		self._ctx.pacman.install(['linux-zen', 'linux-zen-headers'])
		make_grub_config(self._runner)

	def install_graphics(self) -> None:
		preset = self._config.gfx_driver or GfxDriver.for_vendor(self._facts.primary_gpu)
		driver = ask_gfx_driver(self._prompter, preset)
		self._config.gfx_driver = driver

		GraphicsApp(self._runner, self._ctx.pacman).install(driver, self._facts.cpu_vendor, self._config.multilib_enabled)

	def install_desktop(self) -> None:
		self._config.desktop = ask_desktop(self._prompter, self._config.desktop)
		profile = profile_for(self._config.desktop)

		if profile is None:
			info('Skipping desktop environment installation')
			return

		profile.install(self._ctx.pacman)
		profile.enable_greeter(self._runner)

	def install_gaming(self) -> None:
		components = ask_gaming_components(self._prompter, self._config.components)
		self._config.components = components

		if not components:
			warn('Skipping gaming package installation per user selection')
			return

		if self._gaming.install(components, self._config.multilib_enabled):
			warn('Re-run the setup after enabling multilib to install the skipped components')

	def configure_gaming(self) -> None:
		components = self._config.components

		if GamingComponent.Gamemode in components:
			if self._runner.is_root:
				warn('User services are not available for root, enable gamemoded.service as your user')
			else:
				self._gaming.enable_gamemode()

		if GamingComponent.MangoHud in components:
			self._gaming.write_mangohud_defaults(self._home)

	def setup_flatpak(self) -> None:
		if self._prompter.ask_yes_no('Install Flatpak and enable Flathub?', default=True):
			FlatpakApp(self._runner, self._ctx.pacman).install()

	def _ensure_aur_helper(self) -> None:
		if helper := aur.installed_helper(self._runner):
			info(f'Using detected AUR helper: {helper.value}')
			self._config.aur_helper = helper
			return

		helper = ask_aur_helper(self._prompter, self._config.aur_helper)
		aur.install_helper(self._runner, self._ctx.pacman, helper)
		self._config.aur_helper = helper

	def configure_aur(self) -> None:
		if self._prompter.ask_yes_no('Enable AUR helper support (install helper + optional packages)?', default=True):
			self._config.aur_enabled = True
			try:
				self._ensure_aur_helper()
			except Exception:
				self._config.aur_enabled = False
				raise
			return

		self._config.aur_enabled = False
		warn('AUR support disabled, skipping community utilities')

		if self._prompter.ask_yes_no('Install an AUR helper anyway for manual use?', default=False):
			self._ensure_aur_helper()

	def install_aur_packages(self) -> None:
		helper = self._config.aur_helper

		packages = []
		if self._prompter.ask_yes_no('Install Heroic Launcher + ProtonUp-Qt from AUR?', default=True):
			packages += list(aur.GAMING_UTILITIES)

		# without multilib the gaming step already reported dxvk as skipped
		if GamingComponent.Dxvk in self._config.components and self._config.multilib_enabled:
			packages += GamingComponent.Dxvk.packages

		aur.install_packages(self._runner, helper, packages)

		if self._prompter.ask_yes_no('Install an additional kernel from AUR?', default=False):
			kernel = ask_aur_kernel(self._prompter, self._config.aur_kernel)
			self._config.aur_kernel = kernel
			aur.install_kernel(self._runner, helper, kernel)

	def configure_swapfile(self) -> None:
		if not self._prompter.ask_yes_no(f'Create a swap file at {self._config.swapfile}?', default=False):
			return

		size = ask_swap_size(self._prompter, self._config.swap_size_gib)
		self._config.swap_size_gib = size
		create_swapfile(self._runner, self._config.swapfile, size)

	def grant_sudo(self) -> None:
		if not self._prompter.ask_yes_no('Grant sudo privileges to an existing user?', default=False):
			return

		if username := ask_existing_user(self._prompter, regular_users()):
			enable_wheel_sudo(self._runner)
			add_user_to_wheel(self._runner, username)

	def report(self) -> None:
		results = validate(self._config, self._facts, LiveSystem(self._runner))
		self._prompter.show_message(render_report(results))

	def run(self) -> int:
		state = self.sequencer.run()

		info(self.sequencer.summary())

		if state == SequencerState.Completed:
			self._prompter.show_message(NEXT_STEPS)

		return self.sequencer.exit_code


def run(ctx: InstallContext) -> int:
	return PostInstall(ctx).run()
