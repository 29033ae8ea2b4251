from pathlib import Path
from typing import TYPE_CHECKING

from archgaming.lib.exceptions import PackageError
from archgaming.lib.hardware import GfxDriver
from archgaming.lib.models.facts import CpuVendor
from archgaming.lib.output import debug, info, warn

if TYPE_CHECKING:
	from archgaming.lib.pacman import Pacman
	from archgaming.lib.runner import CommandRunner

NOUVEAU_BLACKLIST = Path('/etc/modprobe.d/blacklist-nouveau.conf')


class GraphicsApp:
	def __init__(self, runner: 'CommandRunner', pacman: 'Pacman'):
		self._runner = runner
		self._pacman = pacman

	def install(self, driver: GfxDriver | None, cpu_vendor: CpuVendor, multilib: bool) -> None:
		if driver is None:
			debug('No graphics driver selected, skipping installation.')
			return

		packages = driver.packages(multilib=multilib)

		if microcode := cpu_vendor.microcode_package():
			packages.insert(0, microcode)

		info(f'Installing graphics driver: {driver.value}')
		self._pacman.install(packages)

		if driver.is_nvidia():
			self._configure_nvidia(multilib)

	def _configure_nvidia(self, multilib: bool) -> None:
		if multilib and self._pacman.exists('lib32-opencl-nvidia'):
			info('Installing optional 32-bit OpenCL runtime')
			try:
				self._pacman.install('lib32-opencl-nvidia')
			except PackageError as err:
				warn(str(err))

		info('Blacklisting nouveau to avoid driver conflicts')
		self._runner.write_file(
			NOUVEAU_BLACKLIST,
			'blacklist nouveau\noptions nouveau modeset=0\n',
		)

		info('Enabling nvidia-persistenced service')
		if not self._runner.run(['systemctl', 'enable', 'nvidia-persistenced.service'], privileged=True).ok:
			warn('Unable to enable nvidia-persistenced')

		if self._runner.has_binary('mkinitcpio'):
			info('Regenerating initramfs for installed kernels')
			if not self._runner.run(['mkinitcpio', '-P'], privileged=True).ok:
				warn('mkinitcpio -P exited with an error')
