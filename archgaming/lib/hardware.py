import os
import socket
from collections.abc import Callable
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import TypeVar

from .exceptions import RequirementError, SysCallError
from .general import SysCommand
from .models.device import BootMode
from .models.facts import CpuVendor, DetectedFacts, GpuVendor
from .output import debug, warn

T = TypeVar('T')

_ZONEINFO = Path('/usr/share/zoneinfo')


class GfxDriver(Enum):
	AmdOpenSource = 'AMD / ATI (open-source)'
	NvidiaProprietary = 'Nvidia (proprietary)'
	IntelOpenSource = 'Intel (open-source)'

	@classmethod
	def for_vendor(cls, vendor: GpuVendor) -> 'GfxDriver | None':
		match vendor:
			case GpuVendor.Amd:
				return cls.AmdOpenSource
			case GpuVendor.Nvidia:
				return cls.NvidiaProprietary
			case GpuVendor.Intel:
				return cls.IntelOpenSource
			case _:
				return None

	def is_nvidia(self) -> bool:
		return self == GfxDriver.NvidiaProprietary

	def core_packages(self) -> list[str]:
		"""
		The packages without which the driver stack is considered broken.
		"""
		match self:
			case GfxDriver.AmdOpenSource:
				return ['mesa', 'vulkan-radeon']
			case GfxDriver.NvidiaProprietary:
				return ['nvidia-dkms', 'nvidia-utils']
			case GfxDriver.IntelOpenSource:
				return ['mesa', 'vulkan-intel']

	def packages(self, multilib: bool = True) -> list[str]:
		match self:
			case GfxDriver.AmdOpenSource:
				packages = [
					'mesa',
					'lib32-mesa',
					'libva-mesa-driver',
					'lib32-libva-mesa-driver',
					'vulkan-radeon',
					'lib32-vulkan-radeon',
					'vulkan-mesa-layers',
					'lib32-vulkan-mesa-layers',
					'vulkan-tools',
					'libdrm',
					'lib32-libdrm',
					'xf86-video-amdgpu',
				]
			case GfxDriver.NvidiaProprietary:
				packages = [
					'dkms',
					'linux-headers',
					'nvidia-dkms',
					'nvidia-utils',
					'lib32-nvidia-utils',
					'nvidia-settings',
					'nvidia-prime',
					'opencl-nvidia',
					'egl-wayland',
				]
			case GfxDriver.IntelOpenSource:
				packages = [
					'mesa',
					'lib32-mesa',
					'vulkan-intel',
					'lib32-vulkan-intel',
					'intel-media-driver',
					'vulkan-tools',
				]

		if not multilib:
			packages = [p for p in packages if not p.startswith('lib32-')]

		return packages


class _SysInfo:
	@cached_property
	def cpu_info(self) -> dict[str, str]:
		"""
		Returns system cpu information
		"""
		cpu_info_path = Path('/proc/cpuinfo')
		cpu: dict[str, str] = {}

		with cpu_info_path.open() as file:
			for line in file:
				if (line := line.strip()) and ':' in line:
					key, value = line.split(':', maxsplit=1)
					cpu.setdefault(key.strip(), value.strip())

		return cpu

	@cached_property
	def mem_info(self) -> dict[str, int]:
		"""
		Returns system memory information
		"""
		mem_info_path = Path('/proc/meminfo')
		mem_info: dict[str, int] = {}

		with mem_info_path.open() as file:
			for line in file:
				key, value = line.strip().split(':')
				num = value.split()[0]
				mem_info[key] = int(num)

		return mem_info


_sys_info = _SysInfo()


class SysInfo:
	@staticmethod
	def has_uefi() -> bool:
		return os.path.isdir('/sys/firmware/efi')

	@staticmethod
	def is_root() -> bool:
		return os.geteuid() == 0

	@staticmethod
	def _graphics_devices() -> dict[str, str]:
		cards: dict[str, str] = {}
		for line in SysCommand('lspci'):
			if b' VGA ' in line or b' 3D ' in line:
				_, identifier = line.split(b': ', 1)
				cards[identifier.strip().decode('UTF-8')] = str(line)
		return cards

	@staticmethod
	def gpu_vendors() -> frozenset[GpuVendor]:
		vendors = {GpuVendor.from_lspci(card) for card in SysInfo._graphics_devices()}
		vendors.discard(GpuVendor.Unknown)
		return frozenset(vendors)

	@staticmethod
	def cpu_vendor() -> CpuVendor:
		if vendor := _sys_info.cpu_info.get('vendor_id'):
			return CpuVendor.get_vendor(vendor)
		return CpuVendor._Unknown

	@staticmethod
	def mem_total() -> int:
		return _sys_info.mem_info['MemTotal']

	@staticmethod
	def network_reachable(host: str = 'archlinux.org', port: int = 443, timeout: float = 3.0) -> bool:
		try:
			with socket.create_connection((host, port), timeout=timeout):
				return True
		except OSError as err:
			debug(f'Network probe to {host}:{port} failed: {err}')
			return False

	@staticmethod
	def installed_packages() -> frozenset[str]:
		output = SysCommand(['pacman', '-Qq']).decode()
		return frozenset(line.strip() for line in output.splitlines() if line.strip())

	@staticmethod
	def default_timezone() -> str:
		"""
		Asks timedatectl first, then falls back to the /etc/localtime
		symlink and the Debian style /etc/timezone file.
		"""
		try:
			if zone := SysCommand(['timedatectl', 'show', '-p', 'Timezone', '--value']).decode():
				return zone
		except (SysCallError, RequirementError) as err:
			debug(f'timedatectl could not report the timezone: {err}')

		localtime = Path('/etc/localtime')
		if localtime.is_symlink():
			target = str(localtime.resolve())
			if '/zoneinfo/' in target:
				return target.split('/zoneinfo/', 1)[1]

		timezone_file = Path('/etc/timezone')
		if timezone_file.is_file():
			if zone := timezone_file.read_text().strip():
				return zone

		return 'UTC'


def valid_timezone(zone: str) -> bool:
	if not zone or zone.startswith('/') or '..' in zone:
		return False

	# outside of an Arch system there is no zoneinfo database to check against
	if not _ZONEINFO.is_dir():
		return True

	return (_ZONEINFO / zone).is_file()


def _probe(name: str, func: Callable[[], T], fallback: T) -> T:
	try:
		return func()
	except (OSError, SysCallError, RequirementError, ValueError, KeyError) as err:
		warn(f'Could not detect {name}: {err}')
		return fallback


def detect() -> DetectedFacts:
	"""
	Probes the host once. Every probe is optional, a failing
	probe degrades to its Unknown value and leaves a warning.
	"""
	facts = DetectedFacts(
		boot_mode=BootMode.Uefi if SysInfo.has_uefi() else BootMode.Bios,
		cpu_vendor=_probe('CPU vendor', SysInfo.cpu_vendor, CpuVendor._Unknown),
		gpu_vendors=_probe('graphics devices', SysInfo.gpu_vendors, frozenset()),
		mem_total_kib=_probe('total memory', SysInfo.mem_total, None),
		network=_probe('network reachability', SysInfo.network_reachable, None),
		installed_packages=_probe('installed packages', SysInfo.installed_packages, frozenset()),
		timezone=_probe('timezone', SysInfo.default_timezone, 'UTC'),
		is_root=SysInfo.is_root(),
	)

	debug(f'Detected facts: {facts.table_data()}')
	return facts
