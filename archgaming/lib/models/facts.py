from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..output import debug
from .device import BootMode


class CpuVendor(Enum):
	AuthenticAMD = 'amd'
	GenuineIntel = 'intel'
	_Unknown = 'unknown'

	@classmethod
	def get_vendor(cls, name: str) -> CpuVendor:
		if vendor := getattr(cls, name, None):
			return vendor
		else:
			debug(f"Unknown CPU vendor '{name}' detected.")
			return cls._Unknown

	def microcode_package(self) -> str | None:
		match self:
			case CpuVendor.AuthenticAMD | CpuVendor.GenuineIntel:
				return f'{self.value}-ucode'
			case _:
				return None


class GpuVendor(Enum):
	Amd = 'amd'
	Nvidia = 'nvidia'
	Intel = 'intel'
	Unknown = 'unknown'

	@classmethod
	def from_lspci(cls, identifier: str) -> GpuVendor:
		lowered = identifier.lower()

		if 'nvidia' in lowered:
			return cls.Nvidia
		if 'amd' in lowered or 'ati' in lowered.split() or 'radeon' in lowered:
			return cls.Amd
		if 'intel' in lowered:
			return cls.Intel

		return cls.Unknown


@dataclass(frozen=True)
class DetectedFacts:
	"""
	What the prober found out about the host at start-up.
	Anything it could not find out is left at the Unknown/None sentinel.
	"""
	boot_mode: BootMode = BootMode.Bios
	cpu_vendor: CpuVendor = CpuVendor._Unknown
	gpu_vendors: frozenset[GpuVendor] = field(default_factory=frozenset)
	mem_total_kib: int | None = None
	network: bool | None = None
	installed_packages: frozenset[str] = field(default_factory=frozenset)
	timezone: str = 'UTC'
	is_root: bool = False

	@property
	def primary_gpu(self) -> GpuVendor:
		# a discrete card wins over an integrated one
		for vendor in (GpuVendor.Nvidia, GpuVendor.Amd, GpuVendor.Intel):
			if vendor in self.gpu_vendors:
				return vendor
		return GpuVendor.Unknown

	def has_package(self, name: str) -> bool:
		return name in self.installed_packages

	def table_data(self) -> dict[str, str]:
		gpus = ', '.join(sorted(v.value for v in self.gpu_vendors)) or 'unknown'
		mem = f'{self.mem_total_kib // 1024} MiB' if self.mem_total_kib else 'unknown'

		match self.network:
			case True:
				network = 'reachable'
			case False:
				network = 'unreachable'
			case _:
				network = 'unknown'

		return {
			'firmware': self.boot_mode.display_name(),
			'cpu': self.cpu_vendor.value,
			'gpu': gpus,
			'memory': mem,
			'network': network,
			'timezone': self.timezone,
		}
