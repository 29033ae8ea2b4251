from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

# Device names of these kinds put a 'p' between the disk and the partition number
_PARTITION_SEPARATOR_DEVICES = re.compile(r'(nvme|mmcblk|loop)')


class BootMode(Enum):
	Uefi = 'uefi'
	Bios = 'bios'

	def display_name(self) -> str:
		match self:
			case BootMode.Uefi:
				return 'UEFI'
			case BootMode.Bios:
				return 'BIOS (legacy)'


def partition_path(disk: str, number: int) -> str:
	"""
	>>> partition_path('/dev/nvme0n1', 1)
	'/dev/nvme0n1p1'
	>>> partition_path('/dev/sda', 2)
	'/dev/sda2'
	"""
	if _PARTITION_SEPARATOR_DEVICES.search(Path(disk).name):
		return f'{disk}p{number}'
	return f'{disk}{number}'


@dataclass(frozen=True)
class PartitionLayout:
	disk: str
	boot_mode: BootMode
	root: str
	efi: str = ''
	bios_boot: str = ''

	@classmethod
	def for_disk(cls, disk: str, boot_mode: BootMode) -> PartitionLayout:
		first = partition_path(disk, 1)
		root = partition_path(disk, 2)

		match boot_mode:
			case BootMode.Uefi:
				return cls(disk, boot_mode, root=root, efi=first)
			case BootMode.Bios:
				return cls(disk, boot_mode, root=root, bios_boot=first)

	def table_data(self) -> dict[str, str]:
		return {
			'disk': self.disk,
			'boot mode': self.boot_mode.display_name(),
			'efi': self.efi or '-',
			'bios boot': self.bios_boot or '-',
			'root': self.root,
		}


class LsblkInfo(BaseModel):
	name: str
	path: str
	type: str
	size: int = 0
	model: str | None = None
	tran: str | None = None

	@classmethod
	def fields(cls) -> list[str]:
		return list(cls.model_fields.keys())

	def display_size(self) -> str:
		return f'{self.size / 1024**3:.1f} GiB'

	def display_name(self) -> str:
		parts = [self.path, self.display_size()]
		if self.model:
			parts.append(self.model.strip())
		if self.tran:
			parts.append(f'({self.tran})')
		return '  '.join(parts)


class LsblkOutput(BaseModel):
	blockdevices: list[LsblkInfo]
