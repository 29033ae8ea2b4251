import pytest

from archgaming.lib.exceptions import DiskError
from archgaming.lib.models.config import InstallConfig
from archgaming.lib.models.device import BootMode, LsblkOutput, PartitionLayout, partition_path


@pytest.mark.parametrize(
	'disk, expected',
	[
		('/dev/sda', ('/dev/sda1', '/dev/sda2')),
		('/dev/vdb', ('/dev/vdb1', '/dev/vdb2')),
		('/dev/nvme0n1', ('/dev/nvme0n1p1', '/dev/nvme0n1p2')),
		('/dev/mmcblk0', ('/dev/mmcblk0p1', '/dev/mmcblk0p2')),
		('/dev/loop0', ('/dev/loop0p1', '/dev/loop0p2')),
	],
)
def test_partition_naming(disk: str, expected: tuple[str, str]) -> None:
	assert (partition_path(disk, 1), partition_path(disk, 2)) == expected


@pytest.mark.parametrize('boot_mode', list(BootMode))
def test_exactly_one_boot_partition(boot_mode: BootMode) -> None:
	layout = PartitionLayout.for_disk('/dev/nvme0n1', boot_mode)

	assert layout.root == '/dev/nvme0n1p2'
	assert bool(layout.efi) != bool(layout.bios_boot)

	match boot_mode:
		case BootMode.Uefi:
			assert layout.efi == '/dev/nvme0n1p1'
		case BootMode.Bios:
			assert layout.bios_boot == '/dev/nvme0n1p1'


def test_partitions_require_derivation() -> None:
	config = InstallConfig(disk='/dev/sda', boot_mode=BootMode.Uefi)

	with pytest.raises(DiskError):
		_ = config.partitions

	layout = config.set_partition_paths()
	assert config.partitions == layout
	assert layout.efi == '/dev/sda1'


def test_partitions_invalidated_by_disk_change() -> None:
	config = InstallConfig(disk='/dev/sda', boot_mode=BootMode.Bios)
	config.set_partition_paths()

	config.disk = '/dev/nvme0n1'

	with pytest.raises(DiskError):
		_ = config.partitions

	assert config.set_partition_paths().root == '/dev/nvme0n1p2'


def test_set_partition_paths_without_disk() -> None:
	with pytest.raises(DiskError):
		InstallConfig(boot_mode=BootMode.Uefi).set_partition_paths()


def test_lsblk_output_parsing(lsblk_output: str) -> None:
	output = LsblkOutput.model_validate_json(lsblk_output)
	disks = [dev for dev in output.blockdevices if dev.type == 'disk']

	assert [d.path for d in disks] == ['/dev/sda', '/dev/nvme0n1']
	assert disks[1].display_size() == '931.5 GiB'
	assert 'WD_BLACK SN850X' in disks[1].display_name()
