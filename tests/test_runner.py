from pathlib import Path

import pytest
from pytest import MonkeyPatch

from conftest import RecordingRunner

from archgaming.lib.exceptions import SysCallError
from archgaming.lib.output import logger
from archgaming.lib.runner import CommandRunner, pacman_flags


def test_build_privileged() -> None:
	assert CommandRunner(is_root=False).build(['pacman', '-Syu'], privileged=True) == ['sudo', 'pacman', '-Syu']
	assert CommandRunner(is_root=True).build(['pacman', '-Syu'], privileged=True) == ['pacman', '-Syu']
	assert CommandRunner(is_root=False).build(['flatpak', 'remote-list']) == ['flatpak', 'remote-list']


def test_build_chrooted() -> None:
	runner = CommandRunner(target=Path('/mnt'), is_root=True)

	assert runner.build(['locale-gen'], chrooted=True) == ['arch-chroot', '/mnt', 'locale-gen']
	assert runner.build(['python', '-m', 'archgaming'], chrooted=True, run_as='gamer') == [
		'arch-chroot',
		'/mnt',
		'runuser',
		'-l',
		'gamer',
		'-c',
		'python -m archgaming',
	]


def test_dry_run_executes_nothing(capsys: pytest.CaptureFixture[str]) -> None:
	runner = CommandRunner(dry_run=True, is_root=False)

	status = runner.run(['sgdisk', '--zap-all', '/dev/sda'], privileged=True, check=True)

	assert status.ok
	assert status.argv == ['sudo', 'sgdisk', '--zap-all', '/dev/sda']
	assert '[dry-run] sudo sgdisk --zap-all /dev/sda' in capsys.readouterr().out


def test_dry_run_skips_writes(tmp_path: Path) -> None:
	runner = CommandRunner(dry_run=True, is_root=True)

	runner.write_file(tmp_path / 'hostname', 'rig\n')

	assert not (tmp_path / 'hostname').exists()
	assert f'[dry-run] write {tmp_path / "hostname"}' in logger.path.read_text()


def test_check_raises() -> None:
	runner = RecordingRunner()
	runner.respond(['mkfs.ext4'], exit_code=1, output='device is busy')

	assert not runner.run(['mkfs.ext4', '-F', '/dev/sda2']).ok

	with pytest.raises(SysCallError) as err:
		runner.run(['mkfs.ext4', '-F', '/dev/sda2'], check=True)

	assert err.value.exit_code == 1
	assert err.value.worker_log == b'device is busy'


def test_pacman_flags_override(monkeypatch: MonkeyPatch) -> None:
	assert pacman_flags() == ['--needed', '--noconfirm']

	monkeypatch.setenv('PACMAN_FLAGS', '--noconfirm --overwrite "*"')
	assert pacman_flags() == ['--noconfirm', '--overwrite', '*']


def test_write_file(tmp_path: Path) -> None:
	runner = RecordingRunner(is_root=True)
	fstab = tmp_path / 'etc' / 'fstab'

	runner.write_file(fstab, 'UUID=1 / ext4 rw 0 1\n')
	runner.write_file(fstab, '/swapfile none swap defaults 0 0\n', append=True)

	assert fstab.read_text() == 'UUID=1 / ext4 rw 0 1\n/swapfile none swap defaults 0 0\n'
	assert runner.calls == []


def test_write_file_through_sudo(tmp_path: Path) -> None:
	runner = RecordingRunner(is_root=False)

	runner.write_file(tmp_path / 'sudoers', 'x\n', append=True)

	assert runner.calls == [['sudo', 'tee', '-a', str(tmp_path / 'sudoers')]]
	assert runner.inputs == [b'x\n']
	assert not (tmp_path / 'sudoers').exists()


def test_backup(tmp_path: Path) -> None:
	runner = RecordingRunner()
	conf = tmp_path / 'pacman.conf'

	assert runner.backup(conf) is None
	assert runner.calls == []

	conf.write_text('[options]\n')
	destination = runner.backup(conf)

	assert destination is not None
	assert destination.name.startswith('pacman.conf.bak.')
	assert runner.calls == [['cp', '-a', str(conf), str(destination)]]
