from pathlib import Path

from pytest import MonkeyPatch

from conftest import RecordingRunner

from archgaming.lib.output import logger
from archgaming.lib.pacman import Pacman, PacmanConfig


def test_multilib_detection(pacman_conf: Path, pacman_conf_multilib: Path) -> None:
	runner = RecordingRunner()

	assert PacmanConfig(runner, pacman_conf).is_enabled('multilib') is False
	assert PacmanConfig(runner, pacman_conf_multilib).is_enabled('multilib') is True


def test_enable_multilib_uncomments_section(pacman_conf: Path) -> None:
	runner = RecordingRunner()
	config = PacmanConfig(runner, pacman_conf)

	assert config.enable('multilib') is True

	lines = pacman_conf.read_text().splitlines()
	index = lines.index('[multilib]')
	assert lines[index + 1] == 'Include = /etc/pacman.d/mirrorlist'

	# multilib-testing stays disabled
	assert '#[multilib-testing]' in lines
	assert runner.ran('cp', '-a', str(pacman_conf))


def test_enable_multilib_is_idempotent(pacman_conf: Path) -> None:
	runner = RecordingRunner()
	config = PacmanConfig(runner, pacman_conf)
	config.enable('multilib')

	content = pacman_conf.read_text()
	runner.calls.clear()

	assert config.enable('multilib') is False
	assert pacman_conf.read_text() == content
	assert runner.calls == []
	assert 'Multilib repository already enabled.' in logger.path.read_text()


def test_enable_multilib_appends_missing_section(tmp_path: Path) -> None:
	conf = tmp_path / 'pacman.conf'
	conf.write_text('[options]\nArchitecture = auto\n\n[core]\nInclude = /etc/pacman.d/mirrorlist')

	assert PacmanConfig(RecordingRunner(), conf).enable('multilib') is True

	content = conf.read_text()
	assert content.endswith('[multilib]\nInclude = /etc/pacman.d/mirrorlist\n')
	assert PacmanConfig(RecordingRunner(), conf).is_enabled('multilib')


def test_pacman_install_uses_flags(monkeypatch: MonkeyPatch) -> None:
	runner = RecordingRunner(is_root=False)
	pacman = Pacman(runner)

	pacman.install(['steam', 'lutris', 'steam'])
	assert runner.calls[-1] == ['sudo', 'pacman', '-S', '--needed', '--noconfirm', 'steam', 'lutris']

	monkeypatch.setenv('PACMAN_FLAGS', '--noconfirm')
	pacman.install('wine')
	assert runner.calls[-1] == ['sudo', 'pacman', '-S', '--noconfirm', 'wine']


def test_pacman_chrooted(target: Path) -> None:
	runner = RecordingRunner(target=target)
	Pacman(runner, chrooted=True).install('fwupd')

	assert runner.calls[-1][:3] == ['arch-chroot', str(target), 'pacman']
