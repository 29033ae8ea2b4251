import json
from pathlib import Path

import pytest

from archgaming.lib.args import ArgsHandler, Arguments
from archgaming.lib.hardware import GfxDriver
from archgaming.lib.models.config import AurHelper, DesktopChoice, GamingComponent, InstallConfig, RunMode
from archgaming.lib.output import logger


def test_default_args() -> None:
	handler = ArgsHandler([])

	assert handler.args == Arguments(
		mode=None,
		config=None,
		ui='auto',
		dry_run=False,
		debug=False,
		mountpoint=Path('/mnt'),
	)
	assert handler.config.run_mode is None
	assert handler.config.desktop == DesktopChoice.Skip
	assert handler.config.components == GamingComponent.defaults()


def test_correct_parsing_args(config_fixture: Path) -> None:
	handler = ArgsHandler(
		[
			'--mode',
			'fullinstall',
			'--config',
			str(config_fixture),
			'--ui',
			'text',
			'--dry-run',
			'--mountpoint',
			'/tmp/target',
		]
	)

	assert handler.args == Arguments(
		mode='fullinstall',
		config=config_fixture,
		ui='text',
		dry_run=True,
		debug=False,
		mountpoint=Path('/tmp/target'),
	)
	assert handler.config.run_mode == RunMode.FullInstall
	assert handler.config.mountpoint == Path('/tmp/target')


def test_config_file_parsing(config_fixture: Path) -> None:
	config = ArgsHandler(['--config', str(config_fixture)]).config

	assert config.hostname == 'battlestation'
	assert config.username == 'player1'
	assert config.timezone == 'Europe/Berlin'
	assert config.desktop == DesktopChoice.Plasma
	assert config.components == {GamingComponent.Steam, GamingComponent.Gamemode, GamingComponent.MangoHud}
	assert config.aur_helper == AurHelper.Yay
	assert config.aur_enabled is True
	assert config.mirror_countries == ['Germany', 'France']
	assert config.privileged_run_mode == RunMode.PostInstall
	assert config.swap_size_gib == 8


def test_invalid_mode() -> None:
	with pytest.raises(SystemExit) as err:
		ArgsHandler(['--mode', 'install-everything'])

	assert err.value.code == 1
	assert 'Invalid --mode value: install-everything' in logger.path.read_text()


def test_unknown_argument_is_warned() -> None:
	handler = ArgsHandler(['--turbo'])

	assert handler.args.mode is None
	assert 'Unknown argument: --turbo' in logger.path.read_text()


def test_help_exits_cleanly(capsys: pytest.CaptureFixture[str]) -> None:
	with pytest.raises(SystemExit) as err:
		ArgsHandler(['-h'])

	assert err.value.code == 0
	assert '--mode' in capsys.readouterr().out


def test_missing_config_file(tmp_path: Path) -> None:
	with pytest.raises(SystemExit) as err:
		ArgsHandler(['--config', str(tmp_path / 'nope.json')])

	assert err.value.code == 1


def test_invalid_json(tmp_path: Path) -> None:
	config = tmp_path / 'broken.json'
	config.write_text('{"hostname": ')

	with pytest.raises(SystemExit) as err:
		ArgsHandler(['--config', str(config)])

	assert err.value.code == 1


def test_unknown_config_value(tmp_path: Path) -> None:
	config = tmp_path / 'config.json'
	config.write_text(json.dumps({'desktop': 'enlightenment'}))

	with pytest.raises(SystemExit) as err:
		ArgsHandler(['--config', str(config)])

	assert err.value.code == 1


def test_debug_enables_verbose_output() -> None:
	ArgsHandler(['--debug'])

	assert logger.verbose is True


def test_null_values_are_ignored(tmp_path: Path) -> None:
	config = tmp_path / 'config.json'
	config.write_text(json.dumps({'hostname': None, 'username': 'rig', 'disk': None}))

	parsed = ArgsHandler(['--config', str(config)]).config

	assert parsed.hostname == 'arch-box'
	assert parsed.username == 'rig'
	assert parsed.disk is None


def test_config_from_dict() -> None:
	config = InstallConfig.from_config({'gfx_driver': GfxDriver.AmdOpenSource.value, 'gaming_components': [], 'swapfile': '/swap/file'})

	assert config.gfx_driver == GfxDriver.AmdOpenSource
	assert config.components == set()
	assert config.swapfile == Path('/swap/file')
	assert config.aur_enabled is False
