import argparse
import json
from argparse import ArgumentParser
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from pydantic.dataclasses import dataclass as p_dataclass

from .models.config import InstallConfig, RunMode
from .output import debug, error, logger, warn


@p_dataclass
class Arguments:
	mode: str | None = None
	config: Path | None = None
	ui: str = 'auto'
	dry_run: bool = False
	debug: bool = False
	mountpoint: Path = Path('/mnt')


class ArgsHandler:
	def __init__(self, argv: list[str] | None = None) -> None:
		self._parser: ArgumentParser = self._define_arguments()
		args: Arguments = self._parse_args(argv)
		self._args = args

		config = self._parse_config()

		try:
			self._config = InstallConfig.from_config(config)
		except ValueError as err:
			warn(str(err))
			exit(1)

		self._config.mountpoint = args.mountpoint
		if args.mode:
			self._config.run_mode = RunMode(args.mode)

	@property
	def config(self) -> InstallConfig:
		return self._config

	@property
	def args(self) -> Arguments:
		return self._args

	def _get_version(self) -> str:
		try:
			return version('archgaming')
		except PackageNotFoundError:
			return 'archgaming version not found'

	def _define_arguments(self) -> ArgumentParser:
		parser = ArgumentParser(
			prog='archgaming',
			description='Arch Linux gaming setup: install Arch from the live ISO or turn an existing install into a gaming desktop.',
			formatter_class=argparse.ArgumentDefaultsHelpFormatter,
		)
		parser.add_argument(
			'-v',
			'--version',
			action='version',
			default=False,
			version='%(prog)s ' + self._get_version(),
		)
		parser.add_argument(
			'--mode',
			type=str,
			default=None,
			help=f'Force the run mode ({" or ".join(m.value for m in RunMode)}) instead of detecting it',
		)
		parser.add_argument(
			'--config',
			type=Path,
			nargs='?',
			default=None,
			help='JSON config file with answers to use as defaults',
		)
		parser.add_argument(
			'--ui',
			type=str,
			choices=['auto', 'text', 'dialog'],
			default='auto',
			help='Prompt user interface, auto picks the dialog UI on a capable terminal',
		)
		parser.add_argument(
			'--dry-run',
			'--dry_run',
			action='store_true',
			default=False,
			help='Log the commands that would run instead of running them',
		)
		parser.add_argument(
			'--debug',
			action='store_true',
			default=False,
			help='Print debug output as well',
		)
		parser.add_argument(
			'--mountpoint',
			type=Path,
			nargs='?',
			default=Path('/mnt'),
			help='Where the new system is mounted during a full install',
		)

		return parser

	def _parse_args(self, argv: list[str] | None) -> Arguments:
		namespace, unknown = self._parser.parse_known_args(argv)

		for arg in unknown:
			warn(f'Unknown argument: {arg}')

		args: Arguments = Arguments(**vars(namespace))

		if args.mode is not None and args.mode not in [m.value for m in RunMode]:
			error(f'Invalid --mode value: {args.mode}, expected one of {", ".join(m.value for m in RunMode)}')
			exit(1)

		if args.debug:
			logger.verbose = True
			warn(f'--debug mode prints every command as it runs, the full log is at {logger.path}')

		return args

	def _parse_config(self) -> dict[str, Any]:
		config: dict[str, Any] = {}

		if self._args.config is not None:
			config_data = self._read_file(self._args.config)

			try:
				config.update(json.loads(config_data))
			except json.JSONDecodeError as err:
				error(f'{self._args.config} is not valid JSON: {err}')
				exit(1)

			debug(f'Loaded configuration from {self._args.config}')

		return self._cleanup_config(config)

	def _read_file(self, path: Path) -> str:
		if not path.exists():
			error(f'Could not find file {path}')
			exit(1)

		return path.read_text()

	def _cleanup_config(self, config: dict[str, Any]) -> dict[str, Any]:
		clean_args = {}
		for key, val in config.items():
			if isinstance(val, dict):
				val = self._cleanup_config(val)

			if val is not None:
				clean_args[key] = val

		return clean_args
