"""Arch Linux gaming setup - full install from the live ISO or post-install on an existing system."""

import importlib
import traceback

from .lib.args import ArgsHandler
from .lib.context import InstallContext
from .lib.hardware import detect
from .lib.interactions import select_prompter
from .lib.models.config import RunMode
from .lib.models.facts import DetectedFacts
from .lib.output import FormattedOutput, debug, error, info, log, logger, warn
from .lib.pacman import Pacman
from .lib.runner import CommandRunner


def _log_sys_info(facts: DetectedFacts) -> None:
	# Log what was detected before changing anything, this might assist in troubleshooting
	debug(f'Detected system:\n{FormattedOutput.as_table([facts])}')


def main(argv: list[str] | None = None) -> int:
	"""
	Parses the command line, probes the host once and hands over to
	the script in scripts/ that matches the run mode.
	"""
	handler = ArgsHandler(argv)
	args = handler.args
	config = handler.config

	facts = detect()
	config.apply_facts(facts)
	_log_sys_info(facts)

	if config.run_mode is not None:
		info(f'Using forced mode: {config.run_mode.value}')

	mode = RunMode.resolve(config.run_mode, facts.is_root, config.privileged_run_mode)
	config.run_mode = mode
	info(f'Run mode: {mode.value}')

	if args.dry_run:
		warn('Dry run, commands are only logged')

	ctx = InstallContext(
		config=config,
		facts=facts,
		prompter=select_prompter(args.ui),
		runner=CommandRunner(target=config.mountpoint, dry_run=args.dry_run, is_root=facts.is_root),
	)

	script = importlib.import_module(f'archgaming.scripts.{mode.value}')
	return script.run(ctx)


def run_as_a_module() -> None:
	rc = 0
	exc = None

	try:
		rc = main()
	except KeyboardInterrupt:
		error('Interrupted by user.')
		rc = 130
	except Exception as e:
		exc = e
	finally:
		if exc:
			err = ''.join(traceback.format_exception(exc))
			error(err)

			warn(f'archgaming experienced the above error, the log file is "{logger.path}".')
			rc = 1

		exit(rc)


__all__ = [
	'FormattedOutput',
	'Pacman',
	'debug',
	'error',
	'info',
	'log',
	'main',
	'run_as_a_module',
	'warn',
]
