from __future__ import annotations

import os
import shlex
import stat
import subprocess
import sys
import time
from collections.abc import Iterator
from pathlib import Path
from shutil import which
from typing import override

from .exceptions import RequirementError, SysCallError
from .output import debug, logger


def locate_binary(name: str) -> str:
	if path := which(name):
		return path
	raise RequirementError(f"Binary {name} does not exist.")


class SysCommand:
	"""
	Runs a command to completion and keeps its combined stdout/stderr.
	With ``peek_output`` the command inherits the terminal instead, so prompts
	and dialogs of interactive commands are shown as they are written; nothing
	is kept in that case.
	A non-zero exit code raises :py:class:`SysCallError`.
	"""

	def __init__(
		self,
		cmd: str | list[str],
		peek_output: bool = False,
		environment_vars: dict[str, str] | None = None,
		working_directory: str | Path | None = None,
		input_data: bytes | None = None,
	):
		if isinstance(cmd, str):
			cmd = shlex.split(cmd)

		cmd = list(cmd)
		if cmd and not cmd[0].startswith(('/', './')):
			cmd[0] = locate_binary(cmd[0])

		self.cmd = cmd
		self.peek_output = peek_output
		# define the standard locale for command outputs. For now the C ascii one. Can be overridden
		self.environment_vars = {'LC_ALL': 'C'}
		if environment_vars:
			self.environment_vars.update(environment_vars)

		self.working_directory = working_directory
		self.input_data = input_data

		self.exit_code: int | None = None
		self._trace_log = b''
		self.started: float | None = None
		self.ended: float | None = None

		self.execute()

	def __iter__(self) -> Iterator[bytes]:
		for line in self._trace_log.splitlines():
			if line:
				yield line + b'\n'

	@override
	def __str__(self) -> str:
		return self.decode(strip=False)

	def execute(self) -> None:
		_log_cmd(self.cmd)
		self.started = time.time()

		if self.peek_output:
			# anything we printed ourselves has to be on screen before the child writes
			sys.stdout.flush()
			sys.stderr.flush()

		with subprocess.Popen(
			self.cmd,
			stdin=subprocess.PIPE if self.input_data is not None else None,
			stdout=None if self.peek_output else subprocess.PIPE,
			stderr=None if self.peek_output else subprocess.STDOUT,
			env={**os.environ, **self.environment_vars},
			cwd=self.working_directory,
		) as proc:
			if self.input_data is not None and proc.stdin:
				proc.stdin.write(self.input_data)
				proc.stdin.close()

			if proc.stdout is not None:
				for chunk in proc.stdout:
					self._trace_log += chunk

			self.exit_code = proc.wait()

		self.ended = time.time()

		if self.exit_code != 0:
			raise SysCallError(
				f"{self.cmd} exited with abnormal exit code [{self.exit_code}]: {self.decode()[-500:]}",
				self.exit_code,
				worker_log=self._trace_log
			)

	def decode(self, encoding: str = 'utf-8', errors: str = 'backslashreplace', strip: bool = True) -> str:
		val = self._trace_log.decode(encoding, errors=errors)

		if strip:
			return val.strip()
		return val


def _log_cmd(cmd: list[str]) -> None:
	history_logfile = logger.directory / 'cmd_history.txt'

	change_perm = False
	if history_logfile.exists() is False:
		change_perm = True

	try:
		with history_logfile.open("a") as cmd_log:
			cmd_log.write(f"{time.time()} {cmd}\n")

		if change_perm:
			history_logfile.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)
	except (PermissionError, FileNotFoundError):
		debug(f'Could not write command history to {history_logfile}')

