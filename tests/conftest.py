import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import Any, override

import pytest

from archgaming.lib.context import InstallContext
from archgaming.lib.exceptions import UserCancelled
from archgaming.lib.interactions.prompter import Prompter
from archgaming.lib.models.config import InstallConfig
from archgaming.lib.models.device import BootMode
from archgaming.lib.models.facts import CpuVendor, DetectedFacts, GpuVendor
from archgaming.lib.output import logger
from archgaming.lib.runner import CommandRunner, ExitStatus
from archgaming.tui.menu_item import MenuItem


class RecordingRunner(CommandRunner):
	"""
	Records every command instead of running it. Commands succeed with
	empty output unless a response was registered for them.
	"""

	def __init__(self, target: Path = Path('/mnt'), is_root: bool = True, missing: set[str] | None = None):
		super().__init__(target=target, dry_run=False, is_root=is_root)
		self.calls: list[list[str]] = []
		self.inputs: list[bytes | None] = []
		self.missing = missing or set()
		self._responses: list[tuple[list[str], int, str]] = []

	def respond(self, prefix: list[str], exit_code: int = 0, output: str = '') -> None:
		self._responses.insert(0, (prefix, exit_code, output))

	@staticmethod
	def _contains(cmd: list[str], part: list[str]) -> bool:
		return any(cmd[i : i + len(part)] == part for i in range(len(cmd) - len(part) + 1))

	def ran(self, *part: str) -> bool:
		return any(self._contains(cmd, list(part)) for cmd in self.calls)

	def index_of(self, *part: str) -> int:
		for index, cmd in enumerate(self.calls):
			if self._contains(cmd, list(part)):
				return index
		raise ValueError(f'{part} was never run')

	@property
	def commands(self) -> list[str]:
		return [' '.join(cmd) for cmd in self.calls]

	@override
	def has_binary(self, name: str) -> bool:
		return name not in self.missing

	@override
	def _execute(self, cmd: list[str], input_data: bytes | None, capture: bool, cwd: Path | None) -> ExitStatus:
		self.calls.append(cmd)
		self.inputs.append(input_data)

		for prefix, exit_code, output in self._responses:
			if self._contains(cmd, prefix):
				return ExitStatus(cmd, exit_code, output)

		return ExitStatus(cmd, 0, '')


class ScriptedPrompter(Prompter):
	"""
	Answers prompts from a mapping of prompt fragments to answers,
	falling back to the default. Secrets are taken in order.
	"""

	def __init__(self, answers: dict[str, Any] | None = None, secrets: list[str] | None = None):
		self.answers = answers or {}
		self.secrets = list(secrets or [])
		self.asked: list[str] = []
		self.messages: list[str] = []
		self.rejections: list[str] = []

	def _answer(self, prompt: str, default: Any) -> Any:
		self.asked.append(prompt)

		for fragment, answer in self.answers.items():
			if fragment in prompt:
				return answer

		return default

	@override
	def invalid(self, message: str) -> None:
		self.rejections.append(message)

	@override
	def ask_yes_no(self, prompt: str, default: bool = False) -> bool:
		return bool(self._answer(prompt, default))

	@override
	def ask_choice(self, prompt: str, options: list[MenuItem], default: Any = None) -> Any:
		value = self._answer(prompt, default)
		assert value in [item.value for item in options], f'{value} is not an option for {prompt}'
		return value

	@override
	def ask_multi_choice(self, prompt: str, options: list[MenuItem], defaults: set[Any] | None = None) -> set[Any]:
		return set(self._answer(prompt, defaults or set()))

	@override
	def show_message(self, text: str) -> None:
		self.messages.append(text)

	@override
	def _read_text(self, prompt: str, default: str) -> str:
		return str(self._answer(prompt, default))

	@override
	def _read_secret(self, prompt: str) -> str:
		self.asked.append(prompt)

		if not self.secrets:
			raise UserCancelled()

		return self.secrets.pop(0)


@pytest.fixture(autouse=True)
def _isolated_logger(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
	monkeypatch.setattr(logger, '_path', tmp_path_factory.mktemp('log'))
	monkeypatch.setattr(logger, 'verbose', False)
	monkeypatch.delenv('PACMAN_FLAGS', raising=False)
	monkeypatch.delenv('ARCHGAMING_UI', raising=False)
	yield


@pytest.fixture(scope='session')
def data_dir() -> Path:
	return Path(__file__).parent / 'data'


@pytest.fixture(scope='session')
def config_fixture(data_dir: Path) -> Path:
	return data_dir / 'preseed.json'


@pytest.fixture(scope='session')
def lsblk_output(data_dir: Path) -> str:
	return (data_dir / 'lsblk.json').read_text()


@pytest.fixture
def pacman_conf(tmp_path: Path, data_dir: Path) -> Path:
	path = tmp_path / 'pacman.conf'
	shutil.copy(data_dir / 'pacman.conf', path)
	return path


@pytest.fixture
def pacman_conf_multilib(tmp_path: Path, data_dir: Path) -> Path:
	path = tmp_path / 'pacman_multilib.conf'
	shutil.copy(data_dir / 'pacman_multilib.conf', path)
	return path


@pytest.fixture
def sudoers(tmp_path: Path, data_dir: Path) -> Path:
	path = tmp_path / 'sudoers'
	shutil.copy(data_dir / 'sudoers', path)
	return path


@pytest.fixture
def live_iso_facts() -> DetectedFacts:
	return DetectedFacts(
		boot_mode=BootMode.Uefi,
		cpu_vendor=CpuVendor.AuthenticAMD,
		gpu_vendors=frozenset({GpuVendor.Amd}),
		mem_total_kib=16 * 1024 * 1024,
		network=True,
		timezone='UTC',
		is_root=True,
	)


@pytest.fixture
def desktop_facts() -> DetectedFacts:
	return DetectedFacts(
		boot_mode=BootMode.Uefi,
		cpu_vendor=CpuVendor.GenuineIntel,
		gpu_vendors=frozenset({GpuVendor.Nvidia, GpuVendor.Intel}),
		network=True,
		installed_packages=frozenset({'base', 'linux', 'sudo'}),
		timezone='UTC',
		is_root=False,
	)


@pytest.fixture
def target(tmp_path: Path) -> Path:
	mountpoint = tmp_path / 'mnt'
	mountpoint.mkdir()
	return mountpoint


def make_context(
	facts: DetectedFacts,
	runner: RecordingRunner,
	prompter: ScriptedPrompter,
	config: InstallConfig | None = None,
) -> InstallContext:
	config = config or InstallConfig(mountpoint=runner.target)
	config.apply_facts(facts)
	return InstallContext(config=config, facts=facts, prompter=prompter, runner=runner)
