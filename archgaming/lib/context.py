from dataclasses import dataclass
from functools import cached_property

from .interactions.prompter import Prompter
from .models.config import InstallConfig
from .models.facts import DetectedFacts
from .pacman import Pacman
from .runner import CommandRunner


@dataclass
class InstallContext:
	"""
	Everything a sequence needs: the configuration being filled in,
	the facts detected at start-up and the prompter and runner to use.
	"""
	config: InstallConfig
	facts: DetectedFacts
	prompter: Prompter
	runner: CommandRunner

	@cached_property
	def pacman(self) -> Pacman:
		return Pacman(self.runner)
