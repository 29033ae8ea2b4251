import re
from pathlib import Path

from ..output import debug, info
from ..runner import CommandRunner

_SECTION = re.compile(r'^\s*\[(.*)\]\s*$')
_COMMENTED_SECTION = re.compile(r'^#\s*\[(.*)\]')


class PacmanConfig:
	def __init__(self, runner: CommandRunner, config_path: Path = Path('/etc/pacman.conf')):
		self._runner = runner
		self._config_path = config_path

	@property
	def path(self) -> Path:
		return self._config_path

	def _lines(self) -> list[str]:
		return self._runner.read_file(self._config_path).splitlines(keepends=True)

	def is_enabled(self, repo: str) -> bool:
		for line in self._lines():
			if (match := _SECTION.match(line)) and match.group(1) == repo:
				return True
		return False

	def enable(self, repo: str = 'multilib', mirrorlist: str = '/etc/pacman.d/mirrorlist') -> bool:
		"""
		Enables a repository section, either by uncommenting it together
		with its Include line or by appending a new section.
		Returns False, without touching the file, when the repository is already enabled.
		"""
		if self.is_enabled(repo):
			info(f'{repo.capitalize()} repository already enabled.')
			return False

		content = self._lines()
		uncommented = False

		for row, line in enumerate(content):
			match = _COMMENTED_SECTION.match(line)

			if match and match.group(1) == repo:
				content[row] = re.sub(r'^#\s*', '', line)

				# also uncomment the next line (Include statement) if it exists and is commented
				if row + 1 < len(content) and content[row + 1].lstrip().startswith('#') and 'Include' in content[row + 1]:
					content[row + 1] = re.sub(r'^#\s*', '', content[row + 1])

				uncommented = True
				break

		if not uncommented:
			debug(f'No commented [{repo}] section found in {self._config_path}, appending one')
			if content and not content[-1].endswith('\n'):
				content[-1] += '\n'
			content.append(f'\n[{repo}]\nInclude = {mirrorlist}\n')

		self._runner.backup(self._config_path)
		self._runner.write_file(self._config_path, ''.join(content))

		info(f'Enabled the {repo} repository in {self._config_path}')
		return True
