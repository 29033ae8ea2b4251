from pathlib import Path

from .output import info
from .pacman import Pacman
from .runner import CommandRunner

MIRRORLIST = Path('/etc/pacman.d/mirrorlist')


def reflector_command(countries: list[str], mirrorlist: Path = MIRRORLIST) -> list[str]:
	cmd = [
		'reflector',
		'--protocol', 'https',
		'--latest', '30',
		'--sort', 'rate',
		'--fastest', '15',
		'--save', str(mirrorlist),
	]

	for country in countries:
		cmd += ['--country', country]

	return cmd


def optimize_mirrors(
	runner: CommandRunner,
	pacman: Pacman,
	countries: list[str],
	mirrorlist: Path = MIRRORLIST,
) -> None:
	"""
	Rewrites the mirrorlist with the fastest recently synced HTTPS mirrors,
	keeping a timestamped copy of the previous list.
	"""
	if not runner.has_binary('reflector'):
		pacman.install('reflector')

	runner.backup(mirrorlist)

	where = ', '.join(countries) if countries else 'worldwide'
	info(f'Ranking mirrors ({where}), this can take a minute')
	runner.run(reflector_command(countries, mirrorlist), privileged=True, check=True)


def parse_countries(value: str) -> list[str]:
	return [c.strip() for c in value.split(',') if c.strip()]
