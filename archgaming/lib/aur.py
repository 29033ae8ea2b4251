from enum import Enum
from pathlib import Path
from tempfile import TemporaryDirectory

from .bootloader import make_grub_config
from .exceptions import PackageError, StepError
from .models.config import AurHelper
from .output import info
from .pacman import Pacman
from .runner import CommandRunner

AUR_URL = 'https://aur.archlinux.org'

GAMING_UTILITIES = {
	'heroic-games-launcher-bin': 'Heroic Games Launcher (Epic/GOG)',
	'protonup-qt': 'ProtonUp-Qt (manage Proton-GE / Wine-GE)',
}


class AurKernel(Enum):
	AmdZnver3 = 'linux-amd-znver3'
	CkZen = 'linux-ck-zen'
	TkgBmq = 'linux-tkg-bmq'
	Custom = 'custom'

	@property
	def description(self) -> str:
		match self:
			case AurKernel.AmdZnver3:
				return 'Zen 3 optimized kernel'
			case AurKernel.CkZen:
				return 'CK patchset, Zen tuned'
			case AurKernel.TkgBmq:
				return 'TkG build with the BMQ scheduler'
			case AurKernel.Custom:
				return 'Enter a package name'


def installed_helper(runner: CommandRunner) -> AurHelper | None:
	for helper in AurHelper:
		if runner.has_binary(helper.value):
			return helper
	return None


def install_helper(runner: CommandRunner, pacman: Pacman, helper: AurHelper) -> None:
	"""
	Builds an AUR helper from its AUR git repository with makepkg.
	makepkg refuses to run as root, so this has to run as a regular user.
	"""
	if runner.is_root:
		raise StepError(
			f'{helper.value} has to be built as a regular user (makepkg refuses to run as root), '
			f'run "git clone {AUR_URL}/{helper.value}.git && cd {helper.value} && makepkg -si" as your user'
		)

	pacman.install(['base-devel', 'git'])

	with TemporaryDirectory(prefix='archgaming-aur-') as tmp:
		build_dir = Path(tmp) / helper.value

		info(f'Building {helper.value} ({helper.description}) from the AUR')
		runner.run(['git', 'clone', f'{AUR_URL}/{helper.value}.git', str(build_dir)], check=True)
		runner.run(['makepkg', '-si', '--noconfirm'], cwd=build_dir, check=True)


def install_packages(runner: CommandRunner, helper: AurHelper, packages: list[str]) -> None:
	packages = list(dict.fromkeys(packages))
	if not packages:
		return

	info(f'Installing from the AUR with {helper.value}: {" ".join(packages)}')
	status = runner.run([helper.value, '-S', '--needed', '--noconfirm', *packages])

	if not status.ok:
		raise PackageError(f'{helper.value} could not install {", ".join(packages)} (exit code {status.exit_code})')


def install_kernel(runner: CommandRunner, helper: AurHelper, kernel: str) -> None:
	packages = [kernel]
	if not kernel.endswith('-headers'):
		packages.append(f'{kernel}-headers')

	install_packages(runner, helper, packages)
	make_grub_config(runner)
