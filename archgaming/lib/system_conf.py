import pwd
import re
from pathlib import Path

from .exceptions import SysCallError
from .output import info, warn
from .runner import CommandRunner

SUDOERS = Path('/etc/sudoers')
FSTAB = Path('/etc/fstab')
WHEEL_RULE = '%wheel ALL=(ALL:ALL) ALL'

_COMMENTED_WHEEL_RULE = re.compile(r'^#\s*%wheel\s+ALL=\(ALL(:ALL)?\)\s+ALL\s*$')
_WHEEL_RULE = re.compile(r'^%wheel\s+ALL=\(ALL(:ALL)?\)\s+ALL\s*$')


def enable_wheel_sudo(runner: CommandRunner, sudoers: Path = SUDOERS) -> bool:
	"""
	Lets members of the wheel group use sudo, by uncommenting the stock
	rule or appending one. Returns False when the rule is already active.
	"""
	lines = runner.read_file(sudoers).splitlines(keepends=True)

	if any(_WHEEL_RULE.match(line) for line in lines):
		info(f'The wheel group already has sudo rights in {sudoers}')
		return False

	for row, line in enumerate(lines):
		if _COMMENTED_WHEEL_RULE.match(line):
			lines[row] = re.sub(r'^#\s*', '', line)
			break
	else:
		if lines and not lines[-1].endswith('\n'):
			lines[-1] += '\n'
		lines.append(f'{WHEEL_RULE}\n')

	runner.backup(sudoers)
	runner.write_file(sudoers, ''.join(lines))
	info(f'Enabled sudo for the wheel group in {sudoers}')
	return True


def add_user_to_wheel(runner: CommandRunner, username: str) -> None:
	info(f'Adding {username} to the wheel group')
	runner.run(['usermod', '-aG', 'wheel', username], privileged=True, check=True)


def regular_users() -> list[str]:
	"""
	Accounts that look like people: uid 1000 and up, not nobody, with an existing home.
	"""
	users = []
	for entry in pwd.getpwall():
		if entry.pw_uid < 1000 or entry.pw_uid == 65534:
			continue
		if not Path(entry.pw_dir).is_dir():
			continue
		users.append(entry.pw_name)

	return sorted(users)


def swap_entry(path: Path) -> str:
	return f'{path} none swap defaults 0 0'


def create_swapfile(runner: CommandRunner, path: Path, size_gib: int, fstab: Path = FSTAB) -> None:
	if size_gib < 1:
		raise ValueError(f'Swap file size must be at least 1 GiB, got {size_gib}')

	if path.exists():
		warn(f'{path} already exists, keeping it')
	else:
		info(f'Creating a {size_gib} GiB swap file at {path}')
		try:
			runner.run(['fallocate', '-l', f'{size_gib}G', str(path)], privileged=True, check=True)
		except SysCallError as err:
			warn(f'fallocate failed ({err.exit_code}), falling back to dd')
			runner.run(
				['dd', 'if=/dev/zero', f'of={path}', 'bs=1M', f'count={size_gib * 1024}', 'status=progress'],
				privileged=True,
				check=True,
			)

		runner.run(['chmod', '600', str(path)], privileged=True, check=True)
		runner.run(['mkswap', str(path)], privileged=True, check=True)

	status = runner.run(['swapon', str(path)], privileged=True)
	if not status.ok:
		warn(f'Could not activate {path} right now, it will be used after a reboot')

	entry = swap_entry(path)
	existing = fstab.read_text().splitlines() if fstab.exists() else []

	if any(line.split()[:1] == [str(path)] for line in existing if line.strip() and not line.startswith('#')):
		info(f'{fstab} already has an entry for {path}')
		return

	runner.write_file(fstab, f'{entry}\n', append=True)
	info(f'Added {path} to {fstab}')
