from __future__ import annotations

from archgaming.tui.menu_item import MenuItem

from ..aur import AurKernel
from ..exceptions import DiskWipeDeclined
from ..hardware import GfxDriver, valid_timezone
from ..models.config import AurHelper, DesktopChoice, GamingComponent, sanitize_hostname, valid_hostname, valid_username
from ..models.device import BootMode, LsblkInfo
from ..output import warn
from .prompter import Prompter


def _hostname_error(value: str) -> str | None:
	if valid_hostname(value):
		return None
	return 'Hostnames use lowercase letters, digits and dashes, and may not start or end with a dash'


def _username_error(value: str) -> str | None:
	if valid_username(value):
		return None
	return 'Usernames start with a lowercase letter followed by lowercase letters, digits, dashes or underscores'


def _timezone_error(value: str) -> str | None:
	if valid_timezone(value):
		return None
	return f'Unknown time zone {value}, use a Region/City name such as Europe/Berlin'


def _not_empty(value: str) -> str | None:
	return None if value else 'A value is required'


def ask_hostname(prompter: Prompter, preset: str) -> str:
	value = prompter.ask_text('Hostname', preset, validator=lambda v: _hostname_error(sanitize_hostname(v)))
	return sanitize_hostname(value)


def ask_username(prompter: Prompter, preset: str) -> str:
	return prompter.ask_text('Username for the new user', preset, validator=_username_error)


def ask_for_a_timezone(prompter: Prompter, preset: str) -> str:
	return prompter.ask_text('Time zone (Region/City)', preset, validator=_timezone_error)


def ask_locale(prompter: Prompter, preset: str) -> str:
	return prompter.ask_text('Locale', preset, validator=_not_empty)


def ask_keymap(prompter: Prompter, preset: str) -> str:
	return prompter.ask_text('Console keymap', preset, validator=_not_empty)


def ask_password(prompter: Prompter, who: str) -> str:
	return prompter.ask_secret(f'Password for {who}')


def ask_boot_mode(prompter: Prompter, prompt: str, preset: BootMode) -> BootMode:
	options = [MenuItem(mode.display_name(), value=mode, key=mode.value) for mode in BootMode]
	return prompter.ask_choice(prompt, options, default=preset)


def ask_disk(prompter: Prompter, prompt: str, disks: list[LsblkInfo], preset: str | None = None) -> str:
	options = [MenuItem(disk.display_name(), value=disk.path, key=disk.path) for disk in disks]
	default = preset if any(disk.path == preset for disk in disks) else disks[0].path
	return prompter.ask_choice(prompt, options, default=default)


def confirm_disk_wipe(prompter: Prompter, disk: str) -> None:
	"""
	Asks twice, both answers default to no.
	Raises DiskWipeDeclined unless both are yes.
	"""
	if not prompter.ask_yes_no(f'ALL data on {disk} will be erased. Continue?', default=False):
		raise DiskWipeDeclined(f'Declined to wipe {disk}, nothing has been changed')

	if not prompter.ask_yes_no(f'This cannot be undone. Really wipe {disk}?', default=False):
		raise DiskWipeDeclined(f'Declined to wipe {disk}, nothing has been changed')


def ask_mirror_countries(prompter: Prompter, preset: list[str]) -> str:
	return prompter.ask_text('Comma-separated country names, empty for worldwide', ', '.join(preset))


def ask_gfx_driver(prompter: Prompter, preset: GfxDriver | None) -> GfxDriver | None:
	options = [MenuItem(driver.value, value=driver, key=driver.name) for driver in GfxDriver]
	options.append(MenuItem('None', value=None, description='Do not install a graphics driver', key='none'))

	return prompter.ask_choice('Graphics driver stack to install', options, default=preset)


def ask_desktop(prompter: Prompter, preset: DesktopChoice) -> DesktopChoice:
	options = [MenuItem(choice.display_name(), value=choice, key=choice.value) for choice in DesktopChoice]
	return prompter.ask_choice('Desktop environment to install', options, default=preset)


def ask_gaming_components(prompter: Prompter, preset: set[GamingComponent]) -> set[GamingComponent]:
	options = [
		MenuItem(component.value, value=component, description=component.description, key=component.value)
		for component in GamingComponent
	]
	return prompter.ask_multi_choice('Gaming components to install', options, defaults=preset)


def ask_aur_helper(prompter: Prompter, preset: AurHelper) -> AurHelper:
	options = [MenuItem(helper.value, value=helper, description=helper.description, key=helper.value) for helper in AurHelper]
	return prompter.ask_choice('Choose an AUR helper to install', options, default=preset)


def ask_aur_kernel(prompter: Prompter, preset: str | None) -> str:
	options = [MenuItem(kernel.value, value=kernel, description=kernel.description, key=kernel.value) for kernel in AurKernel]

	try:
		default = AurKernel(preset) if preset else AurKernel.AmdZnver3
	except ValueError:
		default = AurKernel.Custom

	kernel = prompter.ask_choice('Choose an AUR kernel to install', options, default=default)

	if kernel != AurKernel.Custom:
		return kernel.value

	custom = preset if default == AurKernel.Custom and preset else ''
	value = prompter.ask_text('Exact AUR kernel package name', custom, validator=_not_empty)
	return value.replace(' ', '')


def ask_swap_size(prompter: Prompter, preset: int) -> int:
	def _size_error(value: str) -> str | None:
		if value.isdigit() and int(value) >= 1:
			return None
		return 'Enter a whole number of GiB, at least 1'

	return int(prompter.ask_text('Swap file size in GiB', str(preset), validator=_size_error))


def ask_existing_user(prompter: Prompter, users: list[str]) -> str | None:
	if not users:
		warn('No regular users detected to grant sudo access')
		return None

	options = [MenuItem(user, value=user, key=user) for user in users]
	return prompter.ask_choice('Select user to grant sudo', options, default=users[0])
