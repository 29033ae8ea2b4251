from collections import Counter

from archgaming.applications.flatpak import FLATHUB_URL
from archgaming.default_profiles import profile_for

from .aur import installed_helper
from .models.config import GamingComponent, InstallConfig
from .models.facts import DetectedFacts
from .models.validation import ValidationResult, ValidationStatus
from .output import FormattedOutput
from .runner import CommandRunner

_LABELS = {
	GamingComponent.Steam: 'Steam client',
	GamingComponent.Lutris: 'Lutris',
	GamingComponent.Wine: 'Wine',
	GamingComponent.Gamemode: 'Gamemode',
	GamingComponent.MangoHud: 'MangoHud',
	GamingComponent.PipeWire: 'PipeWire',
	GamingComponent.OpenXR: 'OpenXR',
	GamingComponent.Dxvk: 'DXVK',
}


class LiveSystem:
	"""
	Read-only queries against the running system.
	"""

	def __init__(self, runner: CommandRunner):
		self._runner = runner

	def package_installed(self, package: str) -> bool:
		return self._runner.succeeds(['pacman', '-Qi', package])

	def has_binary(self, name: str) -> bool:
		return self._runner.has_binary(name)

	def user_services_available(self) -> bool:
		if not self.has_binary('systemctl'):
			return False
		return self._runner.succeeds(['systemctl', '--user', 'status', 'basic.target'])

	def user_service_active(self, unit: str) -> bool:
		return self._runner.succeeds(['systemctl', '--user', 'is-active', '--quiet', unit])

	def service_active(self, unit: str) -> bool:
		return self._runner.succeeds(['systemctl', 'is-active', '--quiet', unit])

	def service_enabled(self, unit: str) -> bool:
		return self._runner.succeeds(['systemctl', 'is-enabled', '--quiet', unit])

	def flathub_configured(self) -> bool:
		status = self._runner.query(['flatpak', 'remote-list', '--columns=name'])
		return status.ok and 'flathub' in status.output.split()

	def aur_helper(self) -> str | None:
		helper = installed_helper(self._runner)
		return helper.value if helper else None


def _install_hint(packages: list[str]) -> str:
	return f"Install with 'sudo pacman -S {' '.join(packages)}'"


def _check_package_component(system: LiveSystem, component: GamingComponent, config: InstallConfig) -> ValidationResult:
	label = _LABELS[component]
	package = component.packages[0]

	if system.package_installed(package):
		return ValidationResult(label, ValidationStatus.Ok, f'{package} package installed')

	if component.from_aur:
		note = f"Install with '{config.aur_helper.value} -S {package}' after enabling multilib"
	else:
		note = _install_hint([package])

	return ValidationResult(label, ValidationStatus.Warn, note)


def _check_service_component(system: LiveSystem, component: GamingComponent, user_services: bool) -> ValidationResult:
	label = _LABELS[component]
	binary = component.binary
	unit = component.user_service

	if binary and not system.has_binary(binary):
		packages = ['pipewire', 'pipewire-pulse'] if component == GamingComponent.PipeWire else [component.packages[0]]
		return ValidationResult(label, ValidationStatus.Warn, _install_hint(packages))

	if unit is None:
		return ValidationResult(label, ValidationStatus.Ok, f'{binary} binary present')

	if not user_services:
		return ValidationResult(label, ValidationStatus.Info, f'{label} installed; user services unavailable in this session')

	if system.user_service_active(unit):
		return ValidationResult(label, ValidationStatus.Ok, f'{unit} user service active')

	return ValidationResult(label, ValidationStatus.Warn, f"Enable with 'systemctl --user enable --now {unit}'")


def _check_components(system: LiveSystem, config: InstallConfig) -> list[ValidationResult]:
	results = []
	user_services = system.user_services_available()

	for component in GamingComponent:
		if component not in config.components:
			continue

		if component.binary:
			results.append(_check_service_component(system, component, user_services))
		else:
			results.append(_check_package_component(system, component, config))

	return results


def _check_driver(system: LiveSystem, config: InstallConfig) -> list[ValidationResult]:
	if config.gfx_driver is None:
		return []

	label = 'Graphics driver'
	missing = [p for p in config.gfx_driver.core_packages() if not system.package_installed(p)]

	if missing:
		return [ValidationResult(label, ValidationStatus.Fail, _install_hint(missing))]

	return [ValidationResult(label, ValidationStatus.Ok, f'{config.gfx_driver.value} packages installed')]


def _check_desktop(system: LiveSystem, config: InstallConfig) -> list[ValidationResult]:
	profile = profile_for(config.desktop)
	if profile is None:
		return []

	results = []
	missing = [p for p in profile.core_packages if not system.package_installed(p)]

	if missing:
		results.append(ValidationResult(profile.name, ValidationStatus.Fail, _install_hint(missing)))
	else:
		results.append(ValidationResult(profile.name, ValidationStatus.Ok, f'{profile.name} packages installed'))

	service = profile.default_greeter_type.service
	if system.service_enabled(service):
		results.append(ValidationResult('Display manager', ValidationStatus.Ok, f'{service} enabled'))
	else:
		results.append(ValidationResult('Display manager', ValidationStatus.Warn, f"Enable with 'sudo systemctl enable {service}'"))

	return results


def _check_network(system: LiveSystem) -> ValidationResult:
	label = 'NetworkManager'
	unit = 'NetworkManager.service'

	if not system.has_binary('systemctl'):
		return ValidationResult(label, ValidationStatus.Info, 'systemctl unavailable; skipping NetworkManager check')

	if system.service_active(unit):
		return ValidationResult(label, ValidationStatus.Ok, 'NetworkManager service active')

	if system.service_enabled(unit):
		return ValidationResult(label, ValidationStatus.Warn, f"Service enabled but inactive; start it with 'sudo systemctl start {unit}'")

	return ValidationResult(label, ValidationStatus.Warn, f"Enable with 'sudo systemctl enable --now {unit}'")


def _check_flatpak(system: LiveSystem) -> ValidationResult:
	label = 'Flatpak/Flathub'

	if not system.has_binary('flatpak'):
		return ValidationResult(label, ValidationStatus.Info, 'Flatpak not installed (expected if you skipped that step)')

	if system.flathub_configured():
		return ValidationResult(label, ValidationStatus.Ok, 'Flathub remote configured')

	return ValidationResult(label, ValidationStatus.Warn, f"Add Flathub via 'flatpak remote-add --if-not-exists flathub {FLATHUB_URL}'")


def _check_aur(system: LiveSystem, config: InstallConfig) -> ValidationResult:
	label = 'AUR helper'

	if helper := system.aur_helper():
		return ValidationResult(label, ValidationStatus.Ok, f'Detected {helper}')

	if config.aur_enabled:
		return ValidationResult(label, ValidationStatus.Warn, 'Missing AUR helper; rerun the setup to install paru or yay')

	return ValidationResult(label, ValidationStatus.Info, 'AUR helper not installed (enable AUR support to add one)')


def validate(config: InstallConfig, facts: DetectedFacts, system: LiveSystem) -> list[ValidationResult]:
	"""
	Checks what the post-install sequence was asked to set up against
	the live system. Only queries, never changes anything.

	A missing optional component is a WARN with the command that fixes it,
	FAIL is reserved for the core packages of the selected driver and desktop.
	"""
	results = _check_components(system, config)
	results += _check_driver(system, config)
	results += _check_desktop(system, config)

	if facts.network is False:
		results.append(ValidationResult('Network', ValidationStatus.Info, 'archlinux.org was unreachable at start-up'))

	results.append(_check_network(system))
	results.append(_check_flatpak(system))
	results.append(_check_aur(system, config))

	return results


def totals(results: list[ValidationResult]) -> dict[ValidationStatus, int]:
	counts = Counter(r.status for r in results)
	return {status: counts.get(status, 0) for status in ValidationStatus}


def render_report(results: list[ValidationResult]) -> str:
	body = FormattedOutput.as_table(results) if results else 'No validation checks were run.\n'
	counts = ' '.join(f'{status.value}={count}' for status, count in totals(results).items())

	return f'Post-install validation results:\n\n{body}\nTotals: {counts}'
