from typing import override

from conftest import RecordingRunner

from archgaming.lib.hardware import GfxDriver
from archgaming.lib.models.config import AurHelper, DesktopChoice, GamingComponent, InstallConfig
from archgaming.lib.models.facts import DetectedFacts
from archgaming.lib.models.validation import ValidationResult, ValidationStatus
from archgaming.lib.validation import LiveSystem, render_report, totals, validate


class FakeSystem(LiveSystem):
	def __init__(
		self,
		packages: set[str] | None = None,
		binaries: set[str] | None = None,
		user_services: bool = True,
		active: set[str] | None = None,
		enabled: set[str] | None = None,
		flathub: bool = False,
		helper: str | None = None,
	):
		super().__init__(RecordingRunner())
		self.packages = packages or set()
		self.binaries = binaries or {'systemctl'}
		self.user_services = user_services
		self.active = active or set()
		self.enabled = enabled or set()
		self.flathub = flathub
		self.helper = helper

	@override
	def package_installed(self, package: str) -> bool:
		return package in self.packages

	@override
	def has_binary(self, name: str) -> bool:
		return name in self.binaries

	@override
	def user_services_available(self) -> bool:
		return self.user_services

	@override
	def user_service_active(self, unit: str) -> bool:
		return unit in self.active

	@override
	def service_active(self, unit: str) -> bool:
		return unit in self.active

	@override
	def service_enabled(self, unit: str) -> bool:
		return unit in self.enabled

	@override
	def flathub_configured(self) -> bool:
		return self.flathub

	@override
	def aur_helper(self) -> str | None:
		return self.helper


def _by_label(results: list[ValidationResult]) -> dict[str, ValidationResult]:
	return {r.label: r for r in results}


def test_missing_components_warn_with_command() -> None:
	config = InstallConfig(components={GamingComponent.Steam, GamingComponent.Lutris, GamingComponent.MangoHud})

	results = _by_label(validate(config, DetectedFacts(), FakeSystem()))

	assert results['Steam client'].status == ValidationStatus.Warn
	assert results['Steam client'].note == "Install with 'sudo pacman -S steam'"
	assert results['Lutris'].note == "Install with 'sudo pacman -S lutris'"
	assert results['MangoHud'].note == "Install with 'sudo pacman -S mangohud'"
	assert all(r.status != ValidationStatus.Fail for r in results.values())


def test_only_selected_components_are_checked() -> None:
	config = InstallConfig(components={GamingComponent.Wine})

	labels = {r.label for r in validate(config, DetectedFacts(), FakeSystem())}

	assert 'Wine' in labels
	assert 'Steam client' not in labels
	assert 'Gamemode' not in labels


def test_dxvk_hint_uses_aur_helper() -> None:
	config = InstallConfig(components={GamingComponent.Dxvk}, aur_helper=AurHelper.Yay)

	result = _by_label(validate(config, DetectedFacts(), FakeSystem()))['DXVK']

	assert result.status == ValidationStatus.Warn
	assert result.note == "Install with 'yay -S dxvk-bin' after enabling multilib"


def test_user_services() -> None:
	config = InstallConfig(components={GamingComponent.Gamemode, GamingComponent.PipeWire})
	binaries = {'systemctl', 'gamemoded', 'pipewire'}

	unavailable = _by_label(validate(config, DetectedFacts(), FakeSystem(binaries=binaries, user_services=False)))
	assert unavailable['Gamemode'].status == ValidationStatus.Info

	inactive = _by_label(validate(config, DetectedFacts(), FakeSystem(binaries=binaries, active={'pipewire.service'})))
	assert inactive['Gamemode'].status == ValidationStatus.Warn
	assert inactive['Gamemode'].note == "Enable with 'systemctl --user enable --now gamemoded.service'"
	assert inactive['PipeWire'].status == ValidationStatus.Ok


def test_missing_pipewire_hint() -> None:
	config = InstallConfig(components={GamingComponent.PipeWire})

	result = _by_label(validate(config, DetectedFacts(), FakeSystem()))['PipeWire']

	assert result.note == "Install with 'sudo pacman -S pipewire pipewire-pulse'"


def test_driver_core_packages() -> None:
	config = InstallConfig(components=set(), gfx_driver=GfxDriver.NvidiaProprietary)

	broken = _by_label(validate(config, DetectedFacts(), FakeSystem(packages={'nvidia-utils'})))
	assert broken['Graphics driver'].status == ValidationStatus.Fail
	assert broken['Graphics driver'].note == "Install with 'sudo pacman -S nvidia-dkms'"

	working = _by_label(validate(config, DetectedFacts(), FakeSystem(packages={'nvidia-dkms', 'nvidia-utils'})))
	assert working['Graphics driver'].status == ValidationStatus.Ok


def test_desktop_and_display_manager() -> None:
	config = InstallConfig(components=set(), desktop=DesktopChoice.Plasma)

	results = validate(config, DetectedFacts(), FakeSystem(packages={'plasma-meta'}))
	by_label = _by_label(results)

	assert by_label['Display manager'].status == ValidationStatus.Warn
	assert by_label['Display manager'].note == "Enable with 'sudo systemctl enable sddm.service'"
	assert [r.status for r in results if r.label not in ('Display manager', 'NetworkManager', 'Flatpak/Flathub', 'AUR helper')] == [ValidationStatus.Ok]

	missing = validate(config, DetectedFacts(), FakeSystem(enabled={'sddm.service'}))
	assert ValidationStatus.Fail in {r.status for r in missing}


def test_skipped_desktop_is_not_checked() -> None:
	config = InstallConfig(components=set(), desktop=DesktopChoice.Skip)

	labels = {r.label for r in validate(config, DetectedFacts(), FakeSystem())}

	assert 'Display manager' not in labels


def test_network_and_extras() -> None:
	config = InstallConfig(components=set(), aur_enabled=True)

	results = _by_label(validate(config, DetectedFacts(network=False), FakeSystem(enabled={'NetworkManager.service'})))

	assert results['Network'].status == ValidationStatus.Info
	assert results['NetworkManager'].status == ValidationStatus.Warn
	assert 'sudo systemctl start NetworkManager.service' in results['NetworkManager'].note
	assert results['Flatpak/Flathub'].status == ValidationStatus.Info
	assert results['AUR helper'].status == ValidationStatus.Warn

	healthy = FakeSystem(
		binaries={'systemctl', 'flatpak'},
		active={'NetworkManager.service'},
		flathub=True,
		helper='paru',
	)
	results = _by_label(validate(config, DetectedFacts(network=True), healthy))

	assert 'Network' not in results
	assert results['NetworkManager'].status == ValidationStatus.Ok
	assert results['Flatpak/Flathub'].status == ValidationStatus.Ok
	assert results['AUR helper'].note == 'Detected paru'


def test_totals_and_report() -> None:
	results = [
		ValidationResult('Steam client', ValidationStatus.Ok, 'steam package installed'),
		ValidationResult('Lutris', ValidationStatus.Warn, "Install with 'sudo pacman -S lutris'"),
		ValidationResult('Flatpak/Flathub', ValidationStatus.Info, 'Flatpak not installed'),
	]

	assert totals(results) == {
		ValidationStatus.Ok: 1,
		ValidationStatus.Warn: 1,
		ValidationStatus.Fail: 0,
		ValidationStatus.Info: 1,
	}

	report = render_report(results)
	assert report.startswith('Post-install validation results:\n\n')
	assert "Install with 'sudo pacman -S lutris'" in report
	assert report.endswith('Totals: OK=1 WARN=1 FAIL=0 INFO=1')


def test_empty_report() -> None:
	report = render_report([])

	assert 'No validation checks were run.' in report
	assert report.endswith('Totals: OK=0 WARN=0 FAIL=0 INFO=0')


def test_live_system_queries() -> None:
	runner = RecordingRunner()
	runner.respond(['pacman', '-Qi', 'wine'], exit_code=1)
	runner.respond(['flatpak', 'remote-list'], output='flathub\n')
	system = LiveSystem(runner)

	assert system.package_installed('steam') is True
	assert system.package_installed('wine') is False
	assert system.flathub_configured() is True
	assert system.aur_helper() == 'paru'
	assert runner.calls[0] == ['pacman', '-Qi', 'steam']
