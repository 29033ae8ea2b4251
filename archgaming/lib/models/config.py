from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..exceptions import DiskError
from ..hardware import GfxDriver
from .device import BootMode, PartitionLayout
from .facts import DetectedFacts

USERNAME_PATTERN = re.compile(r'^[a-z][-a-z0-9_]*$')
HOSTNAME_PATTERN = re.compile(r'^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$')


class RunMode(Enum):
	PostInstall = 'postinstall'
	FullInstall = 'fullinstall'

	@classmethod
	def resolve(cls, forced: RunMode | None, is_root: bool, privileged_default: RunMode) -> RunMode:
		"""
		A forced mode always wins. Otherwise running as root is taken
		as the intent to install from the live ISO (configurable through
		``privileged_default``), and anything else as post-install.
		"""
		if forced is not None:
			return forced

		if is_root:
			return privileged_default

		return cls.PostInstall


class DesktopChoice(Enum):
	Gnome = 'gnome'
	Plasma = 'plasma'
	Xfce = 'xfce'
	Cinnamon = 'cinnamon'
	Skip = 'skip'

	def display_name(self) -> str:
		match self:
			case DesktopChoice.Gnome:
				return 'GNOME'
			case DesktopChoice.Plasma:
				return 'KDE Plasma'
			case DesktopChoice.Xfce:
				return 'Xfce'
			case DesktopChoice.Cinnamon:
				return 'Cinnamon'
			case DesktopChoice.Skip:
				return 'Skip (no desktop environment)'


class AurHelper(Enum):
	Paru = 'paru'
	Yay = 'yay'

	@property
	def description(self) -> str:
		match self:
			case AurHelper.Paru:
				return 'Rust-based, pacman-like syntax'
			case AurHelper.Yay:
				return 'Go-based helper'


class GamingComponent(Enum):
	Steam = 'steam'
	Lutris = 'lutris'
	Wine = 'wine'
	Gamemode = 'gamemode'
	MangoHud = 'mangohud'
	PipeWire = 'pipewire'
	OpenXR = 'openxr'
	Dxvk = 'dxvk'

	@property
	def description(self) -> str:
		match self:
			case GamingComponent.Steam:
				return 'Steam client + runtime'
			case GamingComponent.Lutris:
				return 'Lutris launcher'
			case GamingComponent.Wine:
				return 'Wine + helpers'
			case GamingComponent.Gamemode:
				return 'Feral gamemode service'
			case GamingComponent.MangoHud:
				return 'MangoHud overlay + GOverlay'
			case GamingComponent.PipeWire:
				return 'PipeWire audio stack'
			case GamingComponent.OpenXR:
				return 'OpenXR + Vulkan tools'
			case GamingComponent.Dxvk:
				return 'DXVK binaries (AUR, needs multilib)'

	@property
	def packages(self) -> list[str]:
		match self:
			case GamingComponent.Steam:
				return ['steam']
			case GamingComponent.Lutris:
				return ['lutris']
			case GamingComponent.Wine:
				return ['wine', 'wine-mono', 'wine-gecko', 'winetricks']
			case GamingComponent.Gamemode:
				return ['gamemode', 'lib32-gamemode']
			case GamingComponent.MangoHud:
				return ['mangohud', 'goverlay']
			case GamingComponent.PipeWire:
				return ['pipewire', 'pipewire-alsa', 'pipewire-pulse', 'pipewire-jack', 'wireplumber', 'qpwgraph']
			case GamingComponent.OpenXR:
				return ['openxr', 'vulkan-tools']
			case GamingComponent.Dxvk:
				return ['dxvk-bin']

	@property
	def requires_multilib(self) -> bool:
		return self in (GamingComponent.Steam, GamingComponent.Wine, GamingComponent.Dxvk)

	@property
	def from_aur(self) -> bool:
		return self == GamingComponent.Dxvk

	@property
	def user_service(self) -> str | None:
		match self:
			case GamingComponent.Gamemode:
				return 'gamemoded.service'
			case GamingComponent.PipeWire:
				return 'pipewire.service'
			case _:
				return None

	@property
	def binary(self) -> str | None:
		match self:
			case GamingComponent.Gamemode:
				return 'gamemoded'
			case GamingComponent.MangoHud:
				return 'mangohud'
			case GamingComponent.PipeWire:
				return 'pipewire'
			case _:
				return None

	@classmethod
	def defaults(cls) -> set[GamingComponent]:
		return {
			cls.Steam,
			cls.Lutris,
			cls.Wine,
			cls.Gamemode,
			cls.MangoHud,
			cls.PipeWire,
		}


@dataclass
class InstallConfig:
	hostname: str = 'arch-box'
	username: str = 'gamer'
	timezone: str | None = None
	locale: str = 'en_US.UTF-8'
	keymap: str = 'us'
	boot_mode: BootMode | None = None
	disk: str | None = None
	desktop: DesktopChoice = DesktopChoice.Skip
	components: set[GamingComponent] = field(default_factory=GamingComponent.defaults)
	gfx_driver: GfxDriver | None = None
	aur_enabled: bool = False
	aur_helper: AurHelper = AurHelper.Paru
	aur_kernel: str | None = None
	mirror_countries: list[str] = field(default_factory=list)
	run_mode: RunMode | None = None
	privileged_run_mode: RunMode = RunMode.FullInstall
	mountpoint: Path = Path('/mnt')
	swapfile: Path = Path('/swapfile')
	swap_size_gib: int = 4
	multilib_enabled: bool = False

	_partitions: PartitionLayout | None = field(default=None, init=False, repr=False)

	def apply_facts(self, facts: DetectedFacts) -> None:
		"""
		Seeds whatever the user (or the config file) left open with detected values.
		"""
		if self.timezone is None:
			self.timezone = facts.timezone

		if self.boot_mode is None:
			self.boot_mode = facts.boot_mode

	def set_partition_paths(self) -> PartitionLayout:
		if not self.disk:
			raise DiskError('No target disk has been selected')
		if self.boot_mode is None:
			raise DiskError('No boot mode has been selected')

		self._partitions = PartitionLayout.for_disk(self.disk, self.boot_mode)
		return self._partitions

	@property
	def partitions(self) -> PartitionLayout:
		layout = self._partitions

		if layout is None or layout.disk != self.disk or layout.boot_mode != self.boot_mode:
			raise DiskError(
				'Partition paths are not valid for the current disk and boot mode, set_partition_paths() has to run first'
			)

		return layout

	@classmethod
	def from_config(cls, args_config: dict[str, Any]) -> InstallConfig:
		config = InstallConfig()

		if hostname := args_config.get('hostname', None):
			config.hostname = hostname

		if username := args_config.get('username', None):
			config.username = username

		if timezone := args_config.get('timezone', None):
			config.timezone = timezone

		if locale := args_config.get('locale', None):
			config.locale = locale

		if keymap := args_config.get('keymap', None):
			config.keymap = keymap

		if boot_mode := args_config.get('boot_mode', None):
			config.boot_mode = BootMode(boot_mode)

		if disk := args_config.get('disk', None):
			config.disk = disk

		if desktop := args_config.get('desktop', None):
			config.desktop = DesktopChoice(desktop)

		if (components := args_config.get('gaming_components', None)) is not None:
			config.components = {GamingComponent(c) for c in components}

		if gfx_driver := args_config.get('gfx_driver', None):
			config.gfx_driver = GfxDriver(gfx_driver)

		if aur_helper := args_config.get('aur_helper', None):
			config.aur_helper = AurHelper(aur_helper)
			config.aur_enabled = True

		if aur_kernel := args_config.get('aur_kernel', None):
			config.aur_kernel = aur_kernel

		if countries := args_config.get('mirror_countries', []):
			config.mirror_countries = list(countries)

		if privileged_run_mode := args_config.get('privileged_run_mode', None):
			config.privileged_run_mode = RunMode(privileged_run_mode)

		if swapfile := args_config.get('swapfile', None):
			config.swapfile = Path(swapfile)

		if swap_size := args_config.get('swap_size', None):
			config.swap_size_gib = int(swap_size)

		return config


def sanitize_hostname(value: str) -> str:
	return value.strip().lower().replace(' ', '-')


def valid_hostname(value: str) -> bool:
	return bool(HOSTNAME_PATTERN.match(value))


def valid_username(value: str) -> bool:
	return len(value) <= 32 and bool(USERNAME_PATTERN.match(value))
