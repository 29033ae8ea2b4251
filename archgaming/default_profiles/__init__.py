from archgaming.lib.models.config import DesktopChoice

from .desktops.cinnamon import CinnamonProfile
from .desktops.gnome import GnomeProfile
from .desktops.plasma import PlasmaProfile
from .desktops.xfce4 import Xfce4Profile
from .profile import DesktopProfile, GreeterType


def profile_for(choice: DesktopChoice) -> DesktopProfile | None:
	match choice:
		case DesktopChoice.Gnome:
			return GnomeProfile()
		case DesktopChoice.Plasma:
			return PlasmaProfile()
		case DesktopChoice.Xfce:
			return Xfce4Profile()
		case DesktopChoice.Cinnamon:
			return CinnamonProfile()
		case DesktopChoice.Skip:
			return None


__all__ = [
	'DesktopProfile',
	'GreeterType',
	'profile_for',
]
