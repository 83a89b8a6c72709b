"""Host inspection: platform profile, capability probe and local paths."""

from justinstall.host.capabilities import Capabilities, CapabilityProbe, ToolStatus
from justinstall.host.paths import JustInstallPaths, get_justinstall_home
from justinstall.host.platform import PlatformProfile, get_platform_profile

__all__ = [
    "Capabilities",
    "CapabilityProbe",
    "JustInstallPaths",
    "PlatformProfile",
    "ToolStatus",
    "get_justinstall_home",
    "get_platform_profile",
]
