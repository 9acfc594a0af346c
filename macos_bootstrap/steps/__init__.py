from .step_10_acquire_privileges import AcquirePrivilegesStep
from .step_20_command_line_tools import CommandLineToolsStep
from .step_30_homebrew import HomebrewStep
from .step_40_install_packages import InstallPackagesStep
from .step_50_configure_shell import ConfigureShellStep
from .step_60_configure_identity import ConfigureIdentityStep
from .step_70_editor_extensions import EditorExtensionsStep
from .step_80_apply_preferences import ApplyPreferencesStep
from .step_85_system_settings import SystemSettingsStep
from .step_90_finalize import FinalizeStep

__all__ = [
    "AcquirePrivilegesStep",
    "CommandLineToolsStep",
    "HomebrewStep",
    "InstallPackagesStep",
    "ConfigureShellStep",
    "ConfigureIdentityStep",
    "EditorExtensionsStep",
    "ApplyPreferencesStep",
    "SystemSettingsStep",
    "FinalizeStep",
]
