from .step_10_detect_platform import DetectPlatformStep
from .step_20_install_dependencies import InstallDependenciesStep
from .step_30_install_lz4 import InstallLz4Step
from .step_40_write_setup_script import WriteSetupScriptStep
from .step_50_update_environment import UpdateEnvironmentStep
from .step_60_select_device import SelectDeviceStep
from .step_70_run_setup_script import RunSetupScriptStep

__all__ = [
    "DetectPlatformStep",
    "InstallDependenciesStep",
    "InstallLz4Step",
    "WriteSetupScriptStep",
    "UpdateEnvironmentStep",
    "SelectDeviceStep",
    "RunSetupScriptStep",
]
