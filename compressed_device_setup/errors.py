from __future__ import annotations


class SetupError(RuntimeError):
    """Base for every fatal provisioning failure.

    All subclasses map to the same process exit status.
    """

    exit_code = 1


class ConfigError(SetupError):
    pass


class PrivilegeError(SetupError):
    pass


class DetectionError(SetupError):
    pass


class UnsupportedPlatformError(SetupError):
    pass


class DependencyInstallError(SetupError):
    pass


class ToolInstallError(SetupError):
    pass


class VersionVerificationError(SetupError):
    pass


class ScriptGenerationError(SetupError):
    pass


class EnvironmentUpdateError(SetupError):
    pass


class DeviceNotFoundError(SetupError):
    pass


class AmbiguousDeviceError(SetupError):
    pass


class SetupScriptError(SetupError):
    pass
