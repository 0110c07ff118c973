from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError


@dataclass(frozen=True)
class SetupConfig:
    lz4_version: str = "1.10.0"
    # Informational only: reported in logs, never passed to lz4.
    block_size: int = 32 * 1024
    install_prefix: str = "/usr/local"
    download_url_template: str = "https://github.com/lz4/lz4/archive/v{version}.tar.gz"
    build_dir: str = "/tmp/compressed-device-setup"
    setup_script_path: str = "/usr/local/sbin/setup_compressed_device.sh"
    env_dropin_dir: str = "/etc/environment.d"
    env_dropin_name: str = "lz4.conf"
    env_file: str = "/etc/environment"
    mount_point: str = "/mnt/ext4_volume"
    work_subdir: str = "compressed"
    test_file_mib: int = 100
    os_release_path: str = "/etc/os-release"

    @property
    def lib_dir(self) -> str:
        return f"{self.install_prefix}/lib"

    @property
    def bin_dir(self) -> str:
        return f"{self.install_prefix}/bin"

    @property
    def lz4_binary(self) -> str:
        return f"{self.bin_dir}/lz4"

    @property
    def download_url(self) -> str:
        return self.download_url_template.format(version=self.lz4_version)

    @property
    def work_dir(self) -> str:
        return str(Path(self.mount_point) / self.work_subdir)

    @property
    def ld_library_path_line(self) -> str:
        # The variable reference is written literally and expanded by the consumer.
        return f"LD_LIBRARY_PATH={self.lib_dir}:$LD_LIBRARY_PATH"


DEFAULT_CONFIG = SetupConfig()


def config_from_mapping(raw: Dict[str, Any], base: SetupConfig = DEFAULT_CONFIG) -> SetupConfig:
    known = {f.name for f in fields(SetupConfig)}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    overrides: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            raise ConfigError(f"Config key {key} has no value")
        default = getattr(base, key)
        if isinstance(default, int):
            try:
                overrides[key] = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Config key {key} must be an integer, got {value!r}") from e
        else:
            overrides[key] = str(value)
    return replace(base, **overrides)


def load_config(path: str) -> SetupConfig:
    """Load a YAML mapping of overrides on top of the compiled-in defaults."""

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise ConfigError("PyYAML is required to read a YAML config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    return config_from_mapping(raw)
