"""
Conversion settings.

Defaults reproduce the file naming and compression of existing .ecu/.cmp
archives. A YAML file can override them:

    compression_level: 9
    csv_extension: .csv
    container_extension: .cmp
    source_extension: .ecu
    chunk_size: 65536

Unknown keys are reported with a UserWarning and ignored.
"""

import warnings
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

from ecucsv.container import DEFAULT_COMPRESSION_LEVEL
from ecucsv.extractor import DEFAULT_CHUNK_SIZE
from ecucsv.model import ConversionMode


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""
    pass


@dataclass
class ConversionConfig:
    """
    Tunables for one run of the converter.

    Properties:
        compression_level: DEFLATE level used when writing .cmp files (0-9)
        csv_extension: Extension of plain CSV outputs
        container_extension: Extension of compressed outputs
        source_extension: Extension of XML inputs
        chunk_size: Bytes read per step while parsing XML
    """

    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    csv_extension: str = ".csv"
    container_extension: str = ".cmp"
    source_extension: str = ".ecu"
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        if not isinstance(self.compression_level, int) or not 0 <= self.compression_level <= 9:
            raise ConfigError(f"compression_level must be an integer 0-9, got {self.compression_level!r}")
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be a positive integer, got {self.chunk_size!r}")
        for name in ("csv_extension", "container_extension", "source_extension"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.startswith(".") or "." in value[1:]:
                # Output names are cut at the first dot, so an extension may hold only one
                raise ConfigError(f"{name} must look like '.ext', got {value!r}")

    def expected_extension(self, mode: ConversionMode) -> str:
        """Extension an input file is expected to have for this mode."""
        if mode == ConversionMode.DECOMPRESS:
            return self.container_extension
        return self.source_extension


def config_from_dict(d: Optional[Dict[str, Any]]) -> ConversionConfig:
    if d is None:
        return ConversionConfig()
    if not isinstance(d, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(d).__name__}")

    known = {f.name for f in fields(ConversionConfig)}
    for key in d:
        if key not in known:
            warnings.warn(f"Unknown configuration key ignored: {key}", UserWarning)

    return ConversionConfig(**{k: v for k, v in d.items() if k in known})


def config_to_dict(config: ConversionConfig) -> Dict[str, Any]:
    return {f.name: getattr(config, f.name) for f in fields(ConversionConfig)}


def load_config(path: Optional[str]) -> ConversionConfig:
    """
    Load settings from a YAML file.

    Args:
        path: YAML file path; None gives the defaults

    Returns:
        ConversionConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the YAML is invalid or a value is out of range
    """
    if path is None:
        return ConversionConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    return config_from_dict(data)


__all__ = [
    "ConversionConfig",
    "ConfigError",
    "config_from_dict",
    "config_to_dict",
    "load_config",
]
