"""
Configuration loading for mathscan.

Defaults live in mathscan/config/defaults.yaml. A user config (explicit path or
MATHSCAN_CONFIG_PATH) is merged on top, followed by dotted-list overrides.

Examples:
    >>> config = load_config()
    >>> config.scanner.heuristic_brackets
    True

    >>> config = load_config(overrides=["normalizer.paired_delimiters=bare"])
    >>> config.normalizer.paired_delimiters
    'bare'
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "config" / "defaults.yaml"
MATHSCAN_CONFIG_PATH = os.getenv("MATHSCAN_CONFIG_PATH")

PAIRED_DELIMITER_MODES = ("keep", "bare", "pseudo", "auto")


class ConfigError(ValueError):
    """Raised when a configuration value is not recognised."""

    pass


@dataclass
class ScannerConfig:
    heuristic_brackets: bool = True


@dataclass
class HeuristicConfig:
    rules: List[str] = field(default_factory=list)
    function_names: List[str] = field(default_factory=list)


@dataclass
class NormalizerConfig:
    paired_delimiters: str = "auto"
    protected_commands: List[str] = field(default_factory=list)
    max_fraction_passes: int = 10
    restore_row_breaks: bool = True


@dataclass
class DocumentConfig:
    break_tags: List[str] = field(default_factory=lambda: ["br"])
    verbatim_tags: List[str] = field(
        default_factory=lambda: ["pre", "code", "script", "style", "textarea", "math"]
    )
    processed_class: str = "math-processed"
    container_class: str = "math-container"
    error_class: str = "math-error"
    inject_styles: bool = True


@dataclass
class RendererConfig:
    strict: bool = True


@dataclass
class SchedulerConfig:
    batch_budget_ms: float = 16


@dataclass
class MathScanConfig:
    """Complete configuration tree, one dataclass per section."""

    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    heuristic: HeuristicConfig = field(default_factory=HeuristicConfig)
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    document: DocumentConfig = field(default_factory=DocumentConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MathScanConfig":
        """
        Build a config tree from a plain nested dict.

        Raises:
            ConfigError: If a section contains unknown keys or invalid values
        """
        sections = {
            "scanner": ScannerConfig,
            "heuristic": HeuristicConfig,
            "normalizer": NormalizerConfig,
            "document": DocumentConfig,
            "renderer": RendererConfig,
            "scheduler": SchedulerConfig,
        }
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigError(f"Unknown config sections: {sorted(unknown)}")

        built = {}
        for name, section_cls in sections.items():
            values = data.get(name) or {}
            try:
                built[name] = section_cls(**values)
            except TypeError as e:
                raise ConfigError(f"Invalid keys in config section '{name}': {e}") from e

        config = cls(**built)
        config.validate()
        return config

    def validate(self) -> None:
        """Check enumerated values."""
        # Import here to avoid circular dependency
        from mathscan.contexts.scanning.heuristic import SIGNAL_RULES

        if self.normalizer.paired_delimiters not in PAIRED_DELIMITER_MODES:
            raise ConfigError(
                f"Unknown paired_delimiters mode '{self.normalizer.paired_delimiters}'. "
                f"Expected one of: {list(PAIRED_DELIMITER_MODES)}"
            )
        unknown_rules = [rule for rule in self.heuristic.rules if rule not in SIGNAL_RULES]
        if unknown_rules:
            raise ConfigError(
                f"Unknown heuristic rules: {unknown_rules}. Available: {list(SIGNAL_RULES)}"
            )
        if self.normalizer.max_fraction_passes < 1:
            raise ConfigError("normalizer.max_fraction_passes must be at least 1")


def load_config_dict(
    config_path: Optional[Path] = None, overrides: Optional[List[str]] = None
) -> Dict[str, Any]:
    """
    Load defaults, merge a user config and dotted overrides, and resolve to a dict.

    Args:
        config_path: Optional YAML file merged over the defaults
                     (defaults to MATHSCAN_CONFIG_PATH env variable, if set)
        overrides: Dotted-list overrides, e.g. ["scanner.heuristic_brackets=false"]

    Returns:
        Plain nested dict of configuration values

    Raises:
        FileNotFoundError: If the user config path does not exist
    """
    if config_path is None and MATHSCAN_CONFIG_PATH:
        config_path = Path(MATHSCAN_CONFIG_PATH)

    layers = [OmegaConf.load(DEFAULTS_PATH)]

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        layers.append(OmegaConf.load(config_path))

    if overrides:
        layers.append(OmegaConf.from_dotlist(list(overrides)))

    merged = OmegaConf.merge(*layers)
    return OmegaConf.to_container(merged, resolve=True)


def load_config(
    config_path: Optional[Path] = None, overrides: Optional[List[str]] = None
) -> MathScanConfig:
    """
    Load the mathscan configuration tree.

    Args:
        config_path: Optional YAML file merged over the packaged defaults
        overrides: Dotted-list overrides applied last

    Returns:
        Validated MathScanConfig

    Raises:
        ConfigError: If the merged configuration is invalid
        FileNotFoundError: If config_path does not exist
    """
    return MathScanConfig.from_dict(load_config_dict(config_path, overrides))
