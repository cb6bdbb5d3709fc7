"""
Configuration system for the complexity scanner.

Supports YAML and JSON configuration files for customizing file
discovery, scoring thresholds and output.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".complexityscanner.yaml",
    ".complexityscanner.yml",
    ".complexityscanner.json",
    "complexityscanner.yaml",
    "complexityscanner.yml",
    "complexityscanner.json",
]

DEFAULT_EXCLUDE_PATTERNS = [
    "node_modules",
    ".git",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "*.min.js",
    "*.d.ts",
]


@dataclass
class ScoringConfig:
    """Thresholds and weights used to map metrics onto a 1-10 score."""
    ccn_thresholds: List[int] = field(default_factory=lambda: [5, 10, 15, 20])
    nloc_thresholds: List[int] = field(default_factory=lambda: [20, 50, 100, 200])
    ccn_weight: float = 0.7
    size_weight: float = 0.3
    show_threshold: int = 5

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoringConfig":
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: v for k, v in data.items() if k in known_fields})


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    format: str = "text"  # text, json
    output_file: Optional[str] = None
    verbose: bool = False
    color: bool = True
    show_functions: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: v for k, v in data.items() if k in known_fields})


@dataclass
class AnalyzerConfig:
    """
    Main configuration for the complexity scanner.

    Example YAML config:

    ```yaml
    scan:
      target: ./src
      exclude:
        - "node_modules"
        - "*.min.js"
      include:
        - "*.ts"
        - "*.go"
      max_file_size: 10485760
      max_workers: 4

    default_language: typescript
    extension_overrides:
      .es6: javascript

    scoring:
      ccn_thresholds: [5, 10, 15, 20]
      nloc_thresholds: [20, 50, 100, 200]
      ccn_weight: 0.7
      size_weight: 0.3
      show_threshold: 5

    max_function_ccn: 15

    output:
      format: text
      verbose: false
      color: true
      show_functions: false
    ```
    """
    # Scan settings
    target: str = "."
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    include_patterns: Optional[List[str]] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_workers: int = 4

    # Language settings
    default_language: str = "typescript"
    extension_overrides: Dict[str, str] = field(default_factory=dict)

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Exit with status 1 when any function exceeds this CCN
    max_function_ccn: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalyzerConfig":
        """Create config from a dictionary."""
        data = dict(data)

        # Handle nested configs
        if isinstance(data.get("scoring"), dict):
            data["scoring"] = ScoringConfig.from_dict(data["scoring"])
        if isinstance(data.get("output"), dict):
            data["output"] = OutputConfig.from_dict(data["output"])

        # Map some common alternative names
        if "exclude" in data:
            data["exclude_patterns"] = data.pop("exclude")
        if "include" in data:
            data["include_patterns"] = data.pop("include")

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)


def load_config(path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Supports YAML and JSON formats.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    if path.suffix in (".yaml", ".yml"):
        return yaml.safe_load(content) or {}
    elif path.suffix == ".json":
        return json.loads(content)
    else:
        # Try both
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            return yaml.safe_load(content) or {}


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)
        if current == current.parent:
            return None
        current = current.parent


def load_analyzer_config(path: Optional[str] = None, start_dir: str = ".") -> AnalyzerConfig:
    """
    Load an AnalyzerConfig from a file or create a default one.

    If path is None, searches for a config file starting from start_dir.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return AnalyzerConfig()

    data = load_config(path)

    # Handle nested 'scan' section
    if isinstance(data.get("scan"), dict):
        scan_data = data.pop("scan")
        data.update(scan_data)

    return AnalyzerConfig.from_dict(data)


def create_default_config() -> str:
    """
    Create a default configuration file content.
    """
    defaults = AnalyzerConfig()
    config = {
        "scan": {
            "target": ".",
            "exclude": list(DEFAULT_EXCLUDE_PATTERNS),
            "max_file_size": defaults.max_file_size,
            "max_workers": defaults.max_workers,
        },
        "default_language": defaults.default_language,
        "extension_overrides": {},
        "scoring": asdict(defaults.scoring),
        "max_function_ccn": None,
        "output": {
            "format": "text",
            "verbose": False,
            "color": True,
            "show_functions": False,
        },
    }

    return yaml.dump(config, default_flow_style=False, sort_keys=False)
