"""Configuration management utilities for the scorecard tools.

Provides:
- Config, a base class with dict/JSON round-tripping
- AuditConfig, the settings of one batch audit run
- KnownValues, fixed lookup tables (company keywords)
"""

from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple
import json


class Config:
    """Base configuration class for organizing application settings."""

    def __init__(self):
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all public config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary, starting from the class defaults.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance with values from dictionary
        """
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config

    def save_json(self, path: Path) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_json(cls, path: Path) -> "Config":
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


class AuditConfig(Config):
    """Configuration for a batch scorecard audit."""

    # JSON values are converted to these types on load
    FIELD_TYPES = {"workers": int, "category_tolerance": float, "expected_categories": int}

    def __init__(self):
        super().__init__()
        self.workers = 1                       # 0 = auto, 1 = in-process
        self.extensions = [".xlsx", ".xlsm"]
        self.temp_prefix = "~"                 # Excel lock files: ~$Book.xlsx
        self.logs_dir = "logs/audit"
        # Validator thresholds, applied uniformly to every format
        self.category_tolerance = 1.0
        self.expected_categories = 4

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditConfig":
        """Create an audit config from a dictionary, converting typed fields.

        Raises:
            ValueError: If a typed field holds a value of the wrong kind
        """
        config = super().from_dict(data)
        for key, kind in cls.FIELD_TYPES.items():
            value = getattr(config, key)
            try:
                setattr(config, key, kind(value))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid {key!r} in audit config: {value!r}") from e
        if isinstance(config.extensions, str):
            config.extensions = [config.extensions]
        return config

    @property
    def suffixes(self) -> frozenset:
        return frozenset(ext.lower() for ext in self.extensions)


class KnownValues:
    """Known lookup tables for scorecard batches."""

    UNKNOWN_COMPANY = "Unknown Company"

    # Checked in order against the lower-cased document path; first hit wins
    COMPANY_KEYWORDS: List[Tuple[Tuple[str, ...], str]] = [
        (("columbia", "vincero"), "Columbia Vincero"),
        (("envision",), "Envision"),
        (("northern",), "Northern"),
        (("olympus",), "Olympus"),
        (("three rivers", "three_rivers", "threerivers"), "Three Rivers"),
    ]

    @classmethod
    def company_for_path(cls, path_text: str) -> str:
        """Infer the company from any substring of a document path.

        Args:
            path_text: Path (or path fragment) of the document

        Returns:
            Company name, or UNKNOWN_COMPANY when no keyword matches
        """
        lowered = path_text.lower()
        for keywords, company in cls.COMPANY_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return company
        return cls.UNKNOWN_COMPANY

    @classmethod
    def is_known_company(cls, company: Optional[str]) -> bool:
        return bool(company) and company != cls.UNKNOWN_COMPANY
