from __future__ import annotations

import json
import os
from copy import deepcopy
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml

_SETTINGS_DIR = Path.home() / ".readmark"
_SETTINGS_FILE = _SETTINGS_DIR / "reader_settings.json"
_DEFAULT_CONFIG_FILE = Path(__file__).resolve().parent.parent / "configs" / "reader.yaml"


def get_config(config_file):
    assert os.path.isfile(config_file), f"Config file not found: {config_file}"
    with open(config_file, "r") as cf:
        parsed_yaml = yaml.load(cf, Loader=yaml.FullLoader)
    return parsed_yaml or {}


def merge_configs(config_list):
    assert len(config_list) > 0
    merged_config = {}
    for cl in config_list:
        merged_config.update(cl)
    return merged_config


@dataclass
class ReaderSettings:
    """Tunables for segmentation, rectangle merging and highlight styling."""

    pdf_scale: float = 2.0
    line_height_tolerance: float = 1.5
    line_tolerance_multiplier: float = 2.0
    gap_tolerance_multiplier: float = 6.0
    min_gap_px: float = 12.0
    gap_width_ratio: float = 0.8
    filter_page_numbers: bool = True
    reading_highlight_color: str = "#facc5a"
    reading_highlight_style: str = "underline"
    annotation_color: str = "#90ee90"

    def __post_init__(self) -> None:
        self.pdf_scale = float(self.pdf_scale)
        self.line_height_tolerance = float(self.line_height_tolerance)
        self.line_tolerance_multiplier = float(self.line_tolerance_multiplier)
        self.gap_tolerance_multiplier = float(self.gap_tolerance_multiplier)
        self.min_gap_px = float(self.min_gap_px)
        self.gap_width_ratio = float(self.gap_width_ratio)
        self.filter_page_numbers = bool(self.filter_page_numbers)
        if self.reading_highlight_style not in {"highlight", "underline"}:
            self.reading_highlight_style = "underline"

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ReaderSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (payload or {}).items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def highlight_style(self) -> Dict[str, str]:
        """Colours and reading-highlight style handed to the renderer."""
        return {
            "reading_color": self.reading_highlight_color,
            "reading_style": self.reading_highlight_style,
            "annotation_color": self.annotation_color,
        }


def default_reader_settings() -> Dict[str, Any]:
    """Return a copy of the default reader settings."""
    return ReaderSettings().to_dict()


def settings_from_yaml(config_file=None) -> ReaderSettings:
    """Build settings from a YAML file, defaulting to the packaged config."""
    path = Path(config_file) if config_file else _DEFAULT_CONFIG_FILE
    parsed = get_config(str(path))
    reader = parsed.get("reader", parsed) if isinstance(parsed, dict) else {}
    merged = merge_configs([default_reader_settings(), dict(reader or {})])
    return ReaderSettings.from_dict(merged)


def load_reader_settings() -> ReaderSettings:
    """Load reader settings from disk, falling back to defaults."""
    if not _SETTINGS_FILE.exists():
        return ReaderSettings()

    try:
        with _SETTINGS_FILE.open("r", encoding="utf-8") as fh:
            persisted = json.load(fh)
    except (json.JSONDecodeError, OSError):
        return ReaderSettings()

    merged = deepcopy(default_reader_settings())
    if isinstance(persisted, dict):
        merged.update(persisted)
    return ReaderSettings.from_dict(merged)


def save_reader_settings(settings: Dict[str, Any]) -> None:
    """Persist (and merge) reader settings to disk."""
    merged = load_reader_settings().to_dict()
    if isinstance(settings, ReaderSettings):
        settings = settings.to_dict()
    if isinstance(settings, dict):
        merged.update(settings)
    merged = ReaderSettings.from_dict(merged).to_dict()
    _SETTINGS_DIR.mkdir(parents=True, exist_ok=True)
    with _SETTINGS_FILE.open("w", encoding="utf-8") as fh:
        json.dump(merged, fh, indent=2)
