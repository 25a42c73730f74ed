# quill: Lightweight YAML settings loader. Reads the user-level file first and lets a project-level .quill/settings.yaml override it section by section.

from __future__ import annotations

import pathlib
from typing import Any, Dict, List, Optional

import yaml


def _read_mapping(p: pathlib.Path) -> Optional[Dict[str, Any]]:
    """Return the YAML mapping at p, {} for a non-mapping document, None when absent or unreadable."""
    try:
        if p.exists() and p.is_file():
            data = yaml.safe_load(p.read_text(encoding="utf-8"))
            # quill: Non-mapping YAML is treated as empty settings.
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None
    return None


def settings_candidates(cwd: pathlib.Path, home: pathlib.Path) -> List[pathlib.Path]:
    """Candidate files in increasing precedence order."""
    out: List[pathlib.Path] = []
    for root in (home, cwd):
        d = pathlib.Path(root) / ".quill"
        out.extend([d / "settings.yaml", d / "settings.yml"])
    return out


def load_settings(cwd: Optional[pathlib.Path] = None, home: Optional[pathlib.Path] = None) -> Dict[str, Any]:
    """
    Load Quill settings from ~/.quill/settings.yaml and ./.quill/settings.yaml.

    The first readable file in each directory is used (.yaml before .yml).
    Top-level sections that are mappings are merged key by key, so a project
    file can override only api.model and keep the user's api.api_key.
    Returns {} when nothing is found. The function never raises.
    """
    cwd = pathlib.Path(cwd) if cwd else pathlib.Path.cwd()
    home = pathlib.Path(home) if home else pathlib.Path.home()
    merged: Dict[str, Any] = {}
    seen_dirs = set()
    for p in settings_candidates(cwd, home):
        if p.parent in seen_dirs:
            continue
        data = _read_mapping(p)
        if data is None:
            continue
        seen_dirs.add(p.parent)
        for key, value in data.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
    return merged


def section(settings: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return settings[name] if it is a mapping, else {}."""
    value = settings.get(name) if isinstance(settings, dict) else None
    return value if isinstance(value, dict) else {}
