"""Publisher configuration file management.

Reads and writes the .perfpublisher JSON file that holds the metrics
backend location, the known brands and server pools, and the report file
names looked for in a build workspace.  Keys missing from the file take
their value from DEFAULT_CONFIG; keys of the wrong type are ignored.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "graphite_url": "http://graphite.localdomain/render?",
    "brands": {
        "sfly": "Shutterfly",
        "tp": "Tinyprints",
    },
    "primary_brand": "sfly",
    "server_pools": {},
    "report_marker": "global_stats.json",
    "assertions_file": "assertions.json",
    "archive_dir_name": "simulations",
}

_STRING_KEYS = frozenset({
    "graphite_url", "primary_brand", "report_marker",
    "assertions_file", "archive_dir_name",
})
_MAPPING_KEYS = frozenset({"brands", "server_pools"})


def _merge(data: dict[str, Any]) -> dict[str, Any]:
    """Layer the usable entries of *data* over the defaults."""
    merged = dict(DEFAULT_CONFIG)
    for key, value in data.items():
        if key in _STRING_KEYS and isinstance(value, str) and value:
            merged[key] = value
        elif key in _MAPPING_KEYS and isinstance(value, dict):
            merged[key] = {str(k).lower(): str(v) for k, v in value.items()}
        elif key not in DEFAULT_CONFIG:
            print(f"config: ignoring unknown key {key!r}", file=sys.stderr)
    return merged


class PublisherConfig:
    """Manages the .perfpublisher JSON configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._data = _merge(self._read(path))

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            print(f"config: cannot read {path}, using defaults: {e}", file=sys.stderr)
            return {}
        if not isinstance(data, dict):
            print(f"config: {path} is not a JSON object, using defaults", file=sys.stderr)
            return {}
        return data

    def save(self) -> None:
        """Write config to the file."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)
            f.write("\n")

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def graphite_url(self) -> str:
        """Get the render endpoint every trend URL starts with."""
        return self._data["graphite_url"]

    @property
    def brands(self) -> dict[str, str]:
        """Get the known brands, keyed by lower-case short name."""
        return dict(self._data["brands"]) or dict(DEFAULT_CONFIG["brands"])

    @property
    def primary_brand(self) -> str:
        """Get the brand whose environments are addressed without a prefix."""
        return self._data["primary_brand"].lower()

    @property
    def server_pools(self) -> dict[str, str]:
        """Get server pool short names, keyed by lower-case long name."""
        return dict(self._data["server_pools"])

    @property
    def report_marker(self) -> str:
        return self._data["report_marker"]

    @property
    def assertions_file(self) -> str:
        return self._data["assertions_file"]

    @property
    def archive_dir_name(self) -> str:
        return self._data["archive_dir_name"]

    def set_config(
        self,
        graphite_url: str | None = None,
        primary_brand: str | None = None,
        brands: dict[str, str] | None = None,
        server_pools: dict[str, str] | None = None,
    ) -> None:
        """Update configuration values; None leaves a value unchanged.

        Brand and pool entries are added to (or replace entries of) the
        existing tables rather than replacing them wholesale.
        """
        updates: dict[str, Any] = {}
        if graphite_url is not None:
            updates["graphite_url"] = graphite_url
        if primary_brand is not None:
            updates["primary_brand"] = primary_brand.lower()
        if brands:
            updates["brands"] = {**self._data["brands"], **brands}
        if server_pools:
            updates["server_pools"] = {**self._data["server_pools"], **server_pools}
        self._data = _merge({**self._data, **updates})
