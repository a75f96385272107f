"""
License table persistence for the development backend.
"""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

from pydantic import TypeAdapter

from licgate.common.models import ServerLicense

_LICENSE_LIST = TypeAdapter(list[ServerLicense])


class LicenseStore:
    """Loads and saves the backend's license table as JSON."""

    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path
        self.licenses: dict[str, ServerLicense] = {}
        if file_path is not None:
            self.licenses = self.load(file_path)

    @staticmethod
    def load(file_path: Path) -> dict[str, ServerLicense]:
        try:
            with file_path.open() as f:
                entries = _LICENSE_LIST.validate_python(json.load(f))
        except FileNotFoundError:
            return {}
        return {entry.license_key: entry for entry in entries}

    def save(self) -> None:
        if self.file_path is None:
            return
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        with self.file_path.open("w") as f:
            f.write(
                _LICENSE_LIST.dump_json(list(self.licenses.values()), indent=2).decode()
            )

    def get(self, license_key: str) -> ServerLicense | None:
        return self.licenses.get(license_key)

    def add(self, entry: ServerLicense) -> None:
        self.licenses[entry.license_key] = entry
        self.save()
