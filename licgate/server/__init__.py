"""
Entry point for the development license backend.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import uvicorn

from licgate.common.config import Config

from .core import LicenseServer

if TYPE_CHECKING:
    from pathlib import Path


def start_server(
    config: Config | None = None,
    licenses_file: Path | None = None,
    *,
    accept_any: bool = False,
) -> None:
    """Start the development backend."""
    if config is None:
        config = Config()
    logging.basicConfig(level=config.LOG_LEVEL)
    server = LicenseServer(
        licenses_file or config.SERVER_LICENSES_PATH, accept_any=accept_any
    )
    uvicorn.run(server.app, host=config.SERVER_HOST, port=config.SERVER_PORT)


__all__ = ["LicenseServer", "start_server"]
