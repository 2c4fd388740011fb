"""Session factory: loads configuration and wires an editor for a host UI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from circuitmap import __version__
from circuitmap.config import CircuitMapConfig
from circuitmap.editor.history import Scheduler
from circuitmap.editor.session import EditorSession
from circuitmap.observability.logging import setup_logging
from circuitmap.wiring.catalog import DefinitionCatalog

logger = logging.getLogger(__name__)


def create_session(
    config: CircuitMapConfig | None = None,
    catalog_path: str | Path | None = None,
    scheduler: Optional[Scheduler] = None,
) -> EditorSession:
    """Build a ready-to-use EditorSession."""
    if config is None:
        config = CircuitMapConfig.from_yaml()
    setup_logging(config.log_level)

    catalog = DefinitionCatalog.from_yaml(catalog_path) if catalog_path else DefinitionCatalog()
    session = EditorSession(config, catalog, scheduler)
    logger.info("circuitmap %s session ready (%d definitions)", __version__, len(catalog))
    return session
