"""
Portal table loading and validation.
"""
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from pydantic import ValidationError

from .errors import ConfigurationError
from ..models.schema import PortalConfig

logger = logging.getLogger(__name__)

DEFAULT_PORTAL = "bnpnet"


class PortalRegistry:
    """Loads the portal tables shipped in a directory of YAML files."""

    def __init__(self, portals_dir: Path = None):
        self.portals_dir = portals_dir or Path(__file__).parent.parent / "portals"
        self.portals: Dict[str, PortalConfig] = {}
        self._load_portals()

    def _load_portals(self):
        """Load all available portal tables."""
        if not self.portals_dir.exists():
            logger.warning(f"Portals directory not found: {self.portals_dir}")
            return

        for yaml_file in sorted(self.portals_dir.glob("*.yaml")):
            portal = load_portal_file(yaml_file)
            self.portals[portal.portal_id] = portal
            logger.debug(f"Loaded portal: {portal.portal_id}")

    def get_portal(self, portal_id: str) -> PortalConfig:
        """Get a portal table by ID."""
        portal = self.portals.get(portal_id)
        if portal is None:
            raise ConfigurationError(f"Portal not found: {portal_id}")
        return portal

    def list_portals(self) -> List[str]:
        """List all available portal IDs."""
        return list(self.portals.keys())


def load_portal_file(path: Path) -> PortalConfig:
    """
    Read and validate a single portal table.

    Args:
        path: Path to a YAML file

    Returns:
        PortalConfig object

    Raises:
        ConfigurationError: if the file is missing, unreadable or invalid
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read portal table {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in portal table {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Portal table {path} must be a mapping")

    try:
        return PortalConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid portal table {path}: {e}") from e


def load_portal(portal: Optional[Union[PortalConfig, str, Path]] = None) -> PortalConfig:
    """
    Resolve the portal table to use.

    Args:
        portal: A PortalConfig, a path to a YAML file, or None for the default

    Returns:
        PortalConfig object
    """
    if isinstance(portal, PortalConfig):
        return portal
    if portal is None:
        return PortalRegistry().get_portal(DEFAULT_PORTAL)
    return load_portal_file(Path(portal))
