"""
Learned task taxonomy, stored as <data_dir>/taxonomy.json.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from routeopt.core.discovery.models import Taxonomy
from routeopt.core.fileio import write_json_atomic

logger = logging.getLogger(__name__)

TAXONOMY_FILE = "taxonomy.json"


class TaxonomyStore:
    """Reads and writes the taxonomy record."""

    def __init__(self, data_dir: Path) -> None:
        self.path = Path(data_dir) / TAXONOMY_FILE

    def load(self) -> Taxonomy:
        """The stored taxonomy, or an empty one if missing or unreadable."""
        if not self.path.exists():
            return Taxonomy()
        try:
            with open(self.path, encoding="utf-8") as f:
                return Taxonomy.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Ignoring unreadable taxonomy {self.path}: {e}")
            return Taxonomy()

    def save(self, taxonomy: Taxonomy) -> bool:
        try:
            write_json_atomic(self.path, taxonomy.model_dump(mode="json", by_alias=True, exclude_none=True))
        except OSError as e:
            logger.warning(f"Failed to save taxonomy {self.path}: {e}")
            return False
        return True
