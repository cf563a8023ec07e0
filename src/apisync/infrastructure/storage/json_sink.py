"""Persistence sink writing record sets as JSON files"""

import json
import logging
from pathlib import Path
from typing import Any, Union

from apisync.domain.models.errors import PersistenceError

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Writes serialized record sets to files under a base directory"""

    def __init__(self, base_dir: Union[str, Path] = "."):
        self.base_dir = Path(base_dir)

    def resolve(self, destination: str) -> Path:
        """Resolve a destination to a path inside the base directory

        Raises:
            PersistenceError: If the destination escapes the base directory
        """
        base = self.base_dir.resolve()
        path = (base / destination).resolve()
        if path != base and base not in path.parents:
            raise PersistenceError(f"destination {destination!r} is outside {self.base_dir}")
        return path

    def write(self, destination: str, records: Any) -> Path:
        """Serialize ``records`` and write them to ``destination``

        Args:
            destination: File name relative to the base directory
            records: JSON-serializable record set

        Returns:
            Path of the written file

        Raises:
            PersistenceError: If serialization or writing fails
        """
        path = self.resolve(destination)
        try:
            content = json.dumps(records, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"cannot serialize records for {destination}: {e}") from e

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(f"cannot write {path}: {e}") from e

        logger.info(f"Saved {path}")
        return path
