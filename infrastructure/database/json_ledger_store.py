import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Union
from loguru import logger
from core.interfaces import LedgerStore


class JsonLedgerStore(LedgerStore):
    """Sighting ledger kept in a local JSON document: ``{"sightings": [...]}``."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_sync(self) -> Any:
        if not self.path.exists():
            logger.info(f"No sighting ledger at {self.path}, starting fresh")
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except ValueError as e:
            corrupt_path = self.path.with_name(f"{self.path.name}.corrupt")
            logger.warning(f"Sighting ledger {self.path} is corrupt ({e}), moving it to {corrupt_path}")
            try:
                os.replace(self.path, corrupt_path)
            except OSError as move_error:
                logger.error(f"Could not move corrupt sighting ledger aside: {move_error}")
            return []
        except OSError as e:
            logger.error(f"Could not read sighting ledger {self.path}: {e}")
            return []

    def _write_sync(self, records: List[Dict[str, Any]]) -> bool:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"sightings": records}, f, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except OSError as e:
            logger.error(f"Could not write sighting ledger {self.path}: {e}")
            return False

    async def read(self) -> Any:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, records: List[Dict[str, Any]]) -> bool:
        return await asyncio.to_thread(self._write_sync, records)
