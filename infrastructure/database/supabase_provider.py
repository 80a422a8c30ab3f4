import asyncio
from typing import Dict, Any, List, Optional
from loguru import logger
from supabase import create_client, Client
from core.interfaces import LedgerStore


class SupabaseLedgerStore(LedgerStore):
    """Sighting ledger kept in a Supabase table with one row per hex."""

    def __init__(self, url: str, key: str, table: str = "sightings", client: Optional[Client] = None):
        self.supabase: Client = client or create_client(url, key)
        self.table = table

    def _select_all(self) -> List[Dict[str, Any]]:
        response = self.supabase.table(self.table).select("hex,timestamps").execute()
        return response.data or []

    def _upsert(self, records: List[Dict[str, Any]]):
        return self.supabase.table(self.table).upsert(records, on_conflict="hex").execute()

    async def read(self) -> Any:
        try:
            return await asyncio.to_thread(self._select_all)
        except Exception as e:
            logger.error(f"Error fetching sightings from Supabase: {e}")
            return []

    async def write(self, records: List[Dict[str, Any]]) -> bool:
        if not records:
            return True
        try:
            await asyncio.to_thread(self._upsert, records)
            return True
        except Exception as e:
            logger.error(f"Error upserting {len(records)} sightings to Supabase: {e}")
            return False
