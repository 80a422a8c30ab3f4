import asyncio
import os
from pathlib import Path
from loguru import logger
from config import config_manager
from core.clock import SystemClock
from infrastructure.api.airplanes_live_client import AirplanesLiveClient
from infrastructure.database.json_ledger_store import JsonLedgerStore
from infrastructure.database.supabase_provider import SupabaseLedgerStore
from log.logger_config import configure_logger
from monitoring.healthchecks import HealthcheckPinger
from services.filter_service import FilterService
from services.notification_service import NotificationService
from services.photo_resolver import PhotoResolver
from services.sighting_ledger import SightingLedger
from services.sighting_service import SightingService
from socials.message_builder import MessageComposer

# Load environment variables
from dotenv import load_dotenv
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent


def build_ledger_store(config):
    sightings = config['sightings']
    if sightings.get('store') == 'supabase':
        supabase_url = os.getenv("SUPABASE_URL")
        supabase_key = os.getenv("SUPABASE_KEY")
        if supabase_url and supabase_key:
            return SupabaseLedgerStore(supabase_url, supabase_key, table=sightings.get('table', 'sightings'))
        logger.error("SUPABASE_URL and SUPABASE_KEY must be set to use the Supabase store. Falling back to JSON.")

    data_file = Path(sightings.get('data_file', 'data/db.json'))
    if not data_file.is_absolute():
        data_file = PROJECT_ROOT / data_file
    return JsonLedgerStore(data_file)


def build_service(config) -> SightingService:
    clock = SystemClock()
    ledger = SightingLedger(build_ledger_store(config))
    return SightingService(
        feed=AirplanesLiveClient.from_config(config, clock=clock),
        ledger=ledger,
        composer=MessageComposer.from_config(config),
        photo_resolver=PhotoResolver.from_config(config),
        notification_service=NotificationService(), # Auto-loads plugins
        filter_service=FilterService.from_config(config),
        config=config,
        clock=clock,
        healthchecks=HealthcheckPinger(config['healthchecks'].get('ping_url')),
    )


def _log_tick_result(task: asyncio.Task):
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.opt(exception=exc).error(f"Poll tick raised: {exc}")


async def run_forever(service: SightingService, interval: float):
    """Schedule a tick every interval. A tick that finds the previous cycle running is skipped."""
    in_flight = set()
    try:
        while True:
            task = asyncio.create_task(service.tick())
            in_flight.add(task)
            task.add_done_callback(in_flight.discard)
            task.add_done_callback(_log_tick_result)
            await asyncio.sleep(interval)
    finally:
        if in_flight:
            logger.info("Waiting for the in-flight cycle to finish...")
            await asyncio.gather(*in_flight, return_exceptions=True)


async def main():
    # 1. Load Config
    config = config_manager.load_config()
    configure_logger(config)
    logger.info("Starting Overhead Spotter")

    feed = config['feed']
    logger.info(f"Watching {feed['radius']} nm around {feed['latitude']},{feed['longitude']}")

    # 2. Initialize Services
    service = build_service(config)
    await service.ledger.load()

    # 3. Run Loop
    interval = config['execution']['poll_interval_seconds']
    try:
        await run_forever(service, interval)
    except asyncio.CancelledError:
        logger.info("Stopping...")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped.")
