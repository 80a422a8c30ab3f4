import asyncio
from typing import Any, Dict, List, Optional
from loguru import logger
from config.config_manager import cooldown_ms
from core.clock import Clock, SystemClock
from core.interfaces import FeedSource
from core.models import AircraftSnapshot, CycleSummary
from monitoring.healthchecks import HealthcheckPinger
from services.filter_service import FilterService
from services.notification_service import NotificationService
from services.photo_resolver import PhotoResolver
from services.sighting_ledger import SightingLedger
from socials.message_builder import MessageComposer, build_photo_attachment, resolve_identity


class SightingService:
    def __init__(
        self,
        feed: FeedSource,
        ledger: SightingLedger,
        composer: MessageComposer,
        photo_resolver: PhotoResolver,
        notification_service: NotificationService,
        filter_service: FilterService,
        config: Dict[str, Any],
        clock: Optional[Clock] = None,
        healthchecks: Optional[HealthcheckPinger] = None,
    ):
        self.feed = feed
        self.ledger = ledger
        self.composer = composer
        self.photo_resolver = photo_resolver
        self.notification_service = notification_service
        self.filter_service = filter_service
        self.config = config
        self.clock = clock or SystemClock()
        self.healthchecks = healthchecks or HealthcheckPinger(None)
        self._cycle_in_progress = False

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_in_progress

    async def tick(self) -> CycleSummary:
        """
        Run one poll cycle unless the previous one is still running.
        Overlapping ticks are skipped, not queued. Nothing raised inside a cycle escapes.
        """
        if self._cycle_in_progress:
            logger.debug("Previous cycle still running, skipping tick")
            return CycleSummary(skipped=True)

        self._cycle_in_progress = True
        started_at = self.clock.now()
        try:
            await self.healthchecks.ping_start()
            summary = await self.process_cycle(started_at)
            await self.healthchecks.ping_success(summary.model_dump())
            return summary
        except Exception as e:
            logger.exception(f"Poll cycle failed: {e}")
            summary = CycleSummary(
                tracking=self.ledger.tracking_count,
                elapsed_ms=self.clock.now() - started_at,
                error=str(e),
            )
            await self.healthchecks.ping_failure(summary.model_dump())
            return summary
        finally:
            self._cycle_in_progress = False

    def _unique_by_hex(self, snapshots: List[AircraftSnapshot]) -> List[AircraftSnapshot]:
        unique: Dict[str, AircraftSnapshot] = {}
        for snapshot in snapshots:
            if snapshot.hex and snapshot.hex not in unique:
                unique[snapshot.hex] = snapshot
        return list(unique.values())

    async def process_cycle(self, now: int) -> CycleSummary:
        """
        Main execution cycle:
        1. Fetch the aircraft inside the radius
        2. Filter and deduplicate by hex
        3. Notify for every aircraft out of cooldown
        4. Persist the ledger once
        """
        snapshots = await self.feed.fetch_aircraft()

        accepted = self.filter_service.filter(snapshots)
        rejected = len(snapshots) - len(accepted)

        candidates = self._unique_by_hex(accepted)
        results = await asyncio.gather(*(self.process_aircraft(snapshot, now) for snapshot in candidates))
        notified = sum(1 for result in results if result)

        persisted = await self.ledger.persist()

        summary = CycleSummary(
            aircraft_count=len(snapshots),
            inspected=len(candidates),
            rejected=rejected,
            notified=notified,
            tracking=self.ledger.tracking_count,
            elapsed_ms=self.clock.now() - now,
            persisted=persisted,
        )
        if notified:
            logger.success(f"Cycle completed: {notified} notification(s) for {len(candidates)} aircraft")
        else:
            logger.info(f"Cycle completed: {len(candidates)} aircraft inspected, nothing new")
        return summary

    async def process_aircraft(self, snapshot: AircraftSnapshot, now: int) -> bool:
        """Notify for one aircraft if its cooldown has elapsed. Returns True when a notification went out."""
        hex_code = snapshot.hex
        if not self.ledger.should_notify(hex_code, now, cooldown_ms(self.config)):
            return False

        try:
            timestamps = self.ledger.timestamps(hex_code) + [now]
            message = self.composer.compose(snapshot, timestamps, now)

            photo = await self.photo_resolver.resolve(hex=hex_code, registration=snapshot.registration)
            attachment = build_photo_attachment(snapshot, photo)
            if attachment:
                message = message.model_copy(update={"attachments": [attachment]})

            identity = resolve_identity(snapshot)
            logger.info(f"Notifying for {identity} ({hex_code})")
            delivered = await self.notification_service.notify(message, self.config, title=f"{identity} spotted nearby")
            if not delivered:
                logger.warning(f"No notifier delivered the sighting of {identity}")
        except Exception as e:
            logger.error(f"Failed to process aircraft {hex_code}: {e}")
            return False

        self.ledger.record(hex_code, now)
        return True
