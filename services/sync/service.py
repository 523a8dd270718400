"""
Sync Service - Pull Pollen hexes, flowers and rewards into Postgres.

Three routines, each idempotent and safe to re-run:
- sync_flowers: full flower list -> geocode -> batched upsert
- sync_rewards: per known flower, its reward history -> batched upsert
- sync_hexes:   per hex in an area, its detail -> geocode -> single upsert

run() chains them in order (flowers, rewards, then each hex group) and stops
at the first error.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel

from db.models import Flower, Hex, PlaceInfo, Reward
from lib.cells import parse_hex_groups
from lib.pollen import FlowerListItem, HexDetail, HexListItem, PollenApiClient, RewardItem
from services.geocoding import GeocodeCache
from services.sync.repo import BATCH_SIZE, ISyncRepo, SyncRepo

PROGRESS_EVERY = 100


class SyncStats(BaseModel):
    """Result of one sync routine."""

    kind: str
    fetched: int = 0
    upserted: int = 0


# =============================================================================
# Record shaping
# =============================================================================

def build_flower(item: FlowerListItem, place: PlaceInfo) -> Flower:
    return Flower(
        id=item.id,
        bounty_rewards=item.bounty_rewards,
        display_name=item.display_name,
        update_time=item.update_time,
        daily_bees_seen=item.daily_bees_seen,
        first_seen=item.first_seen,
        h_bees_seen=item.h_bees_seen,
        wallet_address=item.wallet_address,
        covered_hexes=item.covered_hexes,
        last_seen=item.last_seen,
        daily_attaches=item.daily_attaches,
        h3_hex=item.h3_hex,
        place=place,
        active=item.active,
        flower_rewards=item.flower_rewards,
        daily_covered_hexes=item.daily_covered_hexes,
        nft_address=item.nft_address,
        nickname=item.nickname,
        flower_attaches=item.flower_attaches,
        daily_h_bees_seen=item.daily_h_bees_seen,
        daily_rewards=item.daily_rewards,
        image_url=item.image_url,
        bees_seen=item.bees_seen_blob(),
    )


def build_reward(item: RewardItem) -> Reward:
    return Reward(
        id=item.reward_id,
        pcn=item.pcn,
        pic=item.pic,
        rse_ratio=item.rse_ratio,
        client=item.client,
        coverage=item.coverage,
        daily_pic=item.daily_pic,
        date=item.date,
        device=item.device,
        device_type=item.device_type,
        reward=item.reward,
        transaction=item.transaction,
        transaction_status=item.transaction_status,
        wallet=item.wallet,
    )


def build_hex(item: HexListItem, details: HexDetail, place: PlaceInfo) -> Hex:
    d = details.hex
    return Hex(
        id=item.id,
        flower_count=item.flower_count,
        covered=item.covered,
        place=place,
        attach=d.attach,
        flowers=d.flowers,
        flowers_contained=d.flowers_contained,
        bounty_reward=d.bounty_reward,
        loot_box_reward=d.loot_box_reward,
        daily_reward=d.daily_reward,
        bounty=d.bounty,
        bounty_time=d.bounty_time,
    )


# =============================================================================
# Service
# =============================================================================

class IService(ABC):
    """Sync Service Interface - Mirror Pollen explorer data into the database."""

    @abstractmethod
    async def sync_flowers(self) -> SyncStats:
        """Fetch every flower, geocode it, and upsert in batches."""
        pass

    @abstractmethod
    async def sync_rewards(self) -> SyncStats:
        """Fetch rewards for every stored flower and upsert them per device."""
        pass

    @abstractmethod
    async def sync_hexes(self, hex_group: str) -> SyncStats:
        """
        Fetch the hexes of an area and upsert each with its detail and place.

        Args:
            hex_group: Comma-separated H3 cells bounding the area

        Raises:
            InvalidHexGroupError: If hex_group is malformed
        """
        pass

    @abstractmethod
    async def run(self, hex_groups: Sequence[str] = ()) -> List[SyncStats]:
        """Validate input, then sync flowers, rewards and each hex group in order."""
        pass


class Service(IService):
    def __init__(
        self,
        api: PollenApiClient,
        geocoder: GeocodeCache,
        repo: Optional[ISyncRepo] = None,
        batch_size: int = BATCH_SIZE,
        progress_every: int = PROGRESS_EVERY,
    ) -> None:
        self.api = api
        self.geocoder = geocoder
        self.repo = repo or SyncRepo()
        self.batch_size = batch_size
        self.progress_every = progress_every

    async def sync_flowers(self) -> SyncStats:
        items = await self.api.get_all_flowers()
        logger.info(f"Found {len(items)} flowers")

        flowers: List[Flower] = []
        for i, item in enumerate(items):
            if i % self.progress_every == 0:
                logger.info(f"Flower progress: {i}/{len(items)}")
            place = await self.geocoder.resolve(item.h3_hex)
            flowers.append(build_flower(item, place))

        upserted = await self.repo.upsert_flowers(flowers, batch_size=self.batch_size)
        return SyncStats(kind="flowers", fetched=len(items), upserted=upserted)

    async def sync_rewards(self) -> SyncStats:
        flower_ids = await self.repo.get_flower_ids()
        logger.info(f"Found {len(flower_ids)} reward candidates")

        stats = SyncStats(kind="rewards")
        for i, flower_id in enumerate(flower_ids):
            if i % self.progress_every == 0:
                logger.info(f"Reward progress: {i}/{len(flower_ids)}")

            items = await self.api.get_rewards(flower_id)
            stats.fetched += len(items)
            if not items:
                continue

            rewards = [build_reward(item) for item in items]
            stats.upserted += await self.repo.upsert_rewards(rewards, batch_size=self.batch_size)

        return stats

    async def sync_hexes(self, hex_group: str) -> SyncStats:
        parse_hex_groups([hex_group])

        items = await self.api.get_all_hexes(hex_group)
        logger.info(f"Found {len(items)} hexes")

        stats = SyncStats(kind="hexes", fetched=len(items))
        for i, item in enumerate(items):
            if i % self.progress_every == 0:
                logger.info(f"Hex progress: {i}/{len(items)}")

            # One detail call per hex; upstream has no batch endpoint
            details = await self.api.get_hex_details(item.id)
            place = await self.geocoder.resolve(item.id)
            await self.repo.upsert_hex(build_hex(item, details, place))
            stats.upserted += 1

        return stats

    async def run(self, hex_groups: Sequence[str] = ()) -> List[SyncStats]:
        # Reject bad input before touching the network or the database
        groups = parse_hex_groups(hex_groups)

        results = [
            await self.sync_flowers(),
            await self.sync_rewards(),  # keyed off the flowers just stored
        ]
        for group in groups:
            results.append(await self.sync_hexes(group))

        for r in results:
            logger.info(f"Synced {r.kind}: fetched={r.fetched} upserted={r.upserted}")
        return results
