"""Sync Repository - idempotent upserts of hexes, flowers and rewards."""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from db.client import queries, get_conn, get_transaction
from db.models import Flower, Hex, PlaceInfo, Reward
from db.queries.batch import UPSERT_FLOWER, UPSERT_HEX, UPSERT_REWARD

BATCH_SIZE = 200


@runtime_checkable
class ISyncRepo(Protocol):
    """Protocol for the durable store the sync routines write to."""

    async def get_flower_ids(self) -> List[str]:
        """All flower IDs currently stored."""
        ...

    async def upsert_flowers(self, flowers: Sequence[Flower], batch_size: int = BATCH_SIZE) -> int:
        """Upsert flowers in batches. Returns count written."""
        ...

    async def upsert_rewards(self, rewards: Sequence[Reward], batch_size: int = BATCH_SIZE) -> int:
        """Upsert rewards in batches. Returns count written."""
        ...

    async def upsert_hex(self, hex_record: Hex) -> None:
        """Upsert a single hex."""
        ...


def _batches(items: Sequence, batch_size: int):
    for i in range(0, len(items), batch_size):
        yield items[i:i + batch_size]


class SyncRepo(ISyncRepo):
    """Postgres implementation. Each batch is one transaction."""

    async def get_flower_ids(self) -> List[str]:
        async with get_conn() as conn:
            results = await queries.get_flower_ids(conn)
            return [r["id"] for r in results]

    async def upsert_flowers(self, flowers: Sequence[Flower], batch_size: int = BATCH_SIZE) -> int:
        return await self._upsert_batches(UPSERT_FLOWER, flowers, batch_size)

    async def upsert_rewards(self, rewards: Sequence[Reward], batch_size: int = BATCH_SIZE) -> int:
        return await self._upsert_batches(UPSERT_REWARD, rewards, batch_size)

    async def upsert_hex(self, hex_record: Hex) -> None:
        async with get_conn() as conn:
            await conn.execute(UPSERT_HEX, *hex_record.to_db_tuple())

    async def _upsert_batches(self, sql: str, records: Sequence, batch_size: int) -> int:
        written = 0
        for batch in _batches(records, batch_size):
            async with get_transaction() as conn:
                await conn.executemany(sql, [r.to_db_tuple() for r in batch])
            written += len(batch)
        return written

    # =========================================================================
    # Test helpers: reads and deletes used to verify and clean up rows.
    # The sync routines only write.
    # =========================================================================

    async def get_flower(self, flower_id: str) -> Optional[Flower]:
        async with get_conn() as conn:
            result = await queries.get_flower_by_id(conn, id=flower_id)
            if result:
                return Flower.from_row(dict(result))
            return None

    async def get_hex(self, hex_id: str) -> Optional[Hex]:
        async with get_conn() as conn:
            result = await queries.get_hex_by_id(conn, id=hex_id)
            if result:
                return Hex.from_row(dict(result))
            return None

    async def count_flowers(self) -> int:
        async with get_conn() as conn:
            return await queries.count_flowers(conn)

    async def get_rewards_by_device(self, device: str) -> List[Reward]:
        async with get_conn() as conn:
            results = await queries.get_rewards_by_device(conn, device=device)
            return [Reward.model_validate(dict(r)) for r in results]

    async def get_reward(self, reward_id: str) -> Optional[Reward]:
        async with get_conn() as conn:
            result = await queries.get_reward_by_id(conn, id=reward_id)
            if result:
                return Reward.model_validate(dict(result))
            return None

    async def delete_flower(self, flower_id: str) -> None:
        async with get_conn() as conn:
            await queries.delete_flower(conn, id=flower_id)

    async def delete_hex(self, hex_id: str) -> None:
        async with get_conn() as conn:
            await queries.delete_hex(conn, id=hex_id)

    async def delete_reward(self, reward_id: str) -> None:
        async with get_conn() as conn:
            await queries.delete_reward(conn, id=reward_id)


class MockRepo(ISyncRepo):
    """In-memory store with the same last-write-wins upsert semantics."""

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self._clock = clock
        self.flowers: Dict[str, Flower] = {}
        self.hexes: Dict[str, Hex] = {}
        self.rewards: Dict[str, Reward] = {}
        self.batches: List[int] = []  # sizes of each batch written

    async def get_flower_ids(self) -> List[str]:
        return sorted(self.flowers)

    async def upsert_flowers(self, flowers: Sequence[Flower], batch_size: int = BATCH_SIZE) -> int:
        return self._upsert_batches(self.flowers, flowers, batch_size)

    async def upsert_rewards(self, rewards: Sequence[Reward], batch_size: int = BATCH_SIZE) -> int:
        return self._upsert_batches(self.rewards, rewards, batch_size)

    async def upsert_hex(self, hex_record: Hex) -> None:
        self._upsert(self.hexes, hex_record)

    async def get_cached_places(self) -> Dict[str, PlaceInfo]:
        """Same shape as GeocodeRepo.get_cached_places, read from memory."""
        places = {h.id: h.place for h in self.hexes.values()}
        places.update({f.h3_hex: f.place for f in self.flowers.values() if f.h3_hex})
        return places

    def _upsert_batches(self, table: Dict, records: Sequence, batch_size: int) -> int:
        for batch in _batches(records, batch_size):
            for record in batch:
                self._upsert(table, record)
            self.batches.append(len(batch))
        return len(records)

    def _upsert(self, table: Dict, record) -> None:
        table[record.id] = record.model_copy(update={"updated_at": self._clock()})
