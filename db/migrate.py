"""
Schema bootstrap for the pollen tables.

Creates missing tables, adds missing columns to existing ones, and creates
the reward lookup index. Never drops or alters existing columns.
"""

from loguru import logger

from db.client import get_conn

TABLES = {
    "pollen_hexes": {
        "id": "TEXT PRIMARY KEY",
        "flower_count": "BIGINT",
        "covered": "BIGINT",
        "lat": "DOUBLE PRECISION",
        "lng": "DOUBLE PRECISION",
        "address": "TEXT",
        "suburb": "TEXT",
        "city": "TEXT",
        "state": "TEXT",
        "town": "TEXT",
        "county": "TEXT",
        "attach": "BIGINT",
        "flowers": "TEXT[]",
        "flowers_contained": "TEXT[]",
        "bounty_reward": "DOUBLE PRECISION",
        "loot_box_reward": "BIGINT",
        "daily_reward": "BIGINT",
        "bounty": "TEXT",
        "bounty_time": "TEXT",
        "updated_at": "TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP",
    },
    "pollen_flowers": {
        "id": "TEXT PRIMARY KEY",
        "bounty_rewards": "BIGINT",
        "display_name": "TEXT",
        "update_time": "TEXT",
        "daily_bees_seen": "TEXT[]",
        "first_seen": "TEXT",
        "h_bees_seen": "TEXT[]",
        "wallet_address": "TEXT",
        "covered_hexes": "TEXT[]",
        "last_seen": "TEXT",
        "daily_attaches": "BIGINT",
        "h3_hex": "TEXT",
        "lat": "DOUBLE PRECISION",
        "lng": "DOUBLE PRECISION",
        "address": "TEXT",
        "suburb": "TEXT",
        "city": "TEXT",
        "state": "TEXT",
        "town": "TEXT",
        "county": "TEXT",
        "active": "BIGINT",
        "flower_rewards": "DOUBLE PRECISION",
        "daily_covered_hexes": "TEXT[]",
        "nft_address": "TEXT",
        "nickname": "TEXT",
        "flower_attaches": "BIGINT",
        "daily_h_bees_seen": "TEXT[]",
        "daily_rewards": "DOUBLE PRECISION",
        "image_url": "TEXT",
        "bees_seen": "TEXT",
        "updated_at": "TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP",
    },
    "pollen_rewards": {
        "id": "TEXT PRIMARY KEY",
        "pcn": "DOUBLE PRECISION",
        "pic": "DOUBLE PRECISION",
        "rse_ratio": "DOUBLE PRECISION",
        "client": "TEXT",
        "coverage": "TEXT[]",
        "daily_pic": "DOUBLE PRECISION",
        "date": "TEXT",
        "device": "TEXT",
        "device_type": "TEXT",
        "reward": "TEXT",
        "transaction": "TEXT",
        "transaction_status": "TEXT",
        "wallet": "TEXT",
        "updated_at": "TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP",
    },
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_pollen_rewards_device ON pollen_rewards (device, date DESC)",
]


def create_table_sql(table: str, columns: dict) -> str:
    cols = ",\n    ".join(f'"{name}" {ddl}' for name, ddl in columns.items())
    return f"CREATE TABLE IF NOT EXISTS {table} (\n    {cols}\n)"


def add_column_sql(table: str, name: str, ddl: str) -> str:
    # PRIMARY KEY can't be added after the fact; id always exists anyway
    ddl = ddl.replace(" PRIMARY KEY", "")
    return f'ALTER TABLE {table} ADD COLUMN IF NOT EXISTS "{name}" {ddl}'


async def ensure_schema() -> None:
    """Create tables, add any missing columns, and create indexes."""
    async with get_conn() as conn:
        for table, columns in TABLES.items():
            await conn.execute(create_table_sql(table, columns))
            for name, ddl in columns.items():
                if name == "id":
                    continue
                await conn.execute(add_column_sql(table, name, ddl))
            logger.debug(f"Schema ok: {table}")

        for index in INDEXES:
            await conn.execute(index)
