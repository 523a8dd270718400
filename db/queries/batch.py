"""
Batch SQL queries for executemany operations.

These use positional parameters ($1, $2, etc.) required by asyncpg executemany.
Kept separate from aiosql .sql files which use named parameters.

Every upsert overwrites all non-key columns and bumps updated_at, so the
last write to arrive wins regardless of whether any value changed.
"""

HEX_COLUMNS = (
    "id", "flower_count", "covered",
    "lat", "lng", "address", "suburb", "city", "state", "town", "county",
    "attach", "flowers", "flowers_contained",
    "bounty_reward", "loot_box_reward", "daily_reward", "bounty", "bounty_time",
)

FLOWER_COLUMNS = (
    "id", "bounty_rewards", "display_name", "update_time", "daily_bees_seen",
    "first_seen", "h_bees_seen", "wallet_address", "covered_hexes", "last_seen",
    "daily_attaches", "h3_hex",
    "lat", "lng", "address", "suburb", "city", "state", "town", "county",
    "active", "flower_rewards", "daily_covered_hexes", "nft_address", "nickname",
    "flower_attaches", "daily_h_bees_seen", "daily_rewards", "image_url", "bees_seen",
)

REWARD_COLUMNS = (
    "id", "pcn", "pic", "rse_ratio", "client", "coverage", "daily_pic", "date",
    "device", "device_type", "reward", "transaction", "transaction_status", "wallet",
)


def _upsert(table: str, columns: tuple) -> str:
    quoted = [f'"{c}"' for c in columns]
    params = [f"${i}" for i in range(1, len(columns) + 1)]
    updates = [f"{q} = EXCLUDED.{q}" for q in quoted[1:]]
    updates.append("updated_at = NOW()")
    return (
        f"INSERT INTO {table} ({', '.join(quoted)}, updated_at)\n"
        f"VALUES ({', '.join(params)}, NOW())\n"
        f"ON CONFLICT (id) DO UPDATE SET {', '.join(updates)}"
    )


# Params: Hex.to_db_tuple()
UPSERT_HEX = _upsert("pollen_hexes", HEX_COLUMNS)

# Params: Flower.to_db_tuple()
UPSERT_FLOWER = _upsert("pollen_flowers", FLOWER_COLUMNS)

# Params: Reward.to_db_tuple()
UPSERT_REWARD = _upsert("pollen_rewards", REWARD_COLUMNS)
