"""
Sync Service - Mirror Pollen explorer hexes, flowers and rewards into Postgres.

Usage:
    from services.sync import Service

    service = Service(api=api, geocoder=cache)
    await service.run(["852a1393fffffff,852a104bfffffff"])
"""

from services.sync.repo import BATCH_SIZE, ISyncRepo, MockRepo, SyncRepo
from services.sync.service import (
    IService,
    Service,
    SyncStats,
    build_flower,
    build_hex,
    build_reward,
)

__all__ = [
    "BATCH_SIZE",
    "ISyncRepo",
    "MockRepo",
    "SyncRepo",
    "IService",
    "Service",
    "SyncStats",
    "build_flower",
    "build_hex",
    "build_reward",
]
