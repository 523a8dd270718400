from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Reward(BaseModel):
    """Reward ledger entry matching the pollen_rewards table."""

    id: str
    pcn: float = 0.0
    pic: float = 0.0
    rse_ratio: float = 0.0
    daily_pic: float = 0.0
    client: str = ""
    coverage: List[str] = Field(default_factory=list)
    date: str = ""
    device: str = ""
    device_type: str = ""
    reward: str = ""
    transaction: str = ""
    transaction_status: str = ""
    wallet: str = ""

    # Set by the database on every upsert
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_db_tuple(self) -> tuple:
        """
        Convert to tuple for UPSERT_REWARD.
        Order matches REWARD_COLUMNS in db/queries/batch.py.
        """
        return (
            self.id,
            self.pcn,
            self.pic,
            self.rse_ratio,
            self.client,
            self.coverage,
            self.daily_pic,
            self.date,
            self.device,
            self.device_type,
            self.reward,
            self.transaction,
            self.transaction_status,
            self.wallet,
        )
