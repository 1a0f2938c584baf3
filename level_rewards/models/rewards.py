"""Domain models for per-level network rewards"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, ValidationError
from pydantic.alias_generators import to_camel

from level_rewards.exceptions import InvalidInput

# network code -> total amount to distribute for one (user, level) pair
RewardTotals = Dict[str, float]

USER_REWARDS_FIELD = re.compile(r'^lvl(\d+)NetworkRewards$')


class RewardSource(str, Enum):
    """Where a resolved reward amount came from"""
    USER = 'user'
    GLOBAL = 'global'
    NONE = 'none'


@dataclass
class ResolvedReward:
    network: str
    amount: float
    source: RewardSource

    @property
    def is_custom(self) -> bool:
        return self.source == RewardSource.USER


@dataclass
class ResolvedTotals:
    """Reward amounts for every known network of one level, with provenance"""
    level: int
    rewards: Dict[str, ResolvedReward] = field(default_factory=dict)

    @property
    def totals(self) -> RewardTotals:
        return {network: reward.amount for network, reward in self.rewards.items()}

    @property
    def custom_networks(self) -> List[str]:
        return [network for network, reward in self.rewards.items() if reward.is_custom]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'rewards': {
                network: {
                    'amount': reward.amount,
                    'isCustom': reward.is_custom,
                    'source': reward.source.value,
                }
                for network, reward in self.rewards.items()
            }
        }


@dataclass
class RewardSummary:
    """Active global rewards grouped by level and by network"""
    by_level: Dict[int, Dict[str, float]]
    by_network: Dict[str, Dict[int, float]]
    total_rewards: float


@dataclass
class UsdConversion:
    total_usd: float
    breakdown: Dict[str, Dict[str, float]]


class GlobalNetworkReward(BaseModel):
    """Level-wide default reward for one network, managed by admins"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    level: int = Field(..., ge=1)
    network: str
    reward_amount: float = Field(..., ge=0)
    commission_percent: float = Field(0.0, ge=0, le=100)
    is_active: bool = True


class UserRewardProfile(BaseModel):
    """
    Per-user custom reward amounts, keyed by level and then network.

    A missing or None entry means the user has no override for that slot.
    """
    user_id: Optional[str] = None
    level_rewards: Dict[int, Dict[str, Optional[NonNegativeFloat]]] = Field(default_factory=dict)

    def override(self, level: int, network: str) -> Optional[float]:
        return self.level_rewards.get(level, {}).get(network)

    def rewards_for_level(self, level: int) -> Dict[str, Optional[float]]:
        return dict(self.level_rewards.get(level, {}))

    @classmethod
    def from_user_document(cls, document: Dict[str, Any]) -> 'UserRewardProfile':
        """
        Build a profile from a user account document.

        The account store keeps one object per level named
        ``lvl{N}NetworkRewards``, e.g. ``{"lvl1NetworkRewards": {"BTC": 0.15}}``.
        """
        if not isinstance(document, dict):
            raise InvalidInput(f"User document must be an object, got {type(document).__name__}")

        level_rewards = {}
        for key, value in document.items():
            match = USER_REWARDS_FIELD.match(key)
            if not match or value is None:
                continue
            if not isinstance(value, dict):
                raise InvalidInput(f"{key} must be an object of network amounts")
            level_rewards[int(match.group(1))] = value

        user_id = document.get('_id', document.get('id'))
        try:
            return cls(
                user_id=str(user_id) if user_id is not None else None,
                level_rewards=level_rewards
            )
        except ValidationError as e:
            raise InvalidInput(f"Invalid user reward overrides: {e}") from e
