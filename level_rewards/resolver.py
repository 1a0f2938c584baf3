"""Resolution of per-level network reward totals for a user"""
import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from level_rewards.config import Settings, settings as default_settings
from level_rewards.exceptions import InvalidInput
from level_rewards.models.rewards import (
    GlobalNetworkReward, ResolvedReward, ResolvedTotals, RewardSource, RewardSummary, UserRewardProfile
)

logger = logging.getLogger(__name__)


def user_rewards_for_level(user: Optional[UserRewardProfile], level: int,
                           config: Optional[Settings] = None) -> Dict[str, Optional[float]]:
    """Raw custom overrides a user has for one level, {} when out of range"""
    config = config or default_settings
    if user is None or level < 1 or level > config.LEVEL_COUNT:
        return {}
    return user.rewards_for_level(level)


class RewardSourceResolver:
    """
    Resolves the reward total of every known network for a (user, level).

    A user override wins over the active global default for the slot;
    without either, the network resolves to 0 with provenance `none`.
    """

    def __init__(self,
                 global_rewards: Iterable[GlobalNetworkReward] = (),
                 networks: Optional[List[str]] = None,
                 level_count: Optional[int] = None,
                 config: Optional[Settings] = None):
        self.settings = config or default_settings
        self.networks = list(networks if networks is not None else self.settings.KNOWN_NETWORKS)
        self.level_count = level_count if level_count is not None else self.settings.LEVEL_COUNT

        self._globals: Dict[Tuple[int, str], GlobalNetworkReward] = {}
        for reward in global_rewards:
            if reward.is_active:
                self._globals[(reward.level, reward.network)] = reward

    def _user_override(self, user: Optional[UserRewardProfile], level: int, network: str) -> Optional[float]:
        if user is None:
            return None

        amount = user.override(level, network)
        if amount is None:
            return None
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or math.isnan(amount) or amount < 0:
            raise InvalidInput(f"Custom reward for {network} level {level} must be a non-negative number, got {amount!r}")
        if amount == 0 and self.settings.ZERO_OVERRIDE_IS_UNSET:
            return None
        return float(amount)

    def resolve_reward(self, user: Optional[UserRewardProfile], level: int, network: str) -> ResolvedReward:
        """Resolve one network slot"""
        custom = self._user_override(user, level, network)
        if custom is not None:
            return ResolvedReward(network=network, amount=custom, source=RewardSource.USER)

        default = self._globals.get((level, network))
        if default is not None:
            return ResolvedReward(network=network, amount=default.reward_amount, source=RewardSource.GLOBAL)

        return ResolvedReward(network=network, amount=0.0, source=RewardSource.NONE)

    def resolve_totals(self, user: Optional[UserRewardProfile], level: int) -> ResolvedTotals:
        """Resolve every known network for one level"""
        if level < 1 or level > self.level_count:
            logger.debug(f"Level {level} outside 1..{self.level_count}, no rewards apply")
            return ResolvedTotals(
                level=level,
                rewards={
                    network: ResolvedReward(network=network, amount=0.0, source=RewardSource.NONE)
                    for network in self.networks
                }
            )

        resolved = ResolvedTotals(
            level=level,
            rewards={network: self.resolve_reward(user, level, network) for network in self.networks}
        )
        if user is not None and resolved.custom_networks:
            logger.info(f"User {user.user_id} level {level} custom rewards: {', '.join(resolved.custom_networks)}")
        return resolved

    def resolve_all_levels(self, user: Optional[UserRewardProfile]) -> Dict[int, ResolvedTotals]:
        """Resolve every configured level"""
        return {level: self.resolve_totals(user, level) for level in range(1, self.level_count + 1)}

    def summary(self) -> RewardSummary:
        """Active global defaults grouped by level and by network"""
        by_level: Dict[int, Dict[str, float]] = {}
        by_network: Dict[str, Dict[int, float]] = {}

        active = sorted(self._globals.values(), key=lambda r: (r.level, r.network))
        for reward in active:
            by_level.setdefault(reward.level, {})[reward.network] = reward.reward_amount
            by_network.setdefault(reward.network, {})[reward.level] = reward.reward_amount

        return RewardSummary(
            by_level=by_level,
            by_network=by_network,
            total_rewards=math.fsum(r.reward_amount for r in active)
        )
