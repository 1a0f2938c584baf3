"""USD valuation of network reward amounts"""
import logging
import math
from typing import Dict, Mapping, Optional

from level_rewards.config import Settings, settings as default_settings
from level_rewards.exceptions import InvalidInput
from level_rewards.models.rewards import UsdConversion

logger = logging.getLogger(__name__)


class ConversionRates:
    """USD price per network code"""

    def __init__(self, rates: Mapping[str, float]):
        checked = {}
        for network, rate in rates.items():
            if isinstance(rate, bool) or not isinstance(rate, (int, float)) or math.isnan(rate) or rate < 0:
                raise InvalidInput(f"Conversion rate for {network} must be a non-negative number, got {rate!r}")
            checked[network] = float(rate)
        self.rates: Dict[str, float] = checked

    @classmethod
    def default(cls, config: Optional[Settings] = None) -> 'ConversionRates':
        """Rates configured in DEFAULT_CONVERSION_RATES"""
        config = config or default_settings
        return cls(config.DEFAULT_CONVERSION_RATES)

    def get(self, network: str) -> Optional[float]:
        return self.rates.get(network)

    def convert_to_usd(self, amount: float, network: str) -> float:
        """Convert an amount of `network` to its USD equivalent, 0 when unknown"""
        if not amount or amount <= 0:
            return 0.0

        rate = self.rates.get(network)
        if rate is None:
            logger.warning(f"Unknown currency: {network}")
            return 0.0

        return amount * rate

    def convert_rewards_to_usd(self, rewards: Mapping[str, float]) -> UsdConversion:
        """Value every network amount in USD and add them up"""
        breakdown = {}
        for network, amount in rewards.items():
            breakdown[network] = {
                'original': amount,
                'usd': self.convert_to_usd(amount, network)
            }

        return UsdConversion(
            total_usd=math.fsum(entry['usd'] for entry in breakdown.values()),
            breakdown=breakdown
        )

    def updated(self, new_rates: Mapping[str, float]) -> 'ConversionRates':
        """Return a copy with `new_rates` merged over the current rates"""
        return ConversionRates({**self.rates, **new_rates})
