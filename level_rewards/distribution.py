"""Distribution of per-network reward totals across a level's fingerprint nodes"""
import logging
import math
import random
from decimal import Decimal
from itertools import cycle, islice
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from level_rewards.config import Settings, settings as default_settings
from level_rewards.conversion import ConversionRates
from level_rewards.exceptions import InvalidInput
from level_rewards.models.level import Level, Node, TransactionStatus
from level_rewards.models.rewards import RewardTotals

logger = logging.getLogger(__name__)

RatesArg = Union[ConversionRates, Mapping[str, float], None]


def random_weights(count: int, rng: random.Random) -> List[float]:
    """Draw a Dirichlet(1, ..., 1) sample: `count` strictly positive weights summing to 1"""
    if count <= 0:
        return []
    if count == 1:
        return [1.0]

    draws = []
    for _ in range(count):
        draw = rng.expovariate(1.0)
        while draw <= 0.0:
            draw = rng.expovariate(1.0)
        draws.append(draw)

    total = math.fsum(draws)
    return [draw / total for draw in draws]


def decimal_places(value: Decimal) -> int:
    """Number of digits after the decimal point needed to write `value` exactly"""
    return max(-value.as_tuple().exponent, 0)


def apportion(total: Decimal, weights: Sequence[float], decimals: int) -> List[Decimal]:
    """
    Split `total` by `weights` into amounts quantized to `decimals` places.

    Works in whole smallest units (10 ** -decimals) using the largest
    remainder method, so the parts always add up to `total` exactly when
    `total` is representable at that precision. When the total spans at
    least one unit per part, no part is left at zero.

    Args:
        total: Non-negative amount to split
        weights: Non-negative weights summing to 1
        decimals: Decimal places of the smallest unit

    Returns:
        List[Decimal]: One amount per weight, in the same order
    """
    count = len(weights)
    if count == 0:
        return []

    units = int(total.scaleb(decimals).to_integral_value())
    shares = [Decimal(weight) * units for weight in weights]
    amounts = [int(share) for share in shares]

    leftover = units - sum(amounts)
    # Weights only sum to 1 up to float error, so leftover can fall outside [0, count)
    while leftover < 0:
        largest = max(range(count), key=amounts.__getitem__)
        amounts[largest] -= 1
        leftover += 1
    by_remainder = sorted(range(count), key=lambda i: shares[i] - amounts[i], reverse=True)
    for i in islice(cycle(by_remainder), leftover):
        amounts[i] += 1

    if units >= count:
        for i in range(count):
            if amounts[i] == 0:
                donor = max(range(count), key=amounts.__getitem__)
                amounts[donor] -= 1
                amounts[i] += 1

    return [Decimal(amount).scaleb(-decimals) for amount in amounts]


class DistributionEngine:
    """Splits reward totals pseudo-randomly across matching fingerprint nodes"""

    def __init__(self,
                 config: Optional[Settings] = None,
                 seed: Optional[int] = None,
                 eligible_statuses: Optional[Iterable[Union[TransactionStatus, str]]] = None):
        """
        Args:
            config: Settings to read precision and currency aliases from
            seed: Seed for a reproducible split; every call starts from it
            eligible_statuses: Only nodes with these transaction statuses
                receive a share. None makes every status eligible.
        """
        self.settings = config or default_settings
        self.seed = seed
        if eligible_statuses is None:
            self.eligible_statuses = None
        else:
            self.eligible_statuses = frozenset(TransactionStatus(s) for s in eligible_statuses)

    def _rng(self) -> random.Random:
        # One generator per call keeps a shared engine safe across threads
        return random.Random(self.seed)

    def validate_totals(self, totals: Mapping[str, Any]) -> RewardTotals:
        """Check totals and return them keyed by normalized network code"""
        if not isinstance(totals, Mapping):
            raise InvalidInput(f"Reward totals must be a mapping, got {type(totals).__name__}")

        checked: Dict[str, float] = {}
        for currency, amount in totals.items():
            if not isinstance(currency, str) or not currency:
                raise InvalidInput(f"Invalid network code: {currency!r}")
            if isinstance(amount, bool) or not isinstance(amount, Real):
                raise InvalidInput(f"Reward total for {currency} must be a number, got {amount!r}")
            amount = float(amount)
            if math.isnan(amount) or math.isinf(amount):
                raise InvalidInput(f"Reward total for {currency} must be finite, got {amount}")
            if amount < 0:
                raise InvalidInput(f"Reward total for {currency} must not be negative, got {amount}")

            network = self.settings.normalize_currency(currency)
            if network in checked:
                raise InvalidInput(f"Reward total for {network} given more than once ({currency})")
            checked[network] = amount
        return checked

    def value_in_usd(self, totals: RewardTotals, conversion_rates: RatesArg) -> RewardTotals:
        """Convert native totals to USD, rounded to USD precision"""
        if isinstance(conversion_rates, ConversionRates):
            rates = conversion_rates
        else:
            rates = ConversionRates(conversion_rates)

        valued = {}
        for network, amount in totals.items():
            rate = rates.get(network)
            if rate is None:
                raise InvalidInput(f"No USD conversion rate for {network}")
            valued[network] = round(amount * rate, self.settings.USD_DECIMALS)
        return valued

    def split_total(self, total: float, count: int, decimals: int,
                    rng: Optional[random.Random] = None) -> List[float]:
        """Split one total into `count` random amounts that add up to it"""
        if count <= 0:
            return []
        if count == 1:
            return [total]

        weights = random_weights(count, rng or self._rng())
        exact = Decimal(str(total))
        places = max(decimals, decimal_places(exact))
        return [float(amount) for amount in apportion(exact, weights, places)]

    def eligible_nodes(self, level: Level) -> Dict[str, List[Node]]:
        """Group eligible fingerprint nodes by normalized network code, in level order"""
        groups: Dict[str, List[Node]] = {}
        for node in level.fingerprint_nodes():
            transaction = node.data.transaction
            if self.eligible_statuses is not None and transaction.status not in self.eligible_statuses:
                continue
            network = self.settings.normalize_currency(transaction.currency)
            groups.setdefault(network, []).append(node)
        return groups

    def distribute(self, level: Level, totals: Mapping[str, Any],
                   conversion_rates: RatesArg = None) -> Level:
        """
        Return a copy of `level` with each network total spread over its nodes.

        Nodes of networks without a positive total, and non-fingerprint
        nodes, keep their data unchanged. Totals for networks with no
        eligible node are dropped.

        Args:
            level: Level to distribute over; never modified
            totals: Network code -> non-negative total
            conversion_rates: When given, totals are valued in USD first and
                node amounts are USD amounts

        Returns:
            Level: New level with updated transaction amounts

        Raises:
            InvalidInput: If the level or a total is malformed
        """
        if not isinstance(level, Level):
            raise InvalidInput(f"Expected a Level, got {type(level).__name__}")

        native = self.validate_totals(totals)
        checked = native
        if conversion_rates is not None:
            checked = self.value_in_usd(native, conversion_rates)

        result = level.model_copy(deep=True)
        groups = self.eligible_nodes(result)
        rng = self._rng()

        for network, total in checked.items():
            nodes = groups.get(network, [])
            # Zero is judged on the native total; a tiny total may still value at 0.00 USD
            if native[network] == 0:
                logger.debug(f"[Level {result.level}] {network}: no reward to distribute")
                continue
            if not nodes:
                logger.debug(f"[Level {result.level}] {network}: no fingerprint nodes, total {total} dropped")
                continue

            if conversion_rates is not None:
                decimals = self.settings.USD_DECIMALS
            else:
                decimals = self.settings.decimals_for(network)

            amounts = self.split_total(total, len(nodes), decimals, rng)
            for node, amount in zip(nodes, amounts):
                node.data.transaction.amount = amount

            logger.info(
                f"[Level {result.level}] {network}: total reward {total}, "
                f"distributed {math.fsum(amounts)} across {len(nodes)} nodes"
            )

        return result

    def distribute_document(self, document: Dict[str, Any], totals: Mapping[str, Any],
                            conversion_rates: RatesArg = None) -> Dict[str, Any]:
        """Same as distribute() for a level JSON document"""
        level = Level.from_document(document)
        return self.distribute(level, totals, conversion_rates).to_document()


def distribute(level: Level, totals: Mapping[str, Any], conversion_rates: RatesArg = None) -> Level:
    """Distribute totals over a level with a default engine"""
    return DistributionEngine().distribute(level, totals, conversion_rates)
