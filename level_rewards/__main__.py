"""Entry point for per-user level reward distribution"""
import json
import logging
import os
import sys
import traceback
from typing import Any, List, Optional

from level_rewards.config import settings
from level_rewards.distribution import DistributionEngine
from level_rewards.exceptions import InvalidInput
from level_rewards.models.level import Level
from level_rewards.models.rewards import GlobalNetworkReward, UserRewardProfile
from level_rewards.resolver import RewardSourceResolver
from level_rewards.services.rates import CoinGeckoRatesClient

logging.basicConfig(level=settings.LOG_LEVEL, format='%(message)s')
logger = logging.getLogger(__name__)

LEVEL_FILE = 'level.json'
PROFILE_FILE = 'profile.json'
GLOBAL_REWARDS_FILE = 'global_rewards.json'
TOTALS_FILE = 'totals.json'

def load_json(filename: str, required: bool = False) -> Optional[Any]:
    """Read a JSON document from the input directory"""
    path = os.path.join(settings.INPUT_DIR, filename)
    if not os.path.isfile(path):
        if required:
            raise FileNotFoundError(f"{filename} not found in {settings.INPUT_DIR}")
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)

def load_global_rewards() -> List[GlobalNetworkReward]:
    documents = load_json(GLOBAL_REWARDS_FILE) or []
    if not isinstance(documents, list):
        raise InvalidInput(f"{GLOBAL_REWARDS_FILE} must hold a list of rewards")
    return [GlobalNetworkReward.model_validate(document) for document in documents]

def run() -> None:
    """Resolve the user's totals for the level and distribute them."""
    try:
        level = Level.from_document(load_json(LEVEL_FILE, required=True))

        profile_document = load_json(PROFILE_FILE)
        profile = UserRewardProfile.from_user_document(profile_document) if profile_document else None

        resolver = RewardSourceResolver(load_global_rewards())
        resolved = resolver.resolve_totals(profile, level.level)

        totals = load_json(TOTALS_FILE)
        if totals is None:
            totals = resolved.totals
        else:
            logger.info("Using totals from input instead of resolved rewards")

        conversion_rates = None
        if settings.USE_LIVE_RATES:
            conversion_rates = CoinGeckoRatesClient().load_rates()

        engine = DistributionEngine()
        distributed = engine.distribute(level, totals, conversion_rates)

        result = {
            'level': distributed.to_document(),
            'rewards': resolved.to_dict(),
            'totals': totals,
        }
        if conversion_rates is not None:
            result['usd'] = conversion_rates.convert_rewards_to_usd(totals).__dict__

        output_path = os.path.join(settings.OUTPUT_DIR, "results.json")
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2)

        logger.info(f"Distribution complete for level {level.level}: {output_path}")

    except Exception as e:
        logger.error(f"Error during reward distribution: {e}")
        traceback.print_exc()
        sys.exit(1)

if __name__ == "__main__":
    run()
