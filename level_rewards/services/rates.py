"""CoinGecko price lookup for USD conversion rates"""
import logging
import time
from typing import Dict, Iterable, Optional

import requests

from level_rewards.config import Settings, settings as default_settings
from level_rewards.conversion import ConversionRates
from level_rewards.exceptions import RatesUnavailableError

logger = logging.getLogger(__name__)

class CoinGeckoRatesClient:
    """Fetches USD prices for network codes from the CoinGecko simple price API"""

    def __init__(self, config: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = config or default_settings
        self.base_url = self.settings.COINGECKO_API_URL.rstrip('/')
        self.timeout = self.settings.RATES_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _make_request(self, endpoint: str, params: Dict[str, str]) -> dict:
        """Make request to CoinGecko API with retries"""
        headers = {'Accept': 'application/json'}

        for attempt in range(3):  # 3 retries
            try:
                response = self.session.get(
                    f'{self.base_url}/{endpoint}',
                    params=params,
                    headers=headers,
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as e:
                if attempt == 2:  # Last attempt
                    raise RatesUnavailableError(f"CoinGecko request failed: {e}") from e
                logger.warning(f"Retrying request after error: {e}")
                time.sleep(1)  # Wait before retry

    def fetch_rates(self, networks: Optional[Iterable[str]] = None) -> Dict[str, float]:
        """
        Fetch the USD price of each network.

        Networks without a CoinGecko id, or missing from the response, are
        left out of the result.

        Raises:
            RatesUnavailableError: If the API cannot be reached or no price came back
        """
        networks = list(networks if networks is not None else self.settings.KNOWN_NETWORKS)
        ids = {network: self.settings.COINGECKO_IDS[network]
               for network in networks if network in self.settings.COINGECKO_IDS}
        if not ids:
            raise RatesUnavailableError(f"No CoinGecko ids configured for {', '.join(networks)}")

        data = self._make_request('simple/price', {
            'ids': ','.join(ids.values()),
            'vs_currencies': 'usd'
        })
        if not isinstance(data, dict):
            raise RatesUnavailableError(f"Unexpected response format. Expected object, got: {type(data)}")

        rates = {}
        for network, gecko_id in ids.items():
            price = (data.get(gecko_id) or {}).get('usd')
            if isinstance(price, (int, float)) and price > 0:
                rates[network] = float(price)

        missing = [network for network in networks if network not in rates]
        if missing:
            logger.warning(f"Missing rates for: {', '.join(missing)}")
        if not rates:
            raise RatesUnavailableError("CoinGecko returned no usable prices")

        logger.info(f"Fetched rates: {', '.join(f'{n}: ${r}' for n, r in rates.items())}")
        return rates

    def load_rates(self) -> ConversionRates:
        """Live rates merged over the configured defaults, or the defaults alone on failure"""
        defaults = ConversionRates.default(self.settings)
        try:
            return defaults.updated(self.fetch_rates())
        except RatesUnavailableError as e:
            logger.error(f"Using default conversion rates: {e}")
            return defaults
