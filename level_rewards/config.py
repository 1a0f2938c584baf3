"""Application configuration and environment settings"""
from typing import Dict, List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Networks and levels
    KNOWN_NETWORKS: List[str] = Field(
        default=['BTC', 'ETH', 'TRON', 'USDT', 'BNB', 'SOL'],
        description="Network codes resolved for every user and level"
    )
    LEVEL_COUNT: int = Field(5, ge=1, description="Number of configured levels")
    CURRENCY_ALIASES: Dict[str, str] = Field(
        default={'TRX': 'TRON'},
        description="Alternative currency codes mapped to their network code"
    )

    # Distribution precision
    DEFAULT_DECIMALS: int = Field(8, ge=0, description="Decimal places for networks without an explicit precision")
    NETWORK_DECIMALS: Dict[str, int] = Field(
        default={'BTC': 8, 'ETH': 8, 'BNB': 8, 'SOL': 8, 'USDT': 6, 'TRON': 6},
        description="Decimal places per network"
    )
    USD_DECIMALS: int = Field(2, ge=0, description="Decimal places for USD valued distributions")

    # Reward resolution
    ZERO_OVERRIDE_IS_UNSET: bool = Field(
        True,
        description="Treat a user override of 0 as absent and fall back to the global default"
    )

    # Conversion rates
    DEFAULT_CONVERSION_RATES: Dict[str, float] = Field(
        default={'BTC': 45000, 'ETH': 3000, 'TRON': 0.1, 'USDT': 1, 'BNB': 300, 'SOL': 100},
        description="Fallback USD rate per network"
    )
    USE_LIVE_RATES: bool = Field(False, description="Fetch USD rates from CoinGecko in the runner")
    COINGECKO_API_URL: str = Field("https://api.coingecko.com/api/v3", description="CoinGecko API base URL")
    COINGECKO_IDS: Dict[str, str] = Field(
        default={
            'BTC': 'bitcoin',
            'ETH': 'ethereum',
            'TRON': 'tron',
            'USDT': 'tether',
            'BNB': 'binancecoin',
            'SOL': 'solana',
        },
        description="CoinGecko coin id per network"
    )
    RATES_TIMEOUT_SECONDS: float = Field(10.0, gt=0, description="HTTP timeout for rate lookups")

    LOG_LEVEL: str = Field("INFO", description="Root log level for the runner")

    # Input/Output directories with defaults
    INPUT_DIR: str = Field("/input", description="Directory containing input files")
    OUTPUT_DIR: str = Field("/output", description="Directory for output files")

    def decimals_for(self, network: str) -> int:
        """Decimal places used when rounding amounts of a network"""
        return self.NETWORK_DECIMALS.get(network, self.DEFAULT_DECIMALS)

    def normalize_currency(self, currency: str) -> str:
        """Map a currency code to its network code"""
        return self.CURRENCY_ALIASES.get(currency, currency)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True
    )

settings = Settings()
