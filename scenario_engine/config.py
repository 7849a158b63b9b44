from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    VOLATILITY_WINDOW: int = 20
    DEFAULT_VOLATILITY: float = 0.25
    MARKET_DATA_TIMEOUT_SECONDS: float = 10.0

    # Conservative snapshot used when live market data is unavailable
    FALLBACK_PRICE: float = 2000.0
    FALLBACK_TVL: float = 1_000_000.0
    FALLBACK_YIELD: float = 3.5
    FALLBACK_GAS_PRICE: float = 20.0

    MONTE_CARLO_DEFAULT_ITERATIONS: int = 1000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
