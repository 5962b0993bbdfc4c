from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SW_", "env_file": ".env", "env_file_encoding": "utf-8"}

    alpha_vantage_api_key: str = Field(default="demo", min_length=1)
    alpha_vantage_base_url: str = Field(default="https://www.alphavantage.co/query")
    http_timeout: float = Field(default=30.0, gt=0)

    # Upstream free tier allows 5 calls/minute per key.
    min_request_interval: float = Field(default=12.0, ge=0)

    memory_cache_ttl: float = Field(default=300.0, gt=0)
    memory_cache_max_entries: int = Field(default=512, ge=1)
    market_snapshot_ttl: float = Field(default=300.0, gt=0)
    quote_ttl: float = Field(default=1800.0, gt=0)
    fundamentals_ttl: float = Field(default=3600.0, gt=0)

    movers_limit: int = Field(default=20, ge=1)
    search_limit: int = Field(default=10, ge=1)
    time_series_limit: int = Field(default=30, ge=1)

    default_watchlist_name: str = Field(default="My Watchlist", min_length=1)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    db_path: str = Field(default="stockwatch.db")
    cors_origins: str = Field(default="http://localhost:8081")


settings = Settings()
