"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpSettings(BaseSettings):
    """Shared HTTP client settings for all upstream data sources."""

    model_config = SettingsConfigDict(env_prefix="HTTP_")

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    yahoo_timeout: float = 8.0  # seconds, per request
    investidor10_timeout: float = 5.0
    bcb_timeout: float = 6.0
    max_connections: int = 100
    max_keepalive_connections: int = 20
    verify_ssl: bool = True


class BenchmarkSettings(BaseSettings):
    """Benchmark symbols, macro series codes, and fallback rates.

    Fallback rates are in percent, the same unit the Central Bank SGS API
    publishes. They are only used when the rate source returns nothing.
    """

    model_config = SettingsConfigDict(env_prefix="BENCHMARK_")

    ibov_symbol: str = "^BVSP"
    ifix_symbol: str = "IFIX.SA"
    cdi_series: int = 12  # SGS: CDI daily rate
    ipca_series: int = 433  # SGS: IPCA monthly change
    fallback_cdi_daily_pct: Decimal = Decimal("0.045")  # ~12% a.a.
    fallback_ipca_monthly_pct: Decimal = Decimal("0.37")  # ~4.5% a.a.


class RateCacheSettings(BaseSettings):
    """Local SQLite cache for macro rate series.

    All fields configurable via RATES_CACHE_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="RATES_CACHE_")

    enabled: bool = True
    db_path: str = "data/rates.db"
    ttl_seconds: int = 21_600  # 6h


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    cache_control: str = "s-maxage=300, stale-while-revalidate=60"


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production
    http: HttpSettings = HttpSettings()
    benchmarks: BenchmarkSettings = BenchmarkSettings()
    rate_cache: RateCacheSettings = RateCacheSettings()
    api: ApiSettings = ApiSettings()
