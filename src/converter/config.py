"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceSettings(BaseSettings):
    """Rate source endpoints and asset definitions.

    Asset A is the asset whose USD price is fetched directly; asset B's USD
    price is derived from it through the A->B rate.
    """

    model_config = SettingsConfigDict(env_prefix="SOURCE_")

    rpc_url: str = "https://rpc.quai.network/cyprus1"
    coingecko_url: str = "https://api.coingecko.com/api/v3/simple/price"
    coingecko_id: str = "quai-network"
    timeout_seconds: float = 10.0

    asset_a: str = "QUAI"
    asset_b: str = "QI"
    asset_a_decimals: int = 18
    asset_b_decimals: int = 3

    rpc_method_a_to_b: str = "quai_quaiToQi"
    rpc_method_b_to_a: str = "quai_qiToQuai"


class PollerSettings(BaseSettings):
    """Refresh cadence for the rate cache."""

    model_config = SettingsConfigDict(env_prefix="POLLER_")

    interval_seconds: float = 30.0


class HistorySettings(BaseSettings):
    """Price history buffer configuration."""

    model_config = SettingsConfigDict(env_prefix="HISTORY_")

    capacity: int = 100
    placeholder_span_seconds: float = 3600.0  # span of the synthesized two-point series


class FlowSettings(BaseSettings):
    """Conversion flow tracking windows."""

    model_config = SettingsConfigDict(env_prefix="FLOW_")

    retention_seconds: float = 86400.0  # 24h hard retention
    window_seconds: float = 3600.0  # window fed to the slippage model


class SlippageSettings(BaseSettings):
    """Slippage model calibration, in percentage points.

    The A->B floor must not be below the B->A floor, and the two
    per-direction ceilings must differ.
    """

    model_config = SettingsConfigDict(env_prefix="SLIPPAGE_")

    floor_a_to_b: Decimal = Decimal("1.5")
    floor_b_to_a: Decimal = Decimal("0.5")
    ceiling_a_to_b: Decimal = Decimal("5")
    ceiling_b_to_a: Decimal = Decimal("3")
    flow_adjustment_cap: Decimal = Decimal("5")  # K_flow
    size_divisor: Decimal = Decimal("10000")
    size_cap: Decimal = Decimal("2")

    @model_validator(mode="after")
    def _check_calibration(self) -> "SlippageSettings":
        if self.floor_a_to_b < self.floor_b_to_a:
            raise ValueError("floor_a_to_b must be >= floor_b_to_a")
        if self.ceiling_a_to_b == self.ceiling_b_to_a:
            raise ValueError("per-direction ceilings must differ")
        if self.size_divisor <= 0:
            raise ValueError("size_divisor must be positive")
        return self


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    source: SourceSettings = SourceSettings()
    poller: PollerSettings = PollerSettings()
    history: HistorySettings = HistorySettings()
    flow: FlowSettings = FlowSettings()
    slippage: SlippageSettings = SlippageSettings()
    api: ApiSettings = ApiSettings()
