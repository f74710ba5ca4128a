"""
Configuration management using pydantic-settings.

Settings come from the environment (UTXOPLAN_* variables or a .env file).
ConnectorConfig mirrors the subset of the on-chain bridge connector
configuration that shapes withdrawal plans.
"""

from __future__ import annotations

from decimal import Decimal

from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from utxoplan.constants import CONNECTOR_FEE_RATE
from utxoplan.errors import ConfigurationError
from utxoplan.models import NetworkType, SortOrder, UtxoChain, coerce_amount


class PlanOverrides(BaseModel):
    """Per-call adjustments to a chain's default selection options."""

    dust_threshold: int | None = Field(default=None, ge=0)
    min_change: int | None = Field(default=None, ge=0)
    max_inputs: int | None = Field(default=None, ge=1)
    sort: SortOrder | None = None


class ConnectorConfig(BaseModel):
    """Bridge connector configuration relevant to withdrawal planning."""

    change_address: str = ""
    min_change_amount: str | int | None = None
    max_withdrawal_input_number: int | None = None
    min_withdraw_amount: str | None = None
    # sat/vbyte used for connector-driven Bitcoin withdrawals
    fee_rate: Decimal = Field(default=Decimal(CONNECTOR_FEE_RATE), gt=0, allow_inf_nan=False)

    model_config = {"extra": "ignore"}

    def require_change_address(self) -> str:
        if not self.change_address:
            raise ConfigurationError("Bridge configuration is missing change address")
        return self.change_address

    def to_overrides(self) -> PlanOverrides:
        """
        Derive selection overrides.

        The connector's min_change_amount acts as both dust threshold and
        minimum change. Unparseable or negative values are ignored with a
        warning.
        """
        overrides = PlanOverrides()

        if self.min_change_amount is not None and self.min_change_amount != "":
            try:
                min_change = coerce_amount(self.min_change_amount)
            except ValueError:
                logger.warning(
                    f"Ignoring unparseable min_change_amount: {self.min_change_amount!r}"
                )
            else:
                if min_change >= 0:
                    overrides.dust_threshold = min_change
                    overrides.min_change = min_change
                else:
                    logger.warning(f"Ignoring negative min_change_amount: {min_change}")

        if self.max_withdrawal_input_number is not None and self.max_withdrawal_input_number > 0:
            overrides.max_inputs = self.max_withdrawal_input_number

        return overrides


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="UTXOPLAN_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    chain: UtxoChain = UtxoChain.BTC
    network: NetworkType = NetworkType.MAINNET

    fee_rate: Decimal = Field(default=Decimal(1), description="sat/vbyte (Bitcoin only)")
    dust_threshold: int | None = Field(default=None, ge=0)
    min_change: int | None = Field(default=None, ge=0)
    max_inputs: int | None = Field(default=None, ge=1)
    sort: SortOrder | None = None

    log_level: str = "INFO"

    def overrides(self) -> PlanOverrides:
        return PlanOverrides(
            dust_threshold=self.dust_threshold,
            min_change=self.min_change,
            max_inputs=self.max_inputs,
            sort=self.sort,
        )


def get_settings() -> Settings:
    return Settings()
