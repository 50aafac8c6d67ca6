"""
Configuration Management Module

Token metadata, ledger semantics and logging options, read from
TOKENLEDGER_* environment variables (or a .env file) via pydantic-settings.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .events import EventLog
from .ledger import LedgerSemantics, TokenLedger
from .roles import Identity
from .safemath import UINT256_MAX


class TokenLedgerConfig(BaseSettings):
    """Token ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="TOKENLEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Token metadata
    token_name: str = "Token"
    token_symbol: str = "TKN"
    decimals: int = 18
    total_supply: int = 1_000_000 * 10 ** 18

    # "reference" keeps the reference token's behavior, "corrected" is standard ERC-20
    semantics: LedgerSemantics = LedgerSemantics.REFERENCE

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    @field_validator("decimals", "total_supply")
    @classmethod
    def _unsigned_256(cls, value: int) -> int:
        if value < 0 or value > UINT256_MAX:
            raise ValueError("must be within the uint256 range")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return value


# Global configuration instance
config = TokenLedgerConfig()


def get_config() -> TokenLedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> TokenLedgerConfig:
    """Reload configuration from environment"""
    global config
    config = TokenLedgerConfig()
    return config


def create_ledger(recipient: Identity,
                  config: Optional[TokenLedgerConfig] = None,
                  event_log: Optional[EventLog] = None) -> TokenLedger:
    """
    Build a ledger from configuration, minting the configured supply
    to recipient. Uses the global configuration when config is None.
    """
    cfg = config if config is not None else get_config()
    return TokenLedger(
        recipient=recipient,
        name=cfg.token_name,
        symbol=cfg.token_symbol,
        decimals=cfg.decimals,
        total_supply=cfg.total_supply,
        event_log=event_log,
        semantics=cfg.semantics,
    )
