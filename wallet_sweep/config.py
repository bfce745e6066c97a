import os

from pathlib import Path
from typing import Any, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]
PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Ensure we pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not os.getenv("TRANSFER_TOKENS_PATH"):
            fallback = os.getenv("TRANSFER_TOKENS_CONFIG")
            if fallback:
                object.__setattr__(self, "transfer_tokens_path", Path(fallback))

    log_level: str = Field(default="INFO", description="Logging level")

    # Network RPC endpoints
    mantle_rpc_url: str = Field(
        default="https://rpc.mantle.xyz",
        description="JSON-RPC endpoint for Mantle mainnet",
    )
    mantle_sepolia_rpc_url: str = Field(
        default="https://rpc.sepolia.mantle.xyz",
        description="JSON-RPC endpoint for Mantle Sepolia testnet",
    )

    # Sweep behaviour
    sweep_networks: List[str] = Field(
        default_factory=lambda: ["mantle", "mantleSepolia"],
        description="Networks swept in order before an agent wallet is discarded",
    )
    transfer_tokens_path: Path = Field(
        default=PACKAGE_DIR / "data" / "transfer_tokens.json",
        description="Static declaration of the fungible tokens to sweep per network",
    )
    receipt_poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Delay between transaction receipt polls",
    )
    request_timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="Per-request HTTP timeout for chain RPC calls",
    )


# Global settings instance
settings = Settings()
