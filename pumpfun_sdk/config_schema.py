"""
Configuration schema validation using Pydantic
"""

from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import CLUSTER_ENDPOINTS, U64_MAX


class ClusterSchema(BaseModel):
    """Cluster selection and endpoint overrides"""

    name: Literal["mainnet", "devnet", "testnet", "localnet", "custom"] = "mainnet"
    rpc_url: Optional[str] = Field(default=None, description="HTTP RPC endpoint")
    ws_url: Optional[str] = Field(default=None, description="Websocket endpoint")
    commitment: Literal["processed", "confirmed", "finalized"] = "confirmed"

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v):
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError(f"rpc_url must be an http(s) URL: {v}")
        return v

    @field_validator("ws_url")
    @classmethod
    def validate_ws_url(cls, v):
        if v is not None and not v.startswith(("ws://", "wss://")):
            raise ValueError(f"ws_url must be a ws(s) URL: {v}")
        return v

    @model_validator(mode="after")
    def validate_custom_endpoints(self):
        if self.name == "custom" and (self.rpc_url is None or self.ws_url is None):
            raise ValueError("custom cluster requires rpc_url and ws_url")
        if self.name != "custom" and self.name not in CLUSTER_ENDPOINTS:
            raise ValueError(f"Unknown cluster: {self.name}")
        return self


class PriorityFeeSchema(BaseModel):
    """Compute budget settings for trades"""

    unit_limit: Optional[int] = Field(default=None, ge=1, le=1_400_000)
    unit_price: Optional[int] = Field(
        default=None, ge=0, le=U64_MAX, description="Micro-lamports per compute unit"
    )


class TradingSchema(BaseModel):
    """Trade defaults"""

    slippage_bps: int = Field(default=500, ge=0, lt=10000)
    track_volume: Optional[bool] = None
    priority_fee: Optional[PriorityFeeSchema] = None


class SessionSchema(BaseModel):
    """Log subscription defaults"""

    backpressure: Literal["block", "drop"] = "block"
    buffer_size: int = Field(default=1000, ge=1, le=1_000_000)
    include_failed: bool = False


class PumpFunConfig(BaseModel):
    """Top-level SDK configuration"""

    cluster: ClusterSchema = Field(default_factory=ClusterSchema)
    trading: TradingSchema = Field(default_factory=TradingSchema)
    session: SessionSchema = Field(default_factory=SessionSchema)


def validate_config(config_dict: dict) -> PumpFunConfig:
    """
    Validate an SDK configuration dictionary

    Args:
        config_dict: Dictionary representation of the config

    Returns:
        Validated PumpFunConfig object

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return PumpFunConfig(**config_dict)


def validate_config_file(config_path: Union[str, Path]) -> PumpFunConfig:
    """Validate a YAML configuration file"""
    with open(config_path, "r") as f:
        return validate_config(yaml.safe_load(f) or {})
