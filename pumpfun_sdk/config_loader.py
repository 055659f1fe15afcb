"""
Configuration loading and normalization for the pump.fun SDK.

Loads YAML, validates it against the pydantic schema, applies environment
overrides and returns frozen dataclasses with defaults filled in.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from .config_schema import validate_config
from .constants import (
    CLUSTER_ENDPOINTS,
    DEFAULT_CONFIG,
    BackpressurePolicy,
    Commitment,
)
from .curve.quote import PriorityFee
from .exceptions import ConfigurationError, ValidationError

RPC_URL_ENV = "PUMPFUN_RPC_URL"
WS_URL_ENV = "PUMPFUN_WS_URL"


@dataclass(frozen=True)
class ClusterConfig:
    """Normalized cluster configuration."""

    name: str = DEFAULT_CONFIG["CLUSTER"]
    rpc_url: str = CLUSTER_ENDPOINTS["mainnet"][0]
    ws_url: str = CLUSTER_ENDPOINTS["mainnet"][1]
    commitment: Commitment = Commitment.CONFIRMED


@dataclass(frozen=True)
class PriorityFeeConfig:
    """Normalized compute budget configuration."""

    unit_limit: Optional[int] = None
    unit_price: Optional[int] = None

    def to_priority_fee(self) -> Optional[PriorityFee]:
        if self.unit_limit is None and self.unit_price is None:
            return None
        return PriorityFee(unit_limit=self.unit_limit, unit_price=self.unit_price)


@dataclass(frozen=True)
class SessionConfig:
    """Normalized log subscription configuration."""

    backpressure: BackpressurePolicy = BackpressurePolicy.BLOCK
    buffer_size: int = DEFAULT_CONFIG["SESSION_BUFFER_SIZE"]
    include_failed: bool = False


@dataclass(frozen=True)
class ClientConfig:
    """Immutable SDK configuration object."""

    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    priority_fee: PriorityFeeConfig = field(default_factory=PriorityFeeConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    slippage_bps: int = DEFAULT_CONFIG["SLIPPAGE_BPS"]
    track_volume: Optional[bool] = None


def cluster_config(name: str, commitment: Commitment = Commitment.CONFIRMED) -> ClusterConfig:
    """Preset endpoints for mainnet, devnet, testnet or localnet."""
    if name not in CLUSTER_ENDPOINTS:
        raise ConfigurationError(
            f"Unknown cluster: {name}", details={"known": sorted(CLUSTER_ENDPOINTS)}
        )
    rpc_url, ws_url = CLUSTER_ENDPOINTS[name]
    return ClusterConfig(name=name, rpc_url=rpc_url, ws_url=ws_url, commitment=commitment)


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}") from e

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    return config_dict


def _normalize_cluster_config(cluster: Dict[str, Any], env: Dict[str, str]) -> ClusterConfig:
    """Resolve cluster endpoints: preset, then file overrides, then environment."""
    name = cluster.get("name", DEFAULT_CONFIG["CLUSTER"])
    commitment = Commitment(cluster.get("commitment", DEFAULT_CONFIG["COMMITMENT"]))

    if name == "custom":
        rpc_url, ws_url = cluster["rpc_url"], cluster["ws_url"]
    else:
        preset = cluster_config(name, commitment)
        rpc_url = cluster.get("rpc_url") or preset.rpc_url
        ws_url = cluster.get("ws_url") or preset.ws_url

    return ClusterConfig(
        name=name,
        rpc_url=env.get(RPC_URL_ENV) or rpc_url,
        ws_url=env.get(WS_URL_ENV) or ws_url,
        commitment=commitment,
    )


def build_client_config(
    config_dict: Dict[str, Any], env: Optional[Dict[str, str]] = None
) -> ClientConfig:
    """
    Validate and normalize a configuration dictionary.

    Args:
        config_dict: Raw configuration, as parsed from YAML
        env: Environment used for endpoint overrides; defaults to os.environ

    Returns:
        Normalized and frozen client configuration

    Raises:
        ValidationError: If the configuration fails schema validation
    """
    env = dict(os.environ) if env is None else env

    try:
        validated = validate_config(config_dict).model_dump()
    except PydanticValidationError as e:
        raise ValidationError(f"Configuration validation failed: {e}") from e

    trading = validated["trading"]
    session = validated["session"]
    priority_fee = trading.get("priority_fee") or {}

    return ClientConfig(
        cluster=_normalize_cluster_config(validated["cluster"], env),
        priority_fee=PriorityFeeConfig(
            unit_limit=priority_fee.get("unit_limit"),
            unit_price=priority_fee.get("unit_price"),
        ),
        session=SessionConfig(
            backpressure=BackpressurePolicy(session["backpressure"]),
            buffer_size=session["buffer_size"],
            include_failed=session["include_failed"],
        ),
        slippage_bps=trading["slippage_bps"],
        track_volume=trading["track_volume"],
    )


def load_client_config(
    config_path: Optional[Union[str, Path]] = None, dotenv: bool = True
) -> ClientConfig:
    """
    Load the SDK configuration.

    Args:
        config_path: YAML file; when None only defaults and the environment apply
        dotenv: Load a .env file into the environment first

    Returns:
        Normalized and frozen client configuration

    Raises:
        ConfigurationError: If the file cannot be loaded
        ValidationError: If the configuration fails schema validation
    """
    if dotenv:
        load_dotenv()

    config_dict = load_yaml_config(config_path) if config_path is not None else {}
    return build_client_config(config_dict)


def get_default_config() -> ClientConfig:
    """Get a default configuration for testing or fallback purposes."""
    return ClientConfig()
