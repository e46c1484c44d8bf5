# seismic_shield/config.py
"""
Seismic Shield Client Configuration

Dataclass configuration for a shielded client, loadable from a dict, a JSON
file or environment variables.

Environment variables:
    SEISMIC_RPC_URL         JSON-RPC endpoint
    SEISMIC_CHAIN_ID        expected chain id
    SEISMIC_ENCRYPTION_SK   hex private key for the calldata key pair
    SEISMIC_BLOCKS_WINDOW   blocks until expiry
    SEISMIC_LOG_LEVEL       logging level name

Usage:
    config = ShieldedClientConfig.from_env()
    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))
    configure_logging(config.log)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Mapping, Optional

from .block.chains import DEFAULT_BLOCKS_WINDOW, DEFAULT_GAS, SANVIL
from .block.wire.metadata import AadFormat
from .crypto.common import PRIVATE_KEY_SIZE, as_bytes


logger = logging.getLogger(__name__)

ENV_RPC_URL = "SEISMIC_RPC_URL"
ENV_CHAIN_ID = "SEISMIC_CHAIN_ID"
ENV_ENCRYPTION_SK = "SEISMIC_ENCRYPTION_SK"
ENV_BLOCKS_WINDOW = "SEISMIC_BLOCKS_WINDOW"
ENV_LOG_LEVEL = "SEISMIC_LOG_LEVEL"


@dataclass
class RPCConfig:
    """JSON-RPC endpoint configuration."""
    url: str = SANVIL.rpc_url
    timeout: float = 30.0


@dataclass
class SecurityConfig:
    """Validity window and gas defaults."""
    blocks_window: int = DEFAULT_BLOCKS_WINDOW
    default_gas: int = DEFAULT_GAS
    aad_format: str = AadFormat.METADATA.value


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class ShieldedClientConfig:
    """
    Complete client configuration.

    ``encryption_private_key`` is optional; without it the client generates
    an ephemeral encryption key pair per instance.
    """
    chain_id: int = SANVIL.chain_id
    rpc: RPCConfig = field(default_factory=RPCConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    log: LogConfig = field(default_factory=LogConfig)
    encryption_private_key: Optional[str] = None

    @property
    def aad_format(self) -> AadFormat:
        return AadFormat(self.security.aad_format)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.chain_id <= 0:
            errors.append(f"Invalid chain_id: {self.chain_id}")

        if not self.rpc.url:
            errors.append("rpc.url cannot be empty")
        elif not self.rpc.url.startswith(("http://", "https://")):
            errors.append(f"rpc.url must be http(s): {self.rpc.url}")
        if self.rpc.timeout <= 0:
            errors.append("rpc.timeout must be positive")

        if self.security.blocks_window < 1:
            errors.append("blocks_window must be at least 1")
        if self.security.default_gas < 21000:
            errors.append("default_gas must be at least 21000")
        if self.security.aad_format not in {f.value for f in AadFormat}:
            errors.append(f"Unknown aad_format: {self.security.aad_format}")

        if self.encryption_private_key is not None:
            try:
                raw = as_bytes(self.encryption_private_key)
            except ValueError:
                errors.append("encryption_private_key is not valid hex")
            else:
                if len(raw) != PRIVATE_KEY_SIZE:
                    errors.append(
                        f"encryption_private_key must be {PRIVATE_KEY_SIZE} bytes, got {len(raw)}"
                    )

        if not isinstance(logging.getLevelName(self.log.level.upper()), int):
            errors.append(f"Unknown log level: {self.log.level}")

        return errors

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Export configuration; the encryption key is redacted by default."""
        key = self.encryption_private_key
        if key is not None and not include_secrets:
            key = "<redacted>"
        return {
            "chain_id": self.chain_id,
            "encryption_private_key": key,
            "rpc": asdict(self.rpc),
            "security": asdict(self.security),
            "log": asdict(self.log),
        }

    def save(self, path: str) -> None:
        """Save configuration to file (without the encryption key)."""
        with open(path, "w") as f:
            json.dump(self.to_dict(include_secrets=False), f, indent=2)
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShieldedClientConfig":
        config = cls(
            chain_id=int(data.get("chain_id", SANVIL.chain_id)),
            encryption_private_key=data.get("encryption_private_key"),
        )
        if config.encryption_private_key == "<redacted>":
            config.encryption_private_key = None
        if "rpc" in data:
            config.rpc = RPCConfig(**data["rpc"])
        if "security" in data:
            config.security = SecurityConfig(**data["security"])
        if "log" in data:
            config.log = LogConfig(**data["log"])
        return config

    @classmethod
    def from_file(cls, path: str) -> "ShieldedClientConfig":
        """Load configuration from a JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        config = cls.from_dict(data)
        logger.info("Configuration loaded from %s", path)
        return config

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ShieldedClientConfig":
        """Defaults overridden by SEISMIC_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        if ENV_RPC_URL in env:
            config.rpc.url = env[ENV_RPC_URL]
        if ENV_CHAIN_ID in env:
            config.chain_id = int(env[ENV_CHAIN_ID], 0)
        if ENV_ENCRYPTION_SK in env:
            config.encryption_private_key = env[ENV_ENCRYPTION_SK]
        if ENV_BLOCKS_WINDOW in env:
            config.security.blocks_window = int(env[ENV_BLOCKS_WINDOW])
        if ENV_LOG_LEVEL in env:
            config.log.level = env[ENV_LOG_LEVEL]
        return config


def configure_logging(config: LogConfig) -> None:
    """Configure root logging for applications. Library code never calls this."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        ))

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )


__all__ = [
    "RPCConfig",
    "SecurityConfig",
    "LogConfig",
    "ShieldedClientConfig",
    "configure_logging",
]
