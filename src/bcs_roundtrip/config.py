"""
Harness configuration.

Read once from the environment at startup and frozen afterwards.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

TRUE_VALUES = ("1", "true", "yes", "on")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class HarnessConfig:
    """Configuration for the round-trip harness server."""

    reserialize: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    fee_payer_field: bool = True
    diagnostics_capacity: int = 100
    log_level: str = "INFO"

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ValueError(f"PORT must be between 1 and 65535, got {self.port}")
        if self.diagnostics_capacity < 1:
            raise ValueError("DIAGNOSTICS_CAPACITY must be at least 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HarnessConfig":
        """
        Build configuration from environment variables.

        Recognised variables: RESERIALIZE, HOST, PORT, FEE_PAYER_FIELD,
        DIAGNOSTICS_CAPACITY, LOG_LEVEL.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Frozen configuration
        """
        env = os.environ if environ is None else environ
        return cls(
            reserialize=_flag(env.get("RESERIALIZE"), False),
            host=env.get("HOST") or DEFAULT_HOST,
            port=_int(env, "PORT", DEFAULT_PORT),
            fee_payer_field=_flag(env.get("FEE_PAYER_FIELD"), True),
            diagnostics_capacity=_int(env, "DIAGNOSTICS_CAPACITY", 100),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def mode_description(self) -> str:
        if self.reserialize:
            return "RESERIALIZE (decode with BCS codec, re-encode on retrieval)"
        return "PASS-THROUGH (store raw bytes, return unchanged)"
