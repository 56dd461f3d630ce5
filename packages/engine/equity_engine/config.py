"""Runtime configuration loaded from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping

from pydantic import ValidationError

from .logging_utils import LOG_LEVEL_ENV, coerce_level
from .schemas import ShareStructureCFG

TOTAL_SHARES_ENV = "EQUITY_ENGINE_TOTAL_SHARES"
TOLERANCE_ENV = "EQUITY_ENGINE_TOLERANCE"
PRECISION_ENV = "EQUITY_ENGINE_PRECISION"


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.replace("_", "").strip())
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got: {raw!r}") from exc


def _read_decimal(env: Mapping[str, str], name: str, default: Decimal) -> Decimal:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise RuntimeError(f"{name} must be a decimal number, got: {raw!r}") from exc
    if not value.is_finite():
        raise RuntimeError(f"{name} must be finite, got: {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""

    share_structure: ShareStructureCFG
    log_level: str

    @staticmethod
    def load(env: Mapping[str, str] | None = None) -> "Settings":
        """Load settings from environment variables.

        Unset variables fall back to the ShareStructureCFG defaults
        (1,000,000 shares, 0.01 tolerance, 2 decimal places) and INFO logging.
        """

        merged_env = dict(os.environ if env is None else env)
        defaults = ShareStructureCFG()

        try:
            structure = ShareStructureCFG(
                total_authorized_shares=_read_int(
                    merged_env, TOTAL_SHARES_ENV, defaults.total_authorized_shares
                ),
                tolerance=_read_decimal(merged_env, TOLERANCE_ENV, defaults.tolerance),
                precision=_read_int(merged_env, PRECISION_ENV, defaults.precision),
            )
        except ValidationError as exc:
            raise RuntimeError(f"Invalid share structure configuration: {exc}") from exc

        log_level = merged_env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
        try:
            coerce_level(log_level)
        except ValueError as exc:
            raise RuntimeError(f"{LOG_LEVEL_ENV} is not a log level: {log_level!r}") from exc

        return Settings(share_structure=structure, log_level=log_level)


__all__ = ["Settings", "TOTAL_SHARES_ENV", "TOLERANCE_ENV", "PRECISION_ENV"]
