"""Storage adapters implementing equity_engine.ports.EquityStore."""

from .memory import InMemoryEquityStore

__all__ = ["InMemoryEquityStore"]
