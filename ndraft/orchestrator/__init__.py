"""Request orchestration for streaming exchanges."""
from ndraft.orchestrator.exchange import ExchangeKind, ExchangeResult, ExchangeState
from ndraft.orchestrator.orchestrator import RequestOrchestrator

__all__ = ["RequestOrchestrator", "ExchangeKind", "ExchangeResult", "ExchangeState"]
