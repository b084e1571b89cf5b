"""External service integrations for the trade platform."""

from .trade_api_client import MatchCandidate, MatchPage, MessageBatch, StartedChat, TradeApiClient

__all__ = ["MatchCandidate", "MatchPage", "MessageBatch", "StartedChat", "TradeApiClient"]
