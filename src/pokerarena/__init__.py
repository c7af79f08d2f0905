"""Pokerarena - Multi-seat Texas Hold'em engine for automated players."""

__version__ = "0.1.0"

from .action import Action, ActionRecord, ActionType, Street
from .betting import BettingRound, StreetResult
from .card import Card, Rank, Suit, card, cards
from .config import BustPolicy, EngineConfig, GameConfig, SeatSpec
from .deck import Deck
from .errors import (
    ConfigurationError,
    DecisionProviderError,
    InvariantViolation,
    PersistenceError,
    PokerArenaError,
)
from .hand import Hand
from .player import DecisionRequest, OccupantKind, Player
from .ports import DecisionProvider, PersistenceStore, RoundSummary, SettlementNotifier
from .pot import Pot, PotLedger
from .providers import PassiveProvider, RandomProvider, ScriptedProvider, load_provider
from .ranking import HandCategory, HandValue, StandardRanker
from .round_manager import HandResult, RoundManager, RoundState
from .seating import SeatTable, next_button_position, next_non_empty_seat
from .session import GameSession, play_sessions
from .settlement import HttpSettlementNotifier, LoggingNotifier, Loss, SettlementEvent, Win
from .showdown import HandRanker, PotAward, ShowdownEvaluator
from .storage import InMemoryStore, NDJSONStore

__all__ = [
    "Action",
    "ActionRecord",
    "ActionType",
    "BettingRound",
    "BustPolicy",
    "Card",
    "ConfigurationError",
    "DecisionProvider",
    "DecisionProviderError",
    "DecisionRequest",
    "Deck",
    "EngineConfig",
    "GameConfig",
    "GameSession",
    "Hand",
    "HandCategory",
    "HandRanker",
    "HandResult",
    "HandValue",
    "HttpSettlementNotifier",
    "InMemoryStore",
    "InvariantViolation",
    "LoggingNotifier",
    "Loss",
    "NDJSONStore",
    "OccupantKind",
    "PassiveProvider",
    "PersistenceError",
    "PersistenceStore",
    "Player",
    "PokerArenaError",
    "Pot",
    "PotAward",
    "PotLedger",
    "RandomProvider",
    "Rank",
    "RoundManager",
    "RoundState",
    "RoundSummary",
    "ScriptedProvider",
    "SeatSpec",
    "SeatTable",
    "SettlementEvent",
    "SettlementNotifier",
    "ShowdownEvaluator",
    "StandardRanker",
    "Street",
    "StreetResult",
    "Suit",
    "Win",
    "card",
    "cards",
    "load_provider",
    "next_button_position",
    "next_non_empty_seat",
    "play_sessions",
]
