"""Built-in decision providers and loading of custom ones."""

from __future__ import annotations

import importlib
import random
from dataclasses import dataclass, field
from typing import Any

from .action import Action
from .errors import ConfigurationError
from .player import DecisionRequest
from .ports import DecisionProvider


@dataclass
class PassiveProvider:
    """Checks when it can, calls otherwise. Never raises, never folds."""

    name: str = "Passive"

    async def decide(self, request: DecisionRequest) -> Action:
        if request.can_check:
            return Action.check("Nothing to call")
        return Action.bet(min(request.bet_to_call, request.stack), "Calling")


@dataclass
class RandomProvider:
    """Picks uniformly among fold / check-or-call / raise.

    Raises are sized between one big blind and the pot, capped at the stack.
    Deterministic for a given seed.
    """

    name: str = "Random"
    seed: int | None = None
    big_blind: int = 100

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    async def decide(self, request: DecisionRequest) -> Action:
        choice = self._rng.choice(("fold", "call", "raise"))
        if choice == "fold" and not request.can_check:
            return Action.fold("Random fold")
        if choice == "raise" and request.stack > request.bet_to_call:
            size = self._rng.randint(self.big_blind, max(self.big_blind, request.pot))
            return Action.bet(min(request.bet_to_call + size, request.stack), "Random raise")
        if request.can_check:
            return Action.check("Random check")
        return Action.bet(min(request.bet_to_call, request.stack), "Random call")


@dataclass
class ScriptedProvider:
    """Plays a fixed list of actions, then defers to ``fallback``.

    Handy for reproducing a hand exactly in tests.
    """

    actions: list[Action] = field(default_factory=list)
    fallback: DecisionProvider = field(default_factory=PassiveProvider)
    name: str = "Scripted"
    seen: list[DecisionRequest] = field(default_factory=list, repr=False)

    @classmethod
    def of(cls, *actions: Action, **kwargs: Any) -> ScriptedProvider:
        return cls(actions=list(actions), **kwargs)

    async def decide(self, request: DecisionRequest) -> Action:
        self.seen.append(request)
        if self.actions:
            return self.actions.pop(0)
        return await self.fallback.decide(request)


BUILTIN_PROVIDERS: dict[str, type] = {
    "passive": PassiveProvider,
    "random": RandomProvider,
}


def load_provider(ref: str, **kwargs: Any) -> DecisionProvider:
    """Instantiate a provider from a built-in name or a ``module:Class`` path."""
    if ref in BUILTIN_PROVIDERS:
        return BUILTIN_PROVIDERS[ref](**kwargs)
    if ":" not in ref:
        raise ConfigurationError(
            f"Unknown agent {ref!r}; use one of {sorted(BUILTIN_PROVIDERS)} "
            "or a 'package.module:ClassName' path"
        )
    module_name, class_name = ref.split(":", 1)
    try:
        module = importlib.import_module(module_name)
        provider_cls = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Cannot load agent {ref!r}: {exc}") from exc
    provider = provider_cls(**kwargs)
    if not isinstance(provider, DecisionProvider):
        raise ConfigurationError(f"{ref!r} has no async decide(request) method")
    return provider
