"""Game configuration for pokerarena."""

import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Self

from .errors import ConfigurationError

INITIAL_STACK = 2000
HANDS_PER_GAME = 3
SMALL_BLIND = 50
BIG_BLIND = 100
PLAYER_COUNT = 6

MIN_SEATS, MAX_SEATS = 2, 10
MIN_STACK, MAX_STACK = 100, 100_000
MIN_HANDS, MAX_HANDS = 1, 100


class BustPolicy(Enum):
    """What happens to a player who loses every chip."""

    RESET = "reset"
    SIT_OUT = "sit_out"


@dataclass
class EngineConfig:
    """Blinds and pacing for the betting engine. Times are in seconds."""

    small_blind: int = SMALL_BLIND
    big_blind: int = BIG_BLIND
    decision_timeout: float = 30.0
    turn_delay: float = 2.0


@dataclass
class SeatSpec:
    """One seat: an agent reference, or empty when ``agent`` is None."""

    agent: str | None = None
    label: str | None = None
    player_id: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.agent is None

    def id_for(self, seat: int) -> str:
        """The player id used at ``seat``: the configured one or ``seat{n}``."""
        return self.player_id or f"seat{seat}"

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @classmethod
    def from_value(cls, value: Any) -> Self:
        """Accept ``"passive"``, ``"empty"`` or a table such as ``{agent = "random"}``."""
        if value is None or value == "empty":
            return cls()
        if isinstance(value, str):
            return cls(agent=value)
        if isinstance(value, dict):
            data = dict(value)
            if data.pop("empty", False) or data.get("agent") in (None, "empty"):
                return cls(label=data.get("label"), player_id=data.get("id"))
            return cls(
                agent=str(data.pop("agent")),
                label=data.pop("label", None),
                player_id=data.pop("id", None),
                options=data.pop("options", {}),
            )
        raise ConfigurationError(f"Cannot read seat {value!r}")


def default_seats() -> list[SeatSpec]:
    return [SeatSpec(agent="random", options={"seed": i}) for i in range(PLAYER_COUNT)]


@dataclass
class GameConfig:
    """Everything needed to start a game."""

    seats: list[SeatSpec] = field(default_factory=default_seats)
    starting_stack: int = INITIAL_STACK
    hands: int = HANDS_PER_GAME
    bust_policy: BustPolicy = BustPolicy.RESET
    seed: int | None = None
    engine: EngineConfig = field(default_factory=EngineConfig)
    settlement_url: str | None = None

    def validate(self) -> Self:
        """Raise ConfigurationError if the game cannot start."""
        for name, value in (
            ("starting_stack", self.starting_stack),
            ("hands", self.hands),
            ("small_blind", self.engine.small_blind),
            ("big_blind", self.engine.big_blind),
        ):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be a whole number, got {value!r}")
        if not MIN_SEATS <= len(self.seats) <= MAX_SEATS:
            raise ConfigurationError(
                f"A table needs {MIN_SEATS} to {MAX_SEATS} seats, got {len(self.seats)}"
            )
        if sum(1 for s in self.seats if not s.is_empty) < 2:
            raise ConfigurationError("At least two seats must hold an agent")
        if not MIN_STACK <= self.starting_stack <= MAX_STACK:
            raise ConfigurationError(
                f"Starting stack must be between {MIN_STACK} and {MAX_STACK}, got {self.starting_stack}"
            )
        if not MIN_HANDS <= self.hands <= MAX_HANDS:
            raise ConfigurationError(
                f"Number of hands must be between {MIN_HANDS} and {MAX_HANDS}, got {self.hands}"
            )
        blinds = self.engine
        if blinds.small_blind <= 0 or blinds.big_blind < blinds.small_blind:
            raise ConfigurationError(
                f"Invalid blinds {blinds.small_blind}/{blinds.big_blind}"
            )
        if blinds.big_blind > self.starting_stack:
            raise ConfigurationError("Big blind is larger than the starting stack")
        if blinds.decision_timeout is not None and blinds.decision_timeout <= 0:
            raise ConfigurationError("decision_timeout must be positive")
        if blinds.turn_delay < 0:
            raise ConfigurationError("turn_delay cannot be negative")
        ids = [spec.id_for(seat) for seat, spec in enumerate(self.seats)]
        repeated = sorted({pid for pid in ids if ids.count(pid) > 1})
        if repeated:
            raise ConfigurationError(f"Player ids must be unique, repeated: {', '.join(repeated)}")
        return self

    @classmethod
    def discover(cls) -> Self:
        """Load config from the first file found, falling back to defaults."""
        config_paths = [
            Path.cwd() / "pokerarena.toml",
            Path.cwd() / ".pokerarena.toml",
            Path.home() / ".config" / "pokerarena" / "config.toml",
        ]

        for path in config_paths:
            if path.exists():
                return cls.load(path)

        return cls()

    @classmethod
    def load(cls, path: Path) -> Self:
        """Load config from a TOML file."""
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Cannot read {path}: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        game = data.get("game", {})
        engine_data = data.get("engine", {})
        engine = EngineConfig(
            small_blind=engine_data.get("small_blind", SMALL_BLIND),
            big_blind=engine_data.get("big_blind", BIG_BLIND),
            decision_timeout=engine_data.get("decision_timeout", 30.0),
            turn_delay=engine_data.get("turn_delay", 2.0),
        )

        raw_seats = data.get("seats")
        seats = [SeatSpec.from_value(s) for s in raw_seats] if raw_seats else default_seats()

        try:
            bust_policy = BustPolicy(game.get("bust_policy", BustPolicy.RESET.value))
        except ValueError:
            raise ConfigurationError(f"Unknown bust policy {game.get('bust_policy')!r}") from None

        return cls(
            seats=seats,
            starting_stack=game.get("starting_stack", INITIAL_STACK),
            hands=game.get("hands", HANDS_PER_GAME),
            bust_policy=bust_policy,
            seed=game.get("seed"),
            engine=engine,
            settlement_url=data.get("settlement", {}).get("url"),
        )
