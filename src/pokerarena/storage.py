"""Game records and the stores that keep them."""

from __future__ import annotations

import asyncio
import json
import pathlib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar
from uuid import uuid4

from .errors import PersistenceError


def new_id() -> str:
    return uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Record:
    """Base for everything written to a store. ``kind`` names the collection."""

    kind: ClassVar[str] = "record"

    id: str
    created_at: str = field(default_factory=_now, kw_only=True)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True)
class GameRecord(Record):
    kind: ClassVar[str] = "game"

    status: str = "active"
    button: int = 0
    hands_planned: int = 0
    hands_played: int = 0
    seats: list[dict[str, Any]] = field(default_factory=list)
    review_reason: str | None = None


@dataclass(frozen=True)
class RoundRecord(Record):
    kind: ClassVar[str] = "round"

    game_id: str = ""
    hand_number: int = 0
    button: int = 0
    community: list[str] = field(default_factory=list)
    pot: int = 0
    deltas: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class BettingRoundRecord(Record):
    kind: ClassVar[str] = "betting_round"

    round_id: str = ""
    street: str = ""
    highest_bet: int = 0
    collected: int = 0


@dataclass(frozen=True)
class HandRecord(Record):
    kind: ClassVar[str] = "hand"

    round_id: str = ""
    player_id: str = ""
    seat: int = 0
    hole_cards: list[str] = field(default_factory=list)
    committed: int = 0
    folded: bool = False
    all_in: bool = False


@dataclass(frozen=True)
class ActionRecordRow(Record):
    kind: ClassVar[str] = "action"

    round_id: str = ""
    player_id: str = ""
    street: str = ""
    type: str = ""
    amount: int = 0
    reasoning: str = ""
    blind: bool = False
    auto: bool = False


@dataclass(frozen=True)
class TransactionRecord(Record):
    """A chip movement between a stack and the pot.

    ``credit`` is True when chips flow into the stack (a pot award).
    """

    kind: ClassVar[str] = "transaction"

    game_id: str = ""
    round_id: str = ""
    player_id: str = ""
    amount: int = 0
    credit: bool = False


class InMemoryStore:
    """Keeps records in dicts. Appending an existing id replaces it."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Record]] = {}

    async def append(self, record: Record) -> None:
        self._records.setdefault(record.kind, {})[record.id] = record

    async def get(self, kind: str, record_id: str) -> Record | None:
        return self._records.get(kind, {}).get(record_id)

    def all(self, kind: str) -> list[Record]:
        return list(self._records.get(kind, {}).values())


class NDJSONStore:
    """Append-only audit trail: one JSON document per line.

    ``get`` scans the file and returns the latest document for the id, as a
    plain dict.
    """

    def __init__(self, path: pathlib.Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> pathlib.Path:
        return self._path

    async def append(self, record: Record) -> None:
        line = json.dumps(record.to_dict(), sort_keys=True) + "\n"
        async with self._lock:
            try:
                await asyncio.to_thread(self._write, line)
            except OSError as exc:
                raise PersistenceError(f"cannot write {self._path}: {exc}") from exc

    def _write(self, line: str) -> None:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line)

    async def get(self, kind: str, record_id: str) -> dict[str, Any] | None:
        try:
            text = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"cannot read {self._path}: {exc}") from exc
        found = None
        for line in text.splitlines():
            if not line.strip():
                continue
            doc = json.loads(line)
            if doc.get("kind") == kind and doc.get("id") == record_id:
                found = doc
        return found
