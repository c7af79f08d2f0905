"""Rich display layer for watching a game."""

from __future__ import annotations

import asyncio
import pathlib

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .action import ActionRecord, ActionType, Street
from .card import Card
from .config import GameConfig
from .player import Player
from .round_manager import HandResult
from .session import GameSession
from .settlement import HttpSettlementNotifier, LoggingNotifier
from .showdown import PotAward
from .storage import NDJSONStore

console = Console()


def format_card(c: Card) -> str:
    if c.suit.is_red:
        return f"[bold red]{c.symbol}[/bold red]"
    return f"[bold white]{c.symbol}[/bold white]"


def format_cards(cards: list[Card]) -> str:
    return " ".join(format_card(c) for c in cards)


def render_seats(players: list[Player], button: int) -> None:
    """Render player seats as a compact grid."""
    seat_panels: list[Panel] = []

    for p in players:
        marker = "[yellow]D[/yellow] " if p.seat == button else "  "
        if p.is_empty:
            seat_panels.append(Panel(f"{marker}[dim]{p.label}[/dim]", border_style="dim", width=18, height=5))
            continue

        chip_line = f"[green]{p.stack:,}[/green]" if p.stack > 0 else "[red]0[/red]"
        status = "[dim]Sitting out[/dim]" if p.sitting_out else f"[dim]{p.agent}[/dim]"
        body = f"{marker}[white]{p.label}[/white]\n{chip_line}\n{status}"
        seat_panels.append(Panel(body, border_style="white", width=18, height=5))

    console.print(Columns(seat_panels, equal=True, expand=True))


def render_standings(players: list[Player], title: str = "Stacks") -> None:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("Agent")
    table.add_column("Stack", justify="right")

    ranked = sorted((p for p in players if not p.is_empty), key=lambda p: p.stack, reverse=True)
    for i, p in enumerate(ranked, 1):
        table.add_row(str(i), p.label, p.agent or "", f"{p.stack:,}")
    console.print(table)


def describe_action(record: ActionRecord, players: dict[str, Player]) -> str:
    name = players[record.player_id].label if record.player_id in players else record.player_id
    color = {
        ActionType.FOLD: "dim",
        ActionType.CHECK: "yellow",
        ActionType.BET: "green" if record.raised else "yellow",
    }[record.type]
    if record.all_in:
        color = "bold red"
    text = record.describe(name)
    if record.auto:
        text += " [magenta](auto)[/magenta]"
    return f"[{color}]{text}[/{color}]"


def run_game_cli(
    config: GameConfig,
    log_file: pathlib.Path | None = None,
) -> GameSession:
    """Entry point: set up a session, play it and render each hand."""
    store = NDJSONStore(log_file) if log_file else None
    notifier = HttpSettlementNotifier(config.settlement_url) if config.settlement_url else LoggingNotifier()

    session = GameSession(config=config, store=store, notifier=notifier)
    players = {p.id: p for p in session.players}

    console.print(
        Panel(
            "[bold]Texas Hold'em[/bold]\n"
            f"{len(session.active_players)} players  |  {config.hands} hand(s)  |  "
            f"Blinds {config.engine.small_blind}/{config.engine.big_blind}  |  "
            f"Starting stack: {config.starting_stack:,}",
            expand=False,
            border_style="green",
        )
    )

    def on_hand_start(hand_number: int, button: int) -> None:
        console.rule(f"[bold]Hand #{hand_number}[/bold]")
        render_seats(session.players, button)

    def on_deal(street: Street, community: list[Card]) -> None:
        if street == Street.PREFLOP:
            console.print("[bold]Cards dealt[/bold]")
        else:
            console.print(f"[bold cyan]── {str(street).capitalize()} ──  {format_cards(community)}[/bold cyan]")

    def on_action(record: ActionRecord) -> None:
        console.print(f"  {describe_action(record, players)}")

    def on_showdown(awards: list[PotAward]) -> None:
        for award in awards:
            names = ", ".join(players[w].label for w in award.winners)
            hand_str = f" with [bold]{award.value.describe()}[/bold]" if award.value else ""
            console.print(f"[bold green]{names} wins {award.pot.amount:,}{hand_str}[/bold green]")

    def on_hand_end(result: HandResult) -> None:
        for pid, hole in result.shown.items():
            console.print(f"  {players[pid].label}: {format_cards(hole)}")
        render_standings(session.players)

    def on_bust(player: Player) -> None:
        console.print(f"[bold red]{player.label} is out of chips[/bold red]")

    session.on_hand_start = on_hand_start
    session.on_deal = on_deal
    session.on_action = on_action
    session.on_showdown = on_showdown
    session.on_hand_end = on_hand_end
    session.on_bust = on_bust

    try:
        asyncio.run(session.run())
    except KeyboardInterrupt:
        console.print("\n[dim]Game interrupted.[/dim]")
        return session

    if session.review_required:
        console.print(
            Panel(
                f"[bold red]Game stopped for review[/bold red]\n{session.review_reason}",
                expand=False,
            )
        )
    render_standings(session.players, title="Final stacks")
    if store is not None:
        console.print(f"[dim]Audit trail written to {store.path}[/dim]")
    return session
