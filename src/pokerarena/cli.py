"""Command line interface for running games and checking hands."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .card import Card, card
from .card import cards as parse_cards
from .config import GameConfig
from .display import format_cards, run_game_cli
from .errors import ConfigurationError
from .hand import Hand
from .ranking import StandardRanker
from .showdown import ShowdownEvaluator

app = typer.Typer(help="Multi-seat Texas Hold'em engine for automated players")
console = Console()


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def play(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Game config TOML file"),
    hands: int | None = typer.Option(None, "--hands", "-n", help="Number of hands to play"),
    seed: int | None = typer.Option(None, "--seed", "-s", help="Seed for shuffling"),
    delay: float | None = typer.Option(None, "--delay", "-d", help="Pause between turns, in seconds"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Write game records as NDJSON"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level (e.g. INFO, DEBUG)"),
):
    """Play a game between the configured agents."""
    setup_logging(log_level)
    try:
        config = GameConfig.load(config_path) if config_path else GameConfig.discover()
        if hands is not None:
            config.hands = hands
        if seed is not None:
            config.seed = seed
        if delay is not None:
            config.engine.turn_delay = delay
        session = run_game_cli(config, log_file=log_file)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    if session.review_required:
        raise typer.Exit(1)


@app.command()
def rank(
    cards: list[str] = typer.Argument(..., help="5 to 7 cards (e.g., 'As Ks Qs Js Ts')"),
):
    """Rank a hand of 5 to 7 cards."""
    try:
        hand_cards = parse_cards(" ".join(cards))
        value = StandardRanker().rank(hand_cards)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Cards:[/bold] {format_cards(hand_cards)}")
    console.print(f"[bold]Hand:[/bold]  {value.describe()}  [dim]({value.category})[/dim]")
    console.print(f"[bold]Best five:[/bold] {format_cards(list(value.cards))}")


@app.command()
def showdown(
    holes: list[str] = typer.Argument(..., help="Hole cards per player (e.g., 'AsKs' 'QhQd')"),
    board: str = typer.Option(..., "--board", "-b", help="The 5 community cards"),
):
    """Resolve the winner(s) among several hole-card pairs on a board."""
    try:
        community = parse_cards(board)
        hands = []
        for i, hole in enumerate(holes):
            hole_cards = parse_cards(hole) if " " in hole or "," in hole else _split_pair(hole)
            if len(hole_cards) != 2:
                raise ValueError(f"Player {i + 1} needs exactly 2 hole cards, got {len(hole_cards)}")
            hands.append(Hand(player_id=f"Player {i + 1}", seat=i, hole_cards=hole_cards))

        evaluator = ShowdownEvaluator()
        values = evaluator.rank_hands(hands, community)
        winners = {h.player_id for h in evaluator.winners(hands, community)}
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Board:[/bold] {format_cards(community)}")
    table = Table(title="Showdown")
    table.add_column("Player", style="cyan")
    table.add_column("Hole")
    table.add_column("Hand")
    table.add_column("", justify="center")
    for h in hands:
        mark = "[bold green]WIN[/bold green]" if h.player_id in winners else ""
        table.add_row(h.player_id, format_cards(h.hole_cards), values[h.player_id].describe(), mark)
    console.print(table)


def _split_pair(s: str) -> list[Card]:
    """Split 'AsKs' or '10sKs' into two cards."""
    for cut in (2, 3):
        head, tail = s[:cut], s[cut:]
        if 2 <= len(tail) <= 3:
            try:
                return [card(head), card(tail)]
            except ValueError:
                continue
    raise ValueError(f"Cannot read hole cards {s!r}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
