"""
FireSync Console.

Text front end: main menu, catalogue table and the interactive round loop.
All game rules live in sim.engine; this module only prompts and prints.
"""

import argparse
import sys
import time
from typing import Callable, Dict, List, Optional

import numpy as np

from sim.catalogue import load_catalogue
from sim.config import DIFFICULTIES, GameConfig, load_config
from sim.engine import RoundEngine
from sim.errors import AffordabilityError, FireSyncError, ValidationError
from sim.logger import MatchLogger
from sim.mechanics import display_score, dps
from sim.runner import MAX_SELECTION_ATTEMPTS, random_policy, simulate_matchups
from sim.state import Catalogue, GameSummary, RoundResult


InputFn = Callable[[str], str]

MENU_ITEMS = ["Play", "Options", "Help", "About", "Exit"]
MENU_PLAY, MENU_OPTIONS, MENU_HELP, MENU_ABOUT, MENU_EXIT = range(1, 6)

TEAMS = ["T", "CT"]

# Catalogue rows per About page
ABOUT_PAGE_SIZE = 15

# (header, width, format) per catalogue column
TABLE_COLUMNS = [
    ("Weapon Name", 14, "<"),
    ("Price($)", 8, "d"),
    ("Damage", 6, "d"),
    ("Fire Rate (RPM)", 15, ".2f"),
    ("Magazine Size", 13, "d"),
    ("Damage Falloff", 14, "d"),
    ("Accurate Range", 14, ".2f"),
    ("Recoil", 6, ".1f"),
    ("Score", 7, ".3f"),
    ("DPS", 7, ".1f"),
]


# =============================================================================
# INPUT
# =============================================================================

def parse_choice(raw: str, low: int, high: int) -> int:
    """
    Parse a numeric menu choice.

    Raises:
        ValidationError: not an integer or outside [low, high]
    """
    text = str(raw).strip()
    try:
        value = int(text)
    except ValueError:
        raise ValidationError(f"'{text}' is not a number") from None
    if not low <= value <= high:
        raise ValidationError(f"choose a number between {low} and {high}")
    return value


def read_choice(prompt: str, low: int, high: int, input_fn: InputFn = input) -> int:
    """Prompt until the player enters an integer in [low, high]."""
    while True:
        try:
            return parse_choice(input_fn(prompt), low, high)
        except ValidationError as e:
            print(f"Invalid input: {e}")


# =============================================================================
# RENDERING
# =============================================================================

def format_menu() -> str:
    lines = ["", "Menu", "--------"]
    lines += [f" {i}. {item}" for i, item in enumerate(MENU_ITEMS, start=1)]
    return "\n".join(lines)


def _rule() -> str:
    return "|" + "|".join("-" * width for _, width, _ in TABLE_COLUMNS) + "|"


def page_count(catalogue: Catalogue, page_size: int = ABOUT_PAGE_SIZE) -> int:
    return max(1, -(-catalogue.count // page_size))


def format_catalogue_table(
    catalogue: Catalogue,
    page: Optional[int] = None,
    page_size: int = ABOUT_PAGE_SIZE
) -> str:
    """
    Catalogue as a bordered table; scores are shown divided by 100.

    With a 0-based page only that page's rows are shown and the footer
    carries the page position.
    """
    if page is None:
        start, end = 0, catalogue.count
    else:
        start = page * page_size
        end = min(start + page_size, catalogue.count)

    header = "|" + "|".join(f"{title:<{width}}"[:width] for title, width, _ in TABLE_COLUMNS) + "|"
    lines = [_rule(), header, _rule()]

    for i in range(start, end):
        record = catalogue[i]
        values = [
            record.name,
            record.price,
            record.damage,
            record.fire_rate,
            record.magazine_size,
            record.falloff,
            record.accurate_range,
            record.recoil,
            display_score(catalogue.score(i)),
            dps(record),
        ]
        cells = []
        for (_, width, fmt), value in zip(TABLE_COLUMNS, values):
            if fmt == "<":
                cells.append(f"{value:<{width}}"[:width])
            else:
                cells.append(f"{value:>{width}{fmt}}")
        lines.append("|" + "|".join(cells) + "|")

    lines.append(_rule())
    footer = f"Total weapons: {catalogue.count}"
    if page is not None:
        footer += f" | Page {page + 1}/{page_count(catalogue, page_size)}"
    lines.append(footer)
    return "\n".join(lines)


def show_catalogue(catalogue: Catalogue, input_fn: InputFn = input, page_size: int = ABOUT_PAGE_SIZE):
    """Page through the catalogue table with n/p until the player enters q."""
    pages = page_count(catalogue, page_size)
    page = 0
    print(format_catalogue_table(catalogue, page, page_size))

    while pages > 1:
        key = input_fn("n - Next page | p - Previous page | q - Quit: ").strip().lower()
        if key == "q":
            return
        if key == "n":
            if page == pages - 1:
                print("Already on last page")
                continue
            page += 1
        elif key == "p":
            if page == 0:
                print("Already on first page")
                continue
            page -= 1
        else:
            print("Invalid input")
            continue
        print(format_catalogue_table(catalogue, page, page_size))


def format_tier_listing(engine: RoundEngine) -> str:
    budget = engine.state.budget
    lines = []
    for number, record in engine.offered():
        marker = "" if record.price <= budget else "  (can't afford)"
        lines.append(f"{number}) {record.name} ${record.price}{marker}")
    return "\n".join(lines)


def format_reveal(result: RoundResult, catalogue: Catalogue) -> str:
    player = catalogue[result.player_index].name
    opponent = catalogue[result.opponent_index].name
    return f"Your Weapon is {player} \nEnemy Weapon is {opponent}"


def format_outcome(result: RoundResult) -> str:
    verdict = "You win" if result.won else "You lose"
    return f"\n{verdict}\nScore Table : {result.wins} {result.losses}"


def format_summary(summary: GameSummary) -> str:
    lines = [
        "",
        "Game Over",
        "=" * 40,
        f"Final Score: {summary.wins} - {summary.losses}",
        f"Final Balance: ${summary.budget}",
    ]
    if summary.aborted:
        lines.append(f"Game ended early after {summary.rounds_played} rounds.")

    winner = summary.get_winner()
    if winner == "player":
        lines.append("Congratulations, you won the match!")
    elif winner == "opponent":
        lines.append("Better luck next time.")
    else:
        lines.append("The match is a tie.")
    lines.append("=" * 40)
    return "\n".join(lines)


def format_simulation(rows: List[Dict], simulation_count: int) -> str:
    lines = [
        "",
        f"Balance simulation ({simulation_count} draws per weapon)",
        "=" * 60,
        f"{'Weapon':<16} {'Round':>5} {'Score':>9} {'Win Rate':>9} {'Expected':>9}",
        "-" * 60,
    ]
    for r in rows:
        lines.append(
            f"{r['name']:<16} {r['round']:>5} {display_score(r['score']):>9.3f} "
            f"{r['win_rate']*100:>8.1f}% {r['expected_win_rate']*100:>8.1f}%"
        )
    lines.append("=" * 60)
    return "\n".join(lines)


# =============================================================================
# GAME LOOP
# =============================================================================

def _buy_weapon(
    engine: RoundEngine,
    input_fn: InputFn,
    auto_rng: Optional[np.random.Generator]
) -> bool:
    """Prompt until the engine accepts a purchase. Returns False if auto mode gives up."""
    attempts = 0
    while True:
        if auto_rng is not None:
            if attempts >= MAX_SELECTION_ATTEMPTS:
                return False
            attempts += 1
            raw = str(random_policy(engine, auto_rng))
            print(f"Please Select your weapon: {raw}")
        else:
            raw = input_fn("Please Select your weapon: ")

        try:
            engine.select(raw)
            return True
        except ValidationError as e:
            print(f"Invalid selection: {e}")
        except AffordabilityError:
            print("Your money isn't enough")


def play_game(
    catalogue: Catalogue,
    config: GameConfig = None,
    seed: int = None,
    input_fn: InputFn = input,
    sleep_fn: Callable[[float], None] = time.sleep,
    logger: MatchLogger = None,
    auto: bool = False,
    engine: RoundEngine = None
) -> GameSummary:
    """
    Play one interactive game.

    Args:
        catalogue: Loaded catalogue
        config: Game configuration
        seed: Random seed for the opponent (and auto picks)
        input_fn: Source of player input
        sleep_fn: Pacing delay before each reveal
        logger: Optional match logger
        auto: Pick weapons at random without prompting or pausing
        engine: Pre-built engine (tests inject draws this way)

    Returns:
        Game summary
    """
    # separate streams so auto picks never mirror the opponent draw
    engine_seq, policy_seq = np.random.SeedSequence(seed).spawn(2)
    if engine is None:
        engine = RoundEngine(catalogue, config=config, rng=np.random.default_rng(engine_seq))
    config = engine.config
    engine.reset()
    auto_rng = np.random.default_rng(policy_seq) if auto else None

    if logger:
        logger.start_game(seed=seed, catalogue=catalogue)

    print("Welcome to FireSync")
    if auto:
        team = TEAMS[0]
    else:
        prompt = "".join(f"{i}) {name}\n" for i, name in enumerate(TEAMS, start=1))
        team = TEAMS[read_choice(prompt + "Please select your team: ", 1, len(TEAMS), input_fn) - 1]
    print(f"Playing as {team}")

    while not engine.is_game_over():
        engine.start_round()
        print(f"Your Balance (Round {engine.state.round_number}): ${engine.state.budget}")
        print(format_tier_listing(engine))

        if not _buy_weapon(engine, input_fn, auto_rng):
            print("No weapon could be bought this round.")
            engine.abort()
            break

        result = engine.resolve()
        print(format_reveal(result, catalogue), end="")
        if not auto and config.reveal_delay > 0:
            sleep_fn(config.reveal_delay)
        print(format_outcome(result))

        if logger:
            logger.log_round(result, catalogue)

        engine.advance()

    summary = engine.summary()
    print(format_summary(summary))
    if logger:
        logger.end_game(summary)
    return summary


def main_menu(
    catalogue: Catalogue,
    config: GameConfig = None,
    seed: int = None,
    input_fn: InputFn = input,
    sleep_fn: Callable[[float], None] = time.sleep,
    logger: MatchLogger = None,
    auto: bool = False
):
    """Menu loop until the player picks Exit."""
    while True:
        print(format_menu())
        choice = read_choice("\nYour Choice : ", 1, len(MENU_ITEMS), input_fn)

        if choice == MENU_PLAY:
            play_game(catalogue, config, seed=seed, input_fn=input_fn, sleep_fn=sleep_fn,
                      logger=logger, auto=auto)
        elif choice in (MENU_OPTIONS, MENU_HELP):
            print("Options and Help not implemented yet.")
        elif choice == MENU_ABOUT:
            show_catalogue(catalogue, input_fn)
        elif choice == MENU_EXIT:
            break


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="FireSync weapon economy game")
    parser.add_argument("--catalogue", type=str, default=None, help="Weapon catalogue file")
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible games")
    parser.add_argument("--no-delay", action="store_true", help="Skip the pause before each reveal")
    parser.add_argument("--auto", action="store_true", help="Random weapon picks, no prompts or delays")
    parser.add_argument("--sim", type=int, default=None, metavar="COUNT",
                        help="Print a balance simulation report and exit")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default=None, help="Opponent difficulty")
    parser.add_argument("--log-dir", type=str, default=None, help="Write JSONL match logs here")
    return parser


def main(argv: List[str] = None, input_fn: InputFn = input) -> int:
    """Console entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        if args.no_delay:
            config.reveal_delay = 0.0
        if args.difficulty:
            config.difficulty = args.difficulty
        config.validate()
        catalogue = load_catalogue(args.catalogue, capacity=config.capacity, weights=config.weights)
        # fail fast on a catalogue too short for the tier layout
        RoundEngine(catalogue, config=config)
    except FireSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.sim is not None:
        if args.sim < 1:
            print("Error: --sim needs a positive count", file=sys.stderr)
            return 1
        rows = simulate_matchups(catalogue, args.sim, config=config, seed=args.seed)
        print(format_simulation(rows, args.sim))
        return 0

    logger = MatchLogger(args.log_dir, enabled=args.log_dir is not None)

    try:
        if args.auto:
            play_game(catalogue, config, seed=args.seed, logger=logger, auto=True)
        else:
            main_menu(catalogue, config, seed=args.seed, input_fn=input_fn, logger=logger)
    except (EOFError, KeyboardInterrupt):
        print("\nGoodbye.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
