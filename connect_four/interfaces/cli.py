"""
cli.py - Command-line interface for Connect Four

Play against the AI or another person, list and replay saved games, analyze
a board position, and benchmark the engine.
"""

import argparse
import random
import sys
import time
from typing import Callable, List, Optional

import numpy as np

from connect_four.ai.evaluator import evaluation_breakdown
from connect_four.ai.reactions import Reaction, reaction_text
from connect_four.ai.search import (Difficulty, MinimaxPlayer, choose_move,
                                    simulate_thinking_delay)
from connect_four.data.history import DEFAULT_HISTORY_FILE, HistoryStore, format_game_summary
from connect_four.debug import debug, DebugLevel
from connect_four.game.board import Board
from connect_four.game.session import GameMode, GameSession, MoveOutcome, MoveStatus, SessionState
from connect_four.utils import COLS, ROWS, DEFAULT_SEARCH_DEPTH, Side

QUIT, UNDO, RESTART = -1, -2, -3


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for every CLI command."""
    parser = argparse.ArgumentParser(
        description='Connect Four',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Examples:
    # Play against the greedy AI
    connect-four play

    # Play against the minimax AI, letting it move first
    connect-four play --difficulty search --first ai

    # Two human players
    connect-four play --mode human

    # List and replay saved games
    connect-four history --list
    connect-four history --replay GAME_ID --delay 1.0

    # Analyze a position (42 comma-separated values, top row first)
    connect-four analyze --position 0,0,0,...,1,1,1,0,2,2,2
    """)
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging (same as --debug_level debug)')
    parser.add_argument('--debug_level',
                        choices=[level.name.lower() for level in DebugLevel],
                        default='warning',
                        help='Logging level')
    parser.add_argument('--log_file', type=str, default=None,
                        help='Also write log messages to this file')
    parser.add_argument('--history-file', dest='history_file', default=DEFAULT_HISTORY_FILE,
                        help='JSON file holding saved games')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    play_parser = subparsers.add_parser('play', help='Play a game interactively')
    play_parser.add_argument('--mode', choices=[m.value for m in GameMode], default='ai',
                             help='ai: play against the computer, human: two players')
    play_parser.add_argument('--difficulty', type=str, default='greedy',
                             help='AI tier: random, greedy, search (or easy, medium, hard)')
    play_parser.add_argument('--first', choices=['player', 'ai'], default='player',
                             help='Who moves first in AI games')
    play_parser.add_argument('--depth', type=int, default=DEFAULT_SEARCH_DEPTH,
                             help='Search depth for the search tier')
    play_parser.add_argument('--no-delay', dest='no_delay', action='store_true',
                             help='Skip the AI thinking pause')
    play_parser.add_argument('--seed', type=int, default=None,
                             help='Seed for the AI random source')

    history_parser = subparsers.add_parser('history', help='List, replay or clear saved games')
    history_parser.add_argument('--list', action='store_true', help='List saved games')
    history_parser.add_argument('--replay', type=str, help='Replay the game with this id')
    history_parser.add_argument('--delay', type=float, default=0.5,
                                help='Seconds between moves during replay')
    history_parser.add_argument('--clear', action='store_true', help='Delete all saved games')
    history_parser.add_argument('--confirm', action='store_true', help='Confirm --clear')

    analyze_parser = subparsers.add_parser('analyze', help='Analyze a board position')
    analyze_parser.add_argument('--position', type=str, required=True,
                                help=f'{ROWS * COLS} comma-separated cell values (0, 1, 2)')
    analyze_parser.add_argument('--side', type=str, default=None,
                                help='Side to move (red or yellow); inferred if omitted')
    analyze_parser.add_argument('--depth', type=int, default=DEFAULT_SEARCH_DEPTH,
                                help='Search depth for the search tier')

    benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark engine performance')
    benchmark_parser.add_argument('--iterations', type=int, default=1000,
                                  help='Number of iterations for benchmarking')
    benchmark_parser.add_argument('--depth', type=int, default=DEFAULT_SEARCH_DEPTH,
                                  help='Search depth to time')

    return parser


def parse_position(position: str) -> Board:
    """
    Build a board from a comma-separated list of cell values.

    Raises:
        ValueError: If the string has the wrong length or bad values
    """
    values = [int(v) for v in position.split(',')]
    if len(values) != ROWS * COLS:
        raise ValueError(f"Position string must have {ROWS * COLS} values, got {len(values)}")
    return Board(np.array(values).reshape(ROWS, COLS))


class SimpleCLI:
    """Terminal front end for the Connect Four engine."""

    def __init__(self, input_func: Callable[[str], str] = input,
                 sleep: Callable[[float], None] = time.sleep):
        self.args = None
        self.input_func = input_func
        self.sleep = sleep
        self.store: Optional[HistoryStore] = None

    def parse_args(self, argv: Optional[List[str]] = None) -> None:
        """Parse command-line arguments and configure logging."""
        self.args = build_parser().parse_args(argv)

        if self.args.debug:
            debug.configure(level=DebugLevel.DEBUG)
        else:
            debug.set_from_string(self.args.debug_level)
        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

        self.store = HistoryStore(self.args.history_file)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the command selected on the command line."""
        if not self.args:
            self.parse_args(argv)

        if self.args.command == 'play':
            return self.play_game()
        elif self.args.command == 'history':
            return self.history()
        elif self.args.command == 'analyze':
            return self.analyze_position()
        elif self.args.command == 'benchmark':
            return self.benchmark()

        build_parser().print_help()
        return 1

    # --- play ---

    def play_game(self) -> int:
        """Play a Connect Four game interactively."""
        try:
            difficulty = Difficulty.from_string(self.args.difficulty)
        except ValueError as e:
            print(e)
            return 1

        rng = random.Random(self.args.seed) if self.args.seed is not None else None
        session = GameSession(recorder=self.store.save_game, auto_ai=False,
                              search_depth=self.args.depth, rng=rng)
        mode = GameMode(self.args.mode)
        starting_side = session.ai_side if (mode == GameMode.HUMAN_VS_AI and self.args.first == 'ai') \
            else session.ai_side.other()

        print("Starting a new Connect Four game!")
        print(f"Enter column number (0-{COLS - 1}) to make a move.")
        print("Other commands: 'q' to quit, 'u' to undo, 'r' to restart.")

        session.start_game(mode, starting_side, difficulty)
        print(session.board.render())
        if mode == GameMode.HUMAN_VS_AI:
            self._show_reaction(Reaction.NEUTRAL)

        while session.state == SessionState.IN_PROGRESS:
            if session.is_ai_turn():
                if not self.args.no_delay:
                    simulate_thinking_delay(
                        on_thinking=lambda: self._show_reaction(Reaction.THINKING),
                        sleep=self.sleep)
                outcome = session.request_ai_move()
                self._show_outcome(session, outcome)
                continue

            move = self.get_human_move(session.current_side)
            if move is None:
                continue
            if move == QUIT:
                print("Quitting game.")
                return 0
            if move == UNDO:
                self._undo(session)
                continue
            if move == RESTART:
                session.start_game(mode, starting_side, difficulty)
                print("Game restarted.")
                print(session.board.render())
                continue

            outcome = session.submit_move(move, session.current_side)
            self._show_outcome(session, outcome)

        self._show_game_over(session)
        return 0

    def _undo(self, session: GameSession) -> None:
        if session.undo() != MoveStatus.ACCEPTED:
            print("No moves to undo.")
            return
        # In AI games step back to the human's turn
        while session.is_ai_turn() and session.can_undo():
            session.undo()
        print("Move undone.")
        print(session.board.render())

    def _show_outcome(self, session: GameSession, outcome: MoveOutcome) -> None:
        if not outcome.accepted:
            print(f"Invalid move: {outcome.reason}")
            return

        move = outcome.move
        who = session.side_name(move.side)
        print(f"{who} plays column {move.column}")
        print(session.board.render())
        if outcome.reaction is not None:
            self._show_reaction(outcome.reaction)

    @staticmethod
    def _show_reaction(reaction: Reaction) -> None:
        print(f"AI {reaction.emoji}  {reaction_text(reaction)}")

    def _show_game_over(self, session: GameSession) -> None:
        print("Game over!")
        if session.winner is None:
            print("It's a draw!")
        else:
            print(f"{session.side_name(session.winner)} wins! Line: {session.win_line}")
        if session.record is not None:
            print(f"Game saved as {session.record.game_id}")

    def get_human_move(self, side: Side) -> Optional[int]:
        """
        Read one command from the player.

        Returns:
            Column index, a special command code, or None for invalid input
        """
        user_input = self.input_func(f"{side.label} to move (0-{COLS - 1}, q/u/r): ").strip().lower()

        if user_input == 'q':
            return QUIT
        elif user_input == 'u':
            return UNDO
        elif user_input == 'r':
            return RESTART

        try:
            move = int(user_input)
        except ValueError:
            print("Invalid input. Please enter a column number or special command.")
            return None

        if not (0 <= move < COLS):
            print(f"Column must be between 0 and {COLS - 1}.")
            return None
        return move

    # --- history ---

    def history(self) -> int:
        """List, replay or clear saved games."""
        if self.args.clear:
            if not self.args.confirm:
                print("WARNING: This will delete all saved games.")
                print("To confirm, run: connect-four history --clear --confirm")
                return 1
            return 0 if self.store.clear_history() else 1

        if self.args.replay:
            return self.replay_game(self.args.replay, self.args.delay)

        if self.args.list:
            games = self.store.get_all_games()
            if not games:
                print("No saved games found")
                return 0
            print(f"Found {len(games)} saved games:")
            for game in games:
                print(f"{game['id']}: {format_game_summary(game)}")
            return 0

        print("Please specify an action: --list, --replay or --clear")
        return 1

    def replay_game(self, game_id: str, delay: float) -> int:
        """Print a saved game move by move."""
        try:
            steps = self.store.replay_game(game_id, delay=delay)
        except KeyError as e:
            print(f"Error: {e.args[0]}")
            return 1

        for step, move, board in steps:
            if move is None:
                print("Initial board:")
            else:
                print(f"\nMove {step}: {Side(move['player']).label} plays column {move['column']}")
            print(board.render())

        game = self.store.get_game_by_id(game_id)
        winner = game.get('winner')
        print("\nGame over! " + ("It's a draw!" if winner is None else f"{Side(winner).label} wins!"))
        return 0

    # --- analyze ---

    def analyze_position(self) -> int:
        """Report wins, legal moves, scores and AI choices for a position."""
        try:
            board = parse_position(self.args.position)
            side = Side.from_string(self.args.side) if self.args.side else self._side_to_move(board)
        except ValueError as e:
            print(f"Error parsing position: {e}")
            return 1

        print("Loaded position:")
        print(board.render())

        has_win = False
        for player in (Side.RED, Side.YELLOW):
            line = self._find_win_line(board, player)
            if line:
                print(f"Win for {player.label}: {line}")
                has_win = True
        if not has_win:
            print("No win detected for any player")

        if board.is_board_full():
            print("Board is full")
        else:
            print(f"Empty spaces: {ROWS * COLS - board.token_count()}")
        print(f"Valid moves: {board.legal_columns()}")

        for player in (Side.RED, Side.YELLOW):
            scores = evaluation_breakdown(board, player)
            print(f"Evaluation for {player.label}: {scores['total']} "
                  f"(center {scores['center']}, pairs {scores['pairs']})")

        if board.legal_columns() and not has_win:
            print(f"\n{side.label} to move:")
            for difficulty in Difficulty:
                column = choose_move(board, difficulty, side, depth=self.args.depth)
                print(f"  {difficulty.value:<7} -> column {column}")
        return 0

    @staticmethod
    def _side_to_move(board: Board) -> Side:
        # Red moves first, so equal counts mean Red is to move
        if board.token_count(Side.RED) > board.token_count(Side.YELLOW):
            return Side.YELLOW
        return Side.RED

    @staticmethod
    def _find_win_line(board: Board, side: Side):
        for row in range(ROWS):
            for col in range(COLS):
                result = board.check_win(row, col, side)
                if result:
                    return result.line
        return None

    # --- benchmark ---

    def benchmark(self) -> int:
        """Time the main engine operations."""
        iterations = max(1, self.args.iterations)
        print(f"Running benchmark with {iterations} iterations...")

        debug.start_timer("placement")
        placements = 0
        board = Board()
        for _ in range(iterations):
            legal = board.legal_columns()
            if not legal:
                board = Board()
                continue
            board.place(random.choice(legal), Side.RED if placements % 2 == 0 else Side.YELLOW)
            placements += 1
        elapsed = debug.end_timer("placement")
        print(f"Made {placements} placements: {elapsed:.6f} seconds total")

        boards = [self._random_board(random.randint(7, 20)) for _ in range(iterations)]

        debug.start_timer("win_check")
        checks = 0
        for board in boards:
            for row in range(ROWS):
                for col in range(COLS):
                    side = board.cell(row, col)
                    if side != Side.EMPTY:
                        board.check_win(row, col, side)
                        checks += 1
        elapsed = debug.end_timer("win_check")
        print(f"Performed {checks} win checks: {elapsed:.6f} seconds total")

        debug.start_timer("evaluation")
        for board in boards:
            evaluation_breakdown(board, Side.RED)
        elapsed = debug.end_timer("evaluation")
        print(f"Evaluated {len(boards)} positions: {elapsed:.6f} seconds total")

        player = MinimaxPlayer(depth=self.args.depth)
        debug.start_timer("search")
        column = player.get_move(Board(), Side.RED)
        elapsed = debug.end_timer("search")
        print(f"Depth {self.args.depth} search from the empty board chose column {column}: "
              f"{player.nodes_evaluated} nodes, {elapsed:.3f} seconds")
        return 0

    @staticmethod
    def _random_board(moves: int) -> Board:
        board = Board()
        side = Side.RED
        for _ in range(moves):
            legal = board.legal_columns()
            if not legal:
                break
            placement = board.place(random.choice(legal), side)
            if board.check_win(placement.row, placement.column, side):
                break
            side = side.other()
        return board


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    cli = SimpleCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
