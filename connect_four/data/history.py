"""
history.py - Persistent game history for Connect Four

Finished games are stored as a JSON list in a single file guarded by a file
lock. Only the most recent MAX_STORED_GAMES records are kept. A
HistoryStore's save_game method can be passed straight to GameSession as its
recorder.
"""

import datetime
import json
import os
import shutil
import time
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

import filelock

from connect_four.debug import debug
from connect_four.game.board import Board
from connect_four.game.session import GameRecord
from connect_four.utils import Side

# Define paths to data files
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
DATA_DIR = os.path.join(BASE_DIR, 'data')
DEFAULT_HISTORY_FILE = os.path.join(DATA_DIR, 'history.json')

MAX_STORED_GAMES = 100

ReplayStep = Tuple[int, Optional[Dict[str, Any]], Board]


def _load_list(file_path: str) -> Optional[List[Dict]]:
    """Parse a JSON list; [] if the file is missing, None if it is unreadable."""
    if not os.path.exists(file_path):
        return []
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        debug.error(f"Error reading {file_path}: {e}", "history")
        return None

    if not isinstance(data, list):
        debug.error(f"Expected a list in {file_path}, found {type(data).__name__}", "history")
        return None
    return data


def _dump_atomic(file_path: str, data: Any) -> bool:
    temp_file = f"{file_path}.tmp"
    try:
        with open(temp_file, 'w') as f:
            json.dump(data, f, indent=2)
        shutil.move(temp_file, file_path)
        return True
    except (OSError, TypeError, ValueError) as e:
        debug.error(f"Error writing to {file_path}: {e}", "history")
        return False


def safe_read_json(file_path: str) -> List[Dict]:
    """
    Read a JSON list under a file lock.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed list (empty if the file is missing or unreadable)
    """
    if not os.path.exists(file_path):
        return []

    with filelock.FileLock(f"{file_path}.lock"):
        data = _load_list(file_path)
    return data if data is not None else []


def format_game_summary(game: Dict[str, Any]) -> str:
    """One-line description of a stored game."""
    started = datetime.datetime.fromtimestamp(game['timestamp'] / 1000)
    winner = game.get('winner')
    winner_text = 'Draw' if winner is None else Side(winner).label
    return (f"{started:%Y-%m-%d %H:%M:%S} - {game['mode']} - {winner_text} - "
            f"{len(game['moves'])} moves")


class HistoryStore:
    """JSON-file store of finished games."""

    def __init__(self, path: str = DEFAULT_HISTORY_FILE, max_games: int = MAX_STORED_GAMES):
        """
        Args:
            path: JSON file holding the game list
            max_games: Number of most recent games to keep
        """
        self.path = path
        self.max_games = max_games

    def save_game(self, record: Union[GameRecord, Dict[str, Any]]) -> bool:
        """
        Append a finished game, dropping the oldest beyond max_games.

        The read, trim and write happen under one lock acquisition. An
        existing file that cannot be parsed is left untouched.

        Args:
            record: GameRecord or its dict form

        Returns:
            True if the file was written
        """
        item = record.to_dict() if isinstance(record, GameRecord) else dict(record)

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with filelock.FileLock(f"{self.path}.lock"):
            games = _load_list(self.path)
            if games is None:
                debug.error(f"Not saving game {item.get('id')}: {self.path} is unreadable",
                            "history")
                return False
            games.append(item)
            games = games[-self.max_games:]
            written = _dump_atomic(self.path, games)

        if written:
            debug.info(f"Saved game {item.get('id')} ({len(games)} stored)", "history")
            return True
        debug.error(f"Failed to save game {item.get('id')}", "history")
        return False

    def get_all_games(self) -> List[Dict[str, Any]]:
        return safe_read_json(self.path)

    def get_game_by_id(self, game_id: str) -> Optional[Dict[str, Any]]:
        for game in self.get_all_games():
            if game.get('id') == game_id:
                return game
        debug.warning(f"Game {game_id} not found", "history")
        return None

    def get_record(self, game_id: str) -> Optional[GameRecord]:
        """Stored game as a GameRecord, or None."""
        game = self.get_game_by_id(game_id)
        return GameRecord.from_dict(game) if game else None

    def clear_history(self) -> bool:
        if not os.path.exists(self.path):
            return True
        with filelock.FileLock(f"{self.path}.lock"):
            try:
                os.remove(self.path)
            except OSError as e:
                debug.error(f"Failed to clear history: {e}", "history")
                return False
        debug.info("History cleared", "history")
        return True

    def replay_game(self, game_id: str, delay: float = 0.0,
                    sleep: Callable[[float], None] = time.sleep) -> Iterator[ReplayStep]:
        """
        Step through a stored game.

        Args:
            game_id: Id of the stored game
            delay: Seconds to wait after each move
            sleep: Sleep function, replaceable in tests

        Returns:
            Iterator of (step, move, board) starting with (0, None, empty board);
            each board is an independent copy

        Raises:
            KeyError: If no game has that id
        """
        game = self.get_game_by_id(game_id)
        if game is None:
            raise KeyError(f"Game {game_id} not found")
        return self._replay_steps(game, delay, sleep)

    @staticmethod
    def _replay_steps(game: Dict[str, Any], delay: float,
                      sleep: Callable[[float], None]) -> Iterator[ReplayStep]:
        board = Board()
        yield 0, None, board.clone()

        for step, move in enumerate(game['moves'], start=1):
            placement = board.place(move['column'], Side(move['player']))
            if placement.row != move['row']:
                debug.warning(f"Replay of {game['id']} step {step} landed on row "
                              f"{placement.row}, record says {move['row']}", "history")
            yield step, move, board.clone()
            if delay > 0:
                sleep(delay)
