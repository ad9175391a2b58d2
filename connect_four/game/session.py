"""
session.py - Game session controller for Connect Four

GameSession owns the live board, the side to move, the move log and the undo
stack. Human moves arrive through submit_move, AI moves through
request_ai_move; both return a MoveOutcome describing what happened. Rejected
requests never change session state.

Presentation code reacts to the returned outcomes and to GameEvent
notifications delivered to subscribed listeners. When a game ends, a
GameRecord is handed to the optional recorder (for example
HistoryStore.save_game).
"""

import random
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple, Union

from connect_four.ai.reactions import Reaction
from connect_four.ai.search import Difficulty, choose_move, find_winning_column
from connect_four.debug import debug
from connect_four.game.board import Board, Cell
from connect_four.utils import (DEFAULT_SEARCH_DEPTH, MAX_UNDO_DEPTH, NO_MOVE,
                                GameResult, Side)


class GameMode(Enum):
    HUMAN_VS_AI = "ai"
    HUMAN_VS_HUMAN = "human"

    @classmethod
    def from_string(cls, value: str) -> 'GameMode':
        normalized = str(value).strip().lower()
        aliases = {"hva": cls.HUMAN_VS_AI, "hvh": cls.HUMAN_VS_HUMAN}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown game mode: {value!r}") from None


class Controller(Enum):
    HUMAN = auto()
    AI = auto()


class SessionState(Enum):
    IDLE = auto()
    IN_PROGRESS = auto()
    TERMINAL = auto()


class MoveStatus(Enum):
    ACCEPTED = "accepted"
    ILLEGAL_MOVE = "illegal_move"
    OUT_OF_TURN = "out_of_turn"
    INVALID_STATE = "invalid_state"
    NO_LEGAL_MOVES = "no_legal_moves"


class EventKind(Enum):
    GAME_STARTED = "game_started"
    MOVE_ACCEPTED = "move_accepted"
    MOVE_REJECTED = "move_rejected"
    AI_DECISION = "ai_decision"
    MOVE_UNDONE = "move_undone"
    GAME_OVER = "game_over"


def controller_for(mode: GameMode, side: Side, ai_side: Side) -> Controller:
    """Decide who supplies moves for ``side`` under ``mode``."""
    if mode == GameMode.HUMAN_VS_AI and side == ai_side:
        return Controller.AI
    return Controller.HUMAN


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_game_id() -> str:
    """Unique id of the form game_<epoch ms>_<9 random chars>."""
    return f"game_{now_ms()}_{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class GameEvent:
    kind: EventKind
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Move:
    """One accepted placement."""
    turn: int
    side: Side
    column: int
    row: int
    reaction: Optional[Reaction] = None
    snapshot: Optional[List[List[int]]] = None
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'turn': self.turn,
            'player': self.side.value,
            'column': self.column,
            'row': self.row,
            'reaction': self.reaction.name if self.reaction else None,
            'board_snapshot': self.snapshot,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Move':
        reaction = data.get('reaction')
        return cls(
            turn=data['turn'],
            side=Side(data['player']),
            column=data['column'],
            row=data['row'],
            reaction=Reaction[reaction] if reaction else None,
            snapshot=data.get('board_snapshot'),
            timestamp=data.get('timestamp', 0),
        )


@dataclass(frozen=True)
class Checkpoint:
    board: Board
    side: Side
    log_length: int


@dataclass(frozen=True)
class GameRecord:
    """Finalized description of a finished game."""
    game_id: str
    timestamp: int
    mode: GameMode
    difficulty: Difficulty
    starting_side: Side
    moves: Tuple[Move, ...]
    final_board: List[List[int]]
    winner: Optional[Side]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.game_id,
            'timestamp': self.timestamp,
            'mode': self.mode.value,
            'difficulty': self.difficulty.value,
            'starting_side': self.starting_side.value,
            'moves': [move.to_dict() for move in self.moves],
            'final_board': self.final_board,
            'winner': self.winner.value if self.winner else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameRecord':
        winner = data.get('winner')
        return cls(
            game_id=data['id'],
            timestamp=data['timestamp'],
            mode=GameMode(data['mode']),
            difficulty=Difficulty(data['difficulty']),
            starting_side=Side(data['starting_side']),
            moves=tuple(Move.from_dict(m) for m in data['moves']),
            final_board=data['final_board'],
            winner=Side(winner) if winner else None,
        )


@dataclass
class MoveOutcome:
    """What a move request did, for the presentation layer to render."""
    status: MoveStatus
    move: Optional[Move] = None
    result: GameResult = GameResult.IN_PROGRESS
    winner: Optional[Side] = None
    win_line: List[Cell] = field(default_factory=list)
    reaction: Optional[Reaction] = None
    reason: str = ""
    ai_reply: Optional['MoveOutcome'] = None

    @property
    def accepted(self) -> bool:
        return self.status == MoveStatus.ACCEPTED


Listener = Callable[[GameEvent], None]
Recorder = Callable[[GameRecord], Any]


class GameSession:
    """
    Controller for a single game at a time.

    Turn ownership follows controller_for(mode, side, ai_side). With
    ``auto_ai`` enabled, an AI reply is computed as soon as the AI side is
    to move; presentation layers that want to pace the AI (thinking delay,
    animation) pass auto_ai=False and call request_ai_move themselves.

    Listeners and the recorder are called only after a move has been fully
    applied; an exception they raise propagates with the session already in
    its post-move state.
    """

    def __init__(self, ai_side: Side = Side.YELLOW,
                 recorder: Optional[Recorder] = None,
                 auto_ai: bool = True,
                 search_depth: int = DEFAULT_SEARCH_DEPTH,
                 rng: Optional[random.Random] = None,
                 max_undo: int = MAX_UNDO_DEPTH):
        """
        Initialize an idle session.

        Args:
            ai_side: Side played by the AI in human-vs-AI games
            recorder: Called with the GameRecord when a game finishes
            auto_ai: Reply with the AI automatically when it is its turn
            search_depth: Depth used by the SEARCH tier
            rng: Random source for the AI tiers
            max_undo: Maximum number of checkpoints kept
        """
        if ai_side == Side.EMPTY:
            raise ValueError("ai_side must be RED or YELLOW")

        self.ai_side = ai_side
        self.recorder = recorder
        self.auto_ai = auto_ai
        self.search_depth = search_depth
        self.rng = rng

        self._listeners: List[Listener] = []
        self._board = Board()
        self._current_side = Side.RED
        self._moves: List[Move] = []
        self._undo_stack: Deque[Checkpoint] = deque(maxlen=max_undo)
        self._state = SessionState.IDLE
        self._mode = GameMode.HUMAN_VS_AI
        self._difficulty = Difficulty.GREEDY
        self._starting_side = Side.RED
        self._game_id: Optional[str] = None
        self._started_at: Optional[int] = None
        self._winner: Optional[Side] = None
        self._win_line: List[Cell] = []
        self._record: Optional[GameRecord] = None

    # --- Listeners ---

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: EventKind, message: str, **data) -> None:
        debug.info(message, "session")
        event = GameEvent(kind, message, data)
        for listener in list(self._listeners):
            listener(event)

    # --- Queries ---

    @property
    def board(self) -> Board:
        """A copy of the live board."""
        return self._board.clone()

    @property
    def current_side(self) -> Side:
        return self._current_side

    @property
    def moves(self) -> Tuple[Move, ...]:
        return tuple(self._moves)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> GameMode:
        return self._mode

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def starting_side(self) -> Side:
        return self._starting_side

    @property
    def game_id(self) -> Optional[str]:
        return self._game_id

    @property
    def started_at(self) -> Optional[int]:
        return self._started_at

    @property
    def winner(self) -> Optional[Side]:
        return self._winner

    @property
    def win_line(self) -> List[Cell]:
        return list(self._win_line)

    @property
    def record(self) -> Optional[GameRecord]:
        return self._record

    def controller(self, side: Side) -> Controller:
        return controller_for(self._mode, side, self.ai_side)

    def is_ai_turn(self) -> bool:
        return (self._state == SessionState.IN_PROGRESS
                and self.controller(self._current_side) == Controller.AI)

    def can_undo(self) -> bool:
        return self._state == SessionState.IN_PROGRESS and bool(self._undo_stack)

    def side_name(self, side: Side) -> str:
        if self.controller(side) == Controller.AI:
            return "AI"
        return side.label

    # --- Operations ---

    def start_game(self, mode: Union[GameMode, str] = GameMode.HUMAN_VS_AI,
                   starting_side: Union[Side, str] = Side.RED,
                   difficulty: Union[Difficulty, str] = Difficulty.GREEDY) -> Optional[MoveOutcome]:
        """
        Start a fresh game, discarding any game in progress.

        Args:
            mode: Human-vs-AI or human-vs-human
            starting_side: Side that moves first
            difficulty: AI tier for human-vs-AI games

        Returns:
            The AI's opening MoveOutcome when the AI moves first and auto_ai
            is on, otherwise None
        """
        if isinstance(mode, str):
            mode = GameMode.from_string(mode)
        if isinstance(starting_side, str):
            starting_side = Side.from_string(starting_side)
        if isinstance(difficulty, str):
            difficulty = Difficulty.from_string(difficulty)
        if starting_side == Side.EMPTY:
            raise ValueError("starting_side must be RED or YELLOW")

        self._board = Board()
        self._moves = []
        self._undo_stack.clear()
        self._mode = mode
        self._difficulty = difficulty
        self._starting_side = starting_side
        self._current_side = starting_side
        self._game_id = generate_game_id()
        self._started_at = now_ms()
        self._winner = None
        self._win_line = []
        self._record = None
        self._state = SessionState.IN_PROGRESS

        self._emit(EventKind.GAME_STARTED,
                   f"New game started - Mode: {mode.value}, Difficulty: {difficulty.value}, "
                   f"{self.side_name(starting_side)} starts",
                   game_id=self._game_id, mode=mode, difficulty=difficulty,
                   starting_side=starting_side)

        if self.auto_ai and self.is_ai_turn():
            return self.request_ai_move()
        return None

    def submit_move(self, column: int, acting_side: Side) -> MoveOutcome:
        """
        Apply a human move.

        Args:
            column: Column to drop into
            acting_side: Side the move is made for

        Returns:
            MoveOutcome; rejections carry ILLEGAL_MOVE, OUT_OF_TURN or
            INVALID_STATE and leave the session unchanged
        """
        if self._state != SessionState.IN_PROGRESS:
            return self._reject(MoveStatus.INVALID_STATE, f"No game in progress ({self._state.name})",
                                column=column, side=acting_side)

        if acting_side != self._current_side or self.controller(acting_side) == Controller.AI:
            return self._reject(MoveStatus.OUT_OF_TURN,
                                f"It is not {acting_side.label}'s turn to move",
                                column=column, side=acting_side)

        if self._board.is_column_full(column):
            return self._reject(MoveStatus.ILLEGAL_MOVE, f"Column {column} is full or out of range",
                                column=column, side=acting_side)

        blocked_ai_win = False
        if self._mode == GameMode.HUMAN_VS_AI:
            blocked_ai_win = find_winning_column(self._board, self.ai_side) == column

        outcome = self._apply_move(column, acting_side, is_ai=False)

        if self._mode == GameMode.HUMAN_VS_AI:
            if outcome.result == GameResult.WIN:
                outcome.reaction = Reaction.SAD
            elif outcome.result == GameResult.DRAW:
                outcome.reaction = Reaction.DRAW
            elif blocked_ai_win:
                outcome.reaction = Reaction.FRUSTRATED
                debug.info("Move blocked an immediate AI win", "session")

        if self.auto_ai and self.is_ai_turn():
            outcome.ai_reply = self.request_ai_move()
        return outcome

    def request_ai_move(self) -> MoveOutcome:
        """
        Let the AI play for the side to move.

        Returns:
            MoveOutcome for the AI's placement, INVALID_STATE when it is not
            the AI's turn, or NO_LEGAL_MOVES on a full board
        """
        if not self.is_ai_turn():
            return self._reject(MoveStatus.INVALID_STATE, "It is not the AI's turn",
                                side=self._current_side)

        side = self._current_side
        column = choose_move(self._board, self._difficulty, side,
                             depth=self.search_depth, rng=self.rng)
        if column == NO_MOVE:
            return self._reject(MoveStatus.NO_LEGAL_MOVES, "AI has no legal move", side=side)
        if self._board.is_column_full(column):
            return self._reject(MoveStatus.ILLEGAL_MOVE, f"AI selected full column {column}",
                                column=column, side=side)

        self._emit(EventKind.AI_DECISION,
                   f"AI ({self._difficulty.value}) chose column {column}",
                   column=column, side=side, difficulty=self._difficulty)
        return self._apply_move(column, side, is_ai=True)

    def undo(self) -> MoveStatus:
        """
        Roll back the most recent accepted move.

        Returns:
            ACCEPTED, or INVALID_STATE when no game is in progress or there
            is nothing to undo
        """
        if not self.can_undo():
            debug.debug("Undo rejected", "session")
            return MoveStatus.INVALID_STATE

        checkpoint = self._undo_stack.pop()
        self._board = checkpoint.board
        self._current_side = checkpoint.side
        del self._moves[checkpoint.log_length:]

        self._emit(EventKind.MOVE_UNDONE, "Move undone",
                   side=self._current_side, moves=len(self._moves))
        return MoveStatus.ACCEPTED

    # --- Internals ---

    def _reject(self, status: MoveStatus, reason: str, **data) -> MoveOutcome:
        self._emit(EventKind.MOVE_REJECTED, reason, status=status, **data)
        return MoveOutcome(status=status, reason=reason)

    def _apply_move(self, column: int, side: Side, is_ai: bool) -> MoveOutcome:
        # Session state is final before any listener is notified
        self._undo_stack.append(Checkpoint(self._board.clone(), self._current_side, len(self._moves)))

        placement = self._board.place(column, side)
        win = self._board.check_win(placement.row, column, side)
        board_full = self._board.is_board_full()

        reaction = None
        if is_ai:
            if win:
                reaction = Reaction.SMUG
            elif board_full:
                reaction = Reaction.DRAW
            else:
                reaction = Reaction.HAPPY

        move = Move(turn=len(self._moves) + 1, side=side, column=column, row=placement.row,
                    reaction=reaction, snapshot=self._board.to_list())
        self._moves.append(move)

        outcome = MoveOutcome(status=MoveStatus.ACCEPTED, move=move, reaction=reaction)

        if win:
            outcome.result = GameResult.WIN
            outcome.winner = side
            outcome.win_line = list(win.line)
            self._finish(side, win.line)
        elif board_full:
            outcome.result = GameResult.DRAW
            self._finish(None, [])
        else:
            self._current_side = side.other()

        game_over = outcome.result.is_game_over()
        if game_over and self.recorder is not None:
            self.recorder(self._record)

        self._emit(EventKind.MOVE_ACCEPTED,
                   f"{self.side_name(side)} dropped disc in column {column}",
                   move=move)
        if game_over:
            self._announce_game_over()

        return outcome

    def _finish(self, winner: Optional[Side], line: List[Cell]) -> None:
        self._state = SessionState.TERMINAL
        self._winner = winner
        self._win_line = list(line)
        self._record = GameRecord(
            game_id=self._game_id,
            timestamp=self._started_at,
            mode=self._mode,
            difficulty=self._difficulty,
            starting_side=self._starting_side,
            moves=tuple(self._moves),
            final_board=self._board.to_list(),
            winner=winner,
        )

    def _announce_game_over(self) -> None:
        if self._winner is None:
            message = "Game ended in a draw"
        else:
            message = f"{self.side_name(self._winner)} wins!"
        self._emit(EventKind.GAME_OVER, message, winner=self._winner,
                   win_line=list(self._win_line), record=self._record)
