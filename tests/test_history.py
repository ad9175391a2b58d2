"""Tests for the JSON game history store."""

import datetime
import json
import os
import threading

import pytest

from connect_four.data.history import (MAX_STORED_GAMES, HistoryStore, format_game_summary,
                                       safe_read_json)
from connect_four.game.board import Board
from connect_four.game.session import GameMode, GameSession
from connect_four.utils import Side

RED_VERTICAL_WIN = [0, 1, 0, 1, 0, 1, 0]


@pytest.fixture
def store(tmp_path):
    return HistoryStore(str(tmp_path / "data" / "history.json"))


def finished_game(store, columns=RED_VERTICAL_WIN):
    session = GameSession(recorder=store.save_game)
    session.start_game(GameMode.HUMAN_VS_HUMAN)
    for column in columns:
        assert session.submit_move(column, session.current_side).accepted
    return session


def test_missing_file_reads_as_empty(store):
    assert store.get_all_games() == []
    assert store.get_game_by_id("game_1_abc") is None
    assert store.get_record("game_1_abc") is None


@pytest.mark.parametrize("content", ["{not json", '{"id": "game_1"}'])
def test_unreadable_file_reads_as_empty(tmp_path, content):
    path = tmp_path / "history.json"
    path.write_text(content)

    assert safe_read_json(str(path)) == []


def test_session_records_are_saved(store):
    session = finished_game(store)

    games = store.get_all_games()
    assert len(games) == 1
    assert games[0]['id'] == session.game_id
    assert games[0]['winner'] == Side.RED.value
    assert store.get_record(session.game_id) == session.record
    assert not os.path.exists(store.path + ".tmp")


def test_file_holds_a_json_list(store):
    finished_game(store)

    with open(store.path) as f:
        data = json.load(f)
    assert isinstance(data, list)
    assert data[0]['moves'][0]['column'] == 0


def test_oldest_games_are_dropped(tmp_path):
    store = HistoryStore(str(tmp_path / "history.json"), max_games=3)
    for i in range(5):
        assert store.save_game({'id': f"game_{i}", 'moves': []})

    assert [g['id'] for g in store.get_all_games()] == ["game_2", "game_3", "game_4"]


def test_default_cap():
    assert MAX_STORED_GAMES == 100
    assert HistoryStore().max_games == MAX_STORED_GAMES


def test_clear_history(store):
    finished_game(store)

    assert store.clear_history()
    assert store.get_all_games() == []
    assert store.clear_history()


def test_replay_steps_through_moves(store):
    session = finished_game(store)
    slept = []

    steps = list(store.replay_game(session.game_id, delay=0.25, sleep=slept.append))

    assert len(steps) == len(RED_VERTICAL_WIN) + 1
    step, move, board = steps[0]
    assert (step, move) == (0, None)
    assert board == Board()

    assert [s[0] for s in steps] == list(range(len(RED_VERTICAL_WIN) + 1))
    assert [s[1]['column'] for s in steps[1:]] == RED_VERTICAL_WIN
    assert steps[-1][2].to_list() == session.record.final_board
    assert steps[3][2].token_count() == 3
    assert slept == [0.25] * len(RED_VERTICAL_WIN)


def test_replay_without_delay_does_not_sleep(store):
    session = finished_game(store)
    slept = []

    list(store.replay_game(session.game_id, sleep=slept.append))

    assert slept == []


def test_replay_unknown_game(store):
    finished_game(store)

    with pytest.raises(KeyError):
        store.replay_game("game_0_missing")


def test_format_game_summary():
    timestamp = 1700000000000
    game = {'id': "game_1", 'timestamp': timestamp, 'mode': "ai", 'winner': None,
            'moves': [{}] * 42}
    started = datetime.datetime.fromtimestamp(timestamp / 1000)

    summary = format_game_summary(game)

    assert summary == f"{started:%Y-%m-%d %H:%M:%S} - ai - Draw - 42 moves"
    game['winner'] = Side.YELLOW.value
    assert format_game_summary(game).endswith("- ai - Yellow - 42 moves")


def test_unreadable_file_is_not_overwritten(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json")
    store = HistoryStore(str(path))

    assert not store.save_game({'id': "game_1", 'moves': []})
    assert path.read_text() == "{not json"


def test_concurrent_saves_keep_every_game(tmp_path):
    path = str(tmp_path / "history.json")

    def save_many(prefix):
        store = HistoryStore(path)
        for i in range(10):
            assert store.save_game({'id': f"{prefix}_{i}", 'moves': []})

    threads = [threading.Thread(target=save_many, args=(name,)) for name in ("a", "b", "c")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    ids = {game['id'] for game in HistoryStore(path).get_all_games()}
    assert len(ids) == 30
