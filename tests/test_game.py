"""Unit tests for the tic-tac-toe game engine."""

import random

from tictactoe.game import (
    DRAW,
    PLAYING,
    WINNING_LINES,
    WON,
    TicTacToeGame,
    evaluate_board,
)


def play(game, moves):
    for index in moves:
        game.submit_move(index)


def test_initial_state():
    game = TicTacToeGame()
    snapshot = game.snapshot()
    assert snapshot.cells == (" ",) * 9
    assert snapshot.current_player == "X"
    assert snapshot.status == PLAYING
    assert snapshot.winner is None
    assert (snapshot.scores.x_wins, snapshot.scores.o_wins, snapshot.scores.draws) == (0, 0, 0)
    assert len(game.available_moves()) == 9


def test_column_win_scores_for_x():
    game = TicTacToeGame()
    play(game, [0, 1, 3, 4, 6])
    snapshot = game.snapshot()
    assert list(snapshot.cells) == ["X", "O", " ", "X", "O", " ", "X", " ", " "]
    assert snapshot.status == WON
    assert snapshot.winner == "X"
    assert snapshot.scores.x_wins == 1
    assert snapshot.scores.o_wins == 0
    assert snapshot.scores.draws == 0


def test_full_board_without_line_is_draw():
    game = TicTacToeGame()
    play(game, [0, 1, 2, 4, 3, 5, 7, 6, 8])
    snapshot = game.snapshot()
    assert snapshot.status == DRAW
    assert snapshot.drawn
    assert snapshot.winner is None
    assert snapshot.scores.draws == 1
    assert game.available_moves() == []


def test_occupied_cell_is_ignored():
    game = TicTacToeGame()
    assert game.submit_move(0) is True
    assert game.submit_move(0) is False
    assert game.cells[0] == "X"
    assert game.current_player == "O"


def test_out_of_range_index_is_ignored():
    game = TicTacToeGame()
    before = game.snapshot()
    assert game.submit_move(9) is False
    assert game.submit_move(-1) is False
    assert game.snapshot() == before


def test_moves_after_round_over_are_ignored():
    game = TicTacToeGame()
    play(game, [0, 1, 3, 4, 6])
    before = game.snapshot()
    for index in (2, 5, 7, 8):
        assert game.submit_move(index) is False
    assert game.snapshot() == before


def test_o_can_win_and_score():
    game = TicTacToeGame()
    play(game, [0, 2, 1, 4, 8, 6])
    assert game.winner == "O"
    assert game.scores.o_wins == 1
    assert game.scores.x_wins == 0


def test_evaluate_board_uses_first_line_in_order():
    cells = ["X", "X", "X", "X", "O", "O", "X", "O", "O"]
    assert evaluate_board(cells) == (WON, "X")


def test_new_round_alternates_starter_and_keeps_scores():
    game = TicTacToeGame()
    play(game, [0, 1, 3, 4, 6])
    starters = []
    for _ in range(4):
        game.start_new_round()
        starters.append(game.current_player)
        assert game.cells == [" "] * 9
        assert game.status == PLAYING
    assert starters == ["O", "X", "O", "X"]
    assert game.scores.x_wins == 1


def test_turns_alternate_from_round_starter():
    game = TicTacToeGame()
    game.start_new_round()
    play(game, [4, 0, 8, 2])
    assert game.cells[4] == "O"
    assert game.cells[0] == "X"
    assert game.cells[8] == "O"
    assert game.cells[2] == "X"
    assert game.current_player == "O"


def test_new_match_resets_scores_and_opens_with_x():
    game = TicTacToeGame()
    play(game, [0, 1, 3, 4, 6])
    game.start_new_round()  # O starts
    play(game, [0, 1, 3, 4, 6])
    assert game.scores.o_wins == 1
    game.start_new_match()
    snapshot = game.snapshot()
    assert snapshot.current_player == "X"
    assert snapshot.round_starter == "X"
    assert snapshot.cells == (" ",) * 9
    assert (snapshot.scores.x_wins, snapshot.scores.o_wins, snapshot.scores.draws) == (0, 0, 0)
    game.start_new_round()
    assert game.current_player == "O"


def test_new_match_after_o_started_round_still_opens_with_x():
    game = TicTacToeGame()
    game.start_new_round()
    assert game.round_starter == "O"
    game.start_new_match()
    game.submit_move(4)
    assert game.cells[4] == "X"


def test_snapshot_is_detached_from_engine():
    game = TicTacToeGame()
    snapshot = game.snapshot()
    play(game, [0, 1, 3, 4, 6])
    assert snapshot.cells == (" ",) * 9
    assert snapshot.scores.x_wins == 0


def test_random_play_invariants():
    rng = random.Random(1234)
    game = TicTacToeGame()
    for _ in range(500):
        if rng.random() < 0.1:
            game.start_new_match()
        else:
            game.start_new_round()
        starter = game.current_player
        accepted = 0
        while True:
            before = game.snapshot()
            index = rng.randrange(-1, 10)
            if game.submit_move(index):
                accepted += 1
                expected = starter if accepted % 2 == 1 else ("O" if starter == "X" else "X")
                assert game.cells[index] == expected
            else:
                assert game.snapshot() == before
            after = game.snapshot()

            winners = {
                after.cells[a]
                for a, b, c in WINNING_LINES
                if after.cells[a] != " " and after.cells[a] == after.cells[b] == after.cells[c]
            }
            assert len(winners) <= 1

            full = all(c != " " for c in after.cells)
            assert (after.status == DRAW) == (full and not winners)

            gained = (
                after.scores.x_wins - before.scores.x_wins,
                after.scores.o_wins - before.scores.o_wins,
                after.scores.draws - before.scores.draws,
            )
            if before.status == PLAYING and after.status != PLAYING:
                assert sum(gained) == 1
            else:
                assert gained == (0, 0, 0)

            if after.finished:
                break
