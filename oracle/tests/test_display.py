import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

import console_play
from oracle.core.constants import BOTTOM_MASK, HEIGHT
from oracle.core.display import render_bitmask, render_board
from oracle.core.errors import InvalidSequenceError, PreconditionError
from oracle.core.position import BoardPosition
from oracle.tests.game_fixtures import DRAW_GAME, position_from

EMPTY_ROW = "|.|.|.|.|.|.|.|"


def scripted(*lines):
    """read_line replacement returning the given lines, then EOF."""
    it = iter(lines)

    def read_line(prompt=""):
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read_line


class TestRender(unittest.TestCase):
    def test_empty_board(self):
        lines = render_board(BoardPosition()).split("\n")
        self.assertEqual(lines[0], " 1 2 3 4 5 6 7")
        self.assertEqual(lines[1:], [EMPTY_ROW] * HEIGHT)

    def test_markers_follow_player_to_move(self):
        position = position_from("12")
        lines = render_board(position).split("\n")
        self.assertEqual(lines[-1], "|X|O|.|.|.|.|.|")
        self.assertEqual(lines[-2], EMPTY_ROW)

    def test_explicit_current_player(self):
        """Stones of current_position get the marker of the given player."""
        position = position_from("12")
        self.assertEqual(render_board(position, 2).split("\n")[-1], "|O|X|.|.|.|.|.|")

    def test_top_row_is_last_row_played(self):
        lines = render_board(position_from("111111")).split("\n")
        self.assertEqual(lines[1], "|O|.|.|.|.|.|.|")
        self.assertEqual(lines[-1], "|X|.|.|.|.|.|.|")

    def test_invalid_player(self):
        with self.assertRaises(PreconditionError):
            render_board(BoardPosition(), 3)

    def test_render_bitmask(self):
        lines = render_bitmask(BOTTOM_MASK).split("\n")
        self.assertEqual(len(lines), HEIGHT + 1)
        self.assertEqual(lines[-1], "X X X X X X X")
        self.assertEqual(lines[0], "- - - - - - -")


class TestConsole(unittest.TestCase):
    def test_vertical_win(self):
        output = []
        winner = console_play.human_vs_human(
            BoardPosition(), scripted("1", "2", "1", "2", "1", "2", "1"), output.append
        )
        self.assertEqual(winner, 1)
        self.assertEqual(output[-1], "Player 1 wins!")

    def test_invalid_input_is_rejected(self):
        output = []
        position = BoardPosition()
        winner = console_play.human_vs_human(
            position, scripted("x", "9", "12", "0", "4"), output.append
        )
        self.assertEqual(winner, 0)
        self.assertEqual(position.nb_moves(), 1)
        self.assertEqual(sum(line.startswith("Invalid") for line in output), 4)

    def test_non_ascii_digit_is_rejected(self):
        output = []
        position = BoardPosition()
        winner = console_play.human_vs_human(position, scripted("²", "٣", "4"), output.append)
        self.assertEqual(winner, 0)
        self.assertEqual(position.nb_moves(), 1)
        self.assertEqual(sum(line.startswith("Invalid input") for line in output), 2)

    def test_full_column_is_rejected(self):
        output = []
        position = position_from("111111")
        console_play.human_vs_human(position, scripted("1"), output.append)
        self.assertEqual(position.nb_moves(), 6)
        self.assertTrue(output[-1].startswith("Invalid move"))

    def test_draw(self):
        output = []
        position = position_from(DRAW_GAME[:41])
        winner = console_play.human_vs_human(position, scripted("6"), output.append)
        self.assertEqual(winner, 0)
        self.assertEqual(output[-1], "Game is a draw.")

    def test_solve_sequence(self):
        self.assertEqual(console_play.solve_sequence("112233"), 18)
        with self.assertRaises(InvalidSequenceError) as ctx:
            console_play.solve_sequence("1111111")
        self.assertEqual(ctx.exception.played, 6)

    def test_main_solves(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(console_play.main(["--solve", "137435"]), 0)
        self.assertEqual(out.getvalue().strip(), "-18")

        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(console_play.main(["--solve", "137435", "--weak"]), 0)
        self.assertEqual(out.getvalue().strip(), "-1")

    def test_main_rejects_bad_sequence(self):
        err = io.StringIO()
        with redirect_stderr(err):
            self.assertEqual(console_play.main(["--solve", "1111111"]), 1)
        self.assertIn("Invalid sequence", err.getvalue())


if __name__ == '__main__':
    unittest.main()
