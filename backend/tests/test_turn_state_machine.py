import unittest

from dragon_face.core import (
    Game, GameOver, GameReset, JumpMove, Listener, MoveApplied, Phase, Player,
    PieceKind, RescueApplied, sq,
)
from dragon_face.core.pieces import Ambassador, Emperor, Governor


class _Recorder(Listener):
    def __init__(self):
        self.events = []

    def on_event(self, game, event):
        self.events.append(event)


def _empty_game(*placements):
    g = Game(setup=False)
    for (r, c), piece in placements:
        g.board.add_piece(sq(r, c), piece)
    return g


def _click(g, r, c):
    return g.handle_click(sq(r, c))


class TestSelection(unittest.TestCase):
    def test_select_own_piece_caches_moves(self):
        g = Game()
        self.assertTrue(_click(g, 8, 4))
        self.assertIs(g.phase, Phase.PIECE_SELECTED)
        self.assertEqual(g.selected, sq(8, 4))
        self.assertEqual(len(g.selected_moves), 6)

    def test_cannot_select_opponent_or_empty(self):
        g = Game()
        self.assertFalse(_click(g, 2, 4))
        self.assertFalse(_click(g, 5, 4))
        self.assertFalse(_click(g, 0, 0))
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)
        self.assertIsNone(g.selected)

    def test_click_other_own_piece_reselects(self):
        g = Game()
        _click(g, 8, 4)
        self.assertTrue(_click(g, 8, 5))
        self.assertIs(g.phase, Phase.PIECE_SELECTED)
        self.assertEqual(g.selected, sq(8, 5))

    def test_click_selected_piece_or_dead_square_clears(self):
        g = Game()
        _click(g, 8, 4)
        _click(g, 8, 4)
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)
        self.assertIsNone(g.selected)

        _click(g, 8, 4)
        _click(g, 5, 5)
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)
        self.assertEqual(g.selected_moves, [])
        self.assertIs(g.current_player, Player.ONE)

    def test_choose_destination_requires_selection(self):
        g = Game()
        self.assertFalse(g.choose_destination(sq(7, 4)))
        self.assertIsNone(g.board.piece_at(sq(7, 4)))


class TestMoves(unittest.TestCase):
    def test_opening_double_step_passes_turn(self):
        g = Game()
        _click(g, 8, 4)
        self.assertTrue(_click(g, 6, 4))
        self.assertIsNone(g.board.piece_at(sq(8, 4)))
        moved = g.board.piece_at(sq(6, 4))
        self.assertEqual(moved.kind, PieceKind.GOVERNOR)
        self.assertTrue(moved.has_moved)
        self.assertIs(g.current_player, Player.TWO)
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)
        self.assertIsNone(g.last_flipped)

    def test_capture_flips_and_keeps_piece_count(self):
        g = _empty_game(
            ((5, 4), Ambassador(Player.ONE)),
            ((5, 5), Governor(Player.TWO)),
            ((9, 4), Emperor(Player.ONE)),
            ((1, 4), Emperor(Player.TWO)),
        )
        rec = _Recorder()
        g.listeners.append(rec)
        before = len(g.board)

        _click(g, 5, 4)
        self.assertTrue(_click(g, 5, 6))

        self.assertEqual(len(g.board), before)
        self.assertEqual(g.board.piece_at(sq(5, 5)), Governor(Player.ONE))
        self.assertEqual(g.board.piece_at(sq(5, 6)), Ambassador(Player.ONE))
        self.assertEqual(g.last_flipped, sq(5, 5))
        self.assertEqual(len(g.board.pieces_of(Player.TWO)), 1)
        self.assertEqual(
            rec.events,
            [MoveApplied(
                move=JumpMove(sq(5, 4), sq(5, 6), jumped_sq=sq(5, 5)),
                player=Player.ONE,
                flipped_sq=sq(5, 5),
            )],
        )

    def test_flipped_piece_is_immune_for_one_turn(self):
        g = _empty_game(
            ((6, 4), Governor(Player.ONE).moved()),
            ((5, 5), Ambassador(Player.TWO)),
            ((5, 7), Ambassador(Player.TWO)),
            ((1, 1), Emperor(Player.TWO)),
            ((9, 7), Emperor(Player.ONE)),
        )
        _click(g, 6, 4)
        _click(g, 4, 6)
        self.assertEqual(g.board.piece_at(sq(5, 5)).owner, Player.ONE)

        jumped = [m.jumped_sq for m in g.legal_moves_from(sq(5, 7)) if isinstance(m, JumpMove)]
        self.assertNotIn(sq(5, 5), jumped)

        _click(g, 1, 1)
        _click(g, 2, 2)
        self.assertIsNone(g.last_flipped)
        _click(g, 9, 7)
        _click(g, 8, 7)

        self.assertIn(
            JumpMove(sq(5, 7), sq(5, 4), jumped_sq=sq(5, 5)),
            g.legal_moves_from(sq(5, 7)),
        )

    def test_landing_in_sacrifice_zone_traps(self):
        g = _empty_game(
            ((3, 2), Governor(Player.ONE).moved()),
            ((2, 1), Governor(Player.TWO)),
            ((4, 6), Emperor(Player.TWO)),
            ((9, 4), Emperor(Player.ONE)),
        )
        _click(g, 3, 2)
        _click(g, 1, 0)

        landed = g.board.piece_at(sq(1, 0))
        self.assertTrue(landed.is_trapped)
        # promotion row, but nothing to rescue: the turn just passes
        self.assertIs(g.current_player, Player.TWO)
        self.assertIsNone(g.pending_rescue)

        _click(g, 4, 6)
        _click(g, 5, 6)
        self.assertFalse(g.is_selectable(sq(1, 0)))
        self.assertFalse(_click(g, 1, 0))
        self.assertEqual(g.legal_moves_from(sq(1, 0)), [])

    def test_emperor_is_never_trapped(self):
        g = _empty_game(
            ((2, 2), Emperor(Player.ONE)),
            ((1, 1), Governor(Player.TWO)),
            ((5, 5), Emperor(Player.TWO)),
        )
        _click(g, 2, 2)
        self.assertTrue(_click(g, 0, 0))
        self.assertFalse(g.board.piece_at(sq(0, 0)).is_trapped)
        self.assertEqual(g.board.piece_at(sq(1, 1)).owner, Player.ONE)


class TestPromotion(unittest.TestCase):
    def _rescue_game(self):
        return _empty_game(
            ((3, 3), Governor(Player.ONE).moved()),
            ((2, 4), Ambassador(Player.TWO)),
            ((10, 2), Ambassador(Player.ONE).trapped()),
            ((5, 7), Emperor(Player.ONE)),
            ((5, 1), Emperor(Player.TWO)),
        )

    def test_promotion_with_trapped_ambassador_waits_for_rescue(self):
        g = self._rescue_game()
        _click(g, 3, 3)
        _click(g, 1, 5)
        self.assertIs(g.phase, Phase.AWAITING_RESCUE_CHOICE)
        self.assertIs(g.current_player, Player.ONE)
        self.assertEqual(g.pending_rescue, sq(1, 5))
        self.assertEqual(g.rescue_targets(), [sq(10, 2)])

    def test_rescue_swaps_governor_and_ambassador(self):
        g = self._rescue_game()
        rec = _Recorder()
        g.listeners.append(rec)
        _click(g, 3, 3)
        _click(g, 1, 5)

        self.assertTrue(_click(g, 10, 2))
        gov = g.board.piece_at(sq(10, 2))
        amb = g.board.piece_at(sq(1, 5))
        self.assertEqual(gov.kind, PieceKind.GOVERNOR)
        self.assertTrue(gov.is_trapped)
        self.assertEqual(amb.kind, PieceKind.AMBASSADOR)
        self.assertFalse(amb.is_trapped)
        self.assertEqual(amb.owner, Player.ONE)

        self.assertIs(g.current_player, Player.TWO)
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)
        self.assertIsNone(g.pending_rescue)
        self.assertEqual(g.last_flipped, sq(2, 4))
        self.assertEqual(
            rec.events[-1],
            RescueApplied(player=Player.ONE, governor_sq=sq(1, 5), ambassador_sq=sq(10, 2)),
        )

    def test_invalid_rescue_choice_is_ignored(self):
        g = self._rescue_game()
        _click(g, 3, 3)
        _click(g, 1, 5)
        self.assertFalse(_click(g, 5, 5))
        self.assertFalse(_click(g, 5, 7))
        self.assertIs(g.phase, Phase.AWAITING_RESCUE_CHOICE)
        self.assertIs(g.current_player, Player.ONE)

    def test_no_promotion_without_trapped_ambassador(self):
        g = _empty_game(
            ((2, 4), Governor(Player.ONE).moved()),
            ((10, 2), Ambassador(Player.ONE)),
            ((5, 1), Emperor(Player.TWO)),
        )
        _click(g, 2, 4)
        _click(g, 1, 4)
        self.assertIs(g.current_player, Player.TWO)
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)

    def test_player_two_promotes_on_row_nine(self):
        g = _empty_game(
            ((8, 4), Governor(Player.TWO).moved()),
            ((0, 3), Ambassador(Player.TWO).trapped()),
            ((5, 1), Emperor(Player.ONE)),
        )
        g.current_player = Player.TWO
        _click(g, 8, 4)
        _click(g, 9, 4)
        self.assertIs(g.phase, Phase.AWAITING_RESCUE_CHOICE)
        self.assertEqual(g.rescue_targets(), [sq(0, 3)])


class TestGameOver(unittest.TestCase):
    def _won_game(self):
        g = _empty_game(
            ((6, 4), Governor(Player.ONE).moved()),
            ((5, 5), Emperor(Player.TWO)),
            ((9, 4), Emperor(Player.ONE)),
            ((2, 2), Governor(Player.TWO)),
        )
        rec = _Recorder()
        g.listeners.append(rec)
        _click(g, 6, 4)
        _click(g, 4, 6)
        return g, rec

    def test_emperor_capture_ends_game_without_moving(self):
        g, rec = self._won_game()
        self.assertTrue(g.is_over)
        self.assertIs(g.phase, Phase.GAME_OVER)
        self.assertIs(g.winner, Player.ONE)
        self.assertEqual(g.board.piece_at(sq(5, 5)), Emperor(Player.TWO))
        self.assertEqual(g.board.piece_at(sq(6, 4)).owner, Player.ONE)
        self.assertIsNone(g.board.piece_at(sq(4, 6)))
        self.assertEqual(rec.events[-1], GameOver(winner=Player.ONE))
        self.assertIs(rec.events[0].winner, Player.ONE)

    def test_game_over_rejects_input(self):
        g, _ = self._won_game()
        self.assertFalse(_click(g, 9, 4))
        self.assertFalse(g.select_square(sq(9, 4)))
        self.assertFalse(g.choose_destination(sq(8, 4)))
        self.assertFalse(g.choose_rescue_target(sq(9, 4)))
        self.assertEqual(g.legal_moves_from(sq(2, 2)), [])
        self.assertIs(g.phase, Phase.GAME_OVER)


class TestReset(unittest.TestCase):
    def test_reset_restores_initial_position(self):
        g = Game()
        rec = _Recorder()
        g.listeners.append(rec)
        _click(g, 8, 4)
        _click(g, 6, 4)
        _click(g, 2, 3)
        g.reset()

        self.assertEqual(g.board.items(), Game().board.items())
        self.assertIs(g.current_player, Player.ONE)
        self.assertIs(g.phase, Phase.AWAITING_SELECTION)
        self.assertIsNone(g.last_flipped)
        self.assertIsNone(g.pending_rescue)
        self.assertIsNone(g.selected)
        self.assertIsNone(g.winner)
        self.assertIsInstance(rec.events[-1], GameReset)

    def test_reset_after_game_over(self):
        g = _empty_game(
            ((6, 4), Governor(Player.ONE).moved()),
            ((5, 5), Emperor(Player.TWO)),
        )
        _click(g, 6, 4)
        _click(g, 4, 6)
        self.assertTrue(g.is_over)
        g.reset()
        self.assertFalse(g.is_over)
        self.assertTrue(_click(g, 8, 4))


if __name__ == "__main__":
    unittest.main()
