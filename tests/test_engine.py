import pytest

from klondike.engine import (
    apply_move,
    auto_move_to_foundation,
    card_count,
    draw_from_stock,
    draw_or_recycle,
    is_win_state,
    recycle_waste_to_stock,
    try_move,
)
from klondike.models import GameStatus, Location, Move

from .helpers import card, complete_foundations, down, full_suit, rig, ranks, t2t


def test_tableau_move_auto_flips_exposed_card():
    state = rig(tableau={0: [down("9d"), card("8c")], 1: [card("9h")]})

    after = apply_move(state, t2t(0, 1, 1))

    assert after is not state
    assert len(after.tableau[0]) == 1
    assert after.tableau[0].cards[0].face_up
    assert ranks(after.tableau[1]) == [9, 8]
    assert after.move_count == 1
    # The old snapshot is untouched.
    assert not state.tableau[0].cards[0].face_up
    assert len(state.tableau[1]) == 1


def test_invalid_move_returns_the_same_object():
    state = rig(tableau={0: [card("7h")], 1: [card("8d")]})
    after = apply_move(state, t2t(0, 0, 1))
    assert after is state
    assert state.move_count == 0


@pytest.mark.parametrize(
    "move",
    [
        # face-down source card
        t2t(0, 0, 1),
        # non-top tableau card to foundation
        Move(Location.tableau(0, 0), Location.foundation(0)),
        # foundation as a source
        Move(Location.foundation(0), Location.tableau(1)),
        # stock as a destination
        Move(Location.waste(), Location.stock()),
        # missing indices
        Move(Location.tableau(1), Location.tableau(2)),
        Move(Location.waste(), Location.foundation(None)),  # type: ignore[arg-type]
    ],
)
def test_illegal_requests_are_identity_no_ops(move):
    state = rig(
        tableau={0: [down("Ac"), card("2h")], 1: [card("Kh")]},
        foundations={0: [card("As")]},
        waste=[card("5d")],
    )
    result = try_move(state, move)
    assert not result.applied
    assert result.reason
    assert result.state is state


def test_out_of_sequence_foundation_move_is_rejected():
    state = rig(tableau={0: [card("3s")]}, foundations={0: [card("As")]})
    assert apply_move(state, Move(Location.tableau(0, 0), Location.foundation(0))) is state


def test_tableau_top_to_foundation_reveals_card_below():
    state = rig(tableau={2: [down("Qd"), card("As")]})

    after = apply_move(state, Move(Location.tableau(2, 1), Location.foundation(0)))

    assert ranks(after.foundations[0]) == [1]
    assert ranks(after.tableau[2]) == [12]
    assert after.tableau[2].cards[0].face_up
    assert after.move_count == 1


def test_waste_to_foundation_and_tableau():
    state = rig(waste=[card("7s"), card("Ad")], tableau={4: [card("8h")]})

    after = apply_move(state, Move(Location.waste(), Location.foundation(2)))
    assert ranks(after.foundations[2]) == [1]
    assert ranks(after.waste) == [7]

    after = apply_move(after, Move(Location.waste(), Location.tableau(4)))
    assert after.waste.is_empty
    assert ranks(after.tableau[4]) == [8, 7]
    assert after.move_count == 2


def test_count_carries_top_of_run_only():
    state = rig(tableau={
        0: [card("9s"), card("8h"), card("7c")],
        1: [card("9c")],
        2: [card("8d")],
    })

    # Whole run from the 8 does not fit on the red 8, but the 7 alone does.
    after = apply_move(state, t2t(0, 1, 2, count=1))
    assert ranks(after.tableau[0]) == [9, 8]
    assert ranks(after.tableau[2]) == [8, 7]
    assert card_count(after) == card_count(state)

    after = apply_move(state, t2t(0, 1, 1, count=2))
    assert ranks(after.tableau[0]) == [9]
    assert ranks(after.tableau[1]) == [9, 8, 7]


@pytest.mark.parametrize("count", [0, -1, 3])
def test_count_outside_run_is_rejected(count):
    state = rig(tableau={0: [card("9s"), card("8h"), card("7c")], 1: [card("9d")]})
    assert apply_move(state, t2t(0, 1, 1, count=count)) is state


def test_count_cannot_lift_from_inside_broken_run():
    state = rig(tableau={0: [card("8h"), card("8s"), card("7d")], 1: [card("9s")]})
    assert apply_move(state, t2t(0, 0, 1, count=1)) is state


def test_draw_moves_stock_top_to_waste_face_up():
    state = rig(stock=[down("3c")], move_count=4)

    after = draw_from_stock(state)

    assert after.stock.is_empty
    assert len(after.waste) == 1
    assert after.waste.cards[0].face_up
    assert after.waste.cards[0].rank == 3
    assert after.move_count == 4


def test_draw_from_empty_stock_is_no_op():
    state = rig(waste=[card("3c")])
    assert draw_from_stock(state) is state


def test_recycle_reverses_waste_face_down():
    state = rig(waste=[card("4c"), card("5d"), card("6h")])

    after = recycle_waste_to_stock(state)

    assert after.waste.is_empty
    assert ranks(after.stock) == [6, 5, 4]
    assert all(not c.face_up for c in after.stock)
    assert after.move_count == 0


def test_recycle_needs_empty_stock_and_non_empty_waste():
    state = rig(stock=[down("2c")], waste=[card("3c")])
    assert recycle_waste_to_stock(state) is state
    empty = rig()
    assert recycle_waste_to_stock(empty) is empty


def test_draw_then_recycle_restores_stock_order():
    state = rig(stock=[down("4c"), down("5d"), down("6h")])
    drawn = draw_from_stock(draw_from_stock(draw_from_stock(state)))
    assert [c.label for c in drawn.waste] == ["6h", "5d", "4c"]
    recycled = draw_or_recycle(drawn)
    assert [c.label for c in recycled.stock] == ["4c", "5d", "6h"]


def test_win_detection_requires_all_thirteen():
    assert not is_win_state(rig())

    foundations = complete_foundations()
    assert is_win_state(rig(foundations=foundations))

    foundations[0] = foundations[0][:12]
    assert not is_win_state(rig(foundations=foundations))


def test_final_foundation_move_sets_won_status():
    foundations = complete_foundations()
    king = foundations[3].pop()
    state = rig(foundations=foundations, waste=[king])
    assert state.status == GameStatus.IN_PROGRESS

    after = apply_move(state, Move(Location.waste(), Location.foundation(3)))

    assert after.status == GameStatus.WON
    assert is_win_state(after)
    assert after.move_count == 1


def test_auto_move_picks_first_accepting_foundation():
    state = rig(
        tableau={0: [card("2h")]},
        foundations={0: full_suit("clubs", 1), 2: full_suit("hearts", 1)},
    )

    result = auto_move_to_foundation(state, Location.tableau(0, 0))

    assert result.applied
    assert ranks(result.state.foundations[2]) == [1, 2]


def test_auto_move_without_target_is_rejected():
    state = rig(tableau={0: [card("5h")]})
    result = auto_move_to_foundation(state, Location.tableau(0, 0))
    assert not result.applied
    assert result.state is state


def test_rejection_reason_accepts_plain_string_kinds():
    state = rig(waste=[card("5d")])
    result = try_move(state, Move(Location("deck"), Location("waste")))  # type: ignore[arg-type]
    assert not result.applied
    assert result.state is state
    assert result.reason == "Cannot move from deck to waste"
