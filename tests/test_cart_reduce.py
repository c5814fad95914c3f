from support import make_line, unwrap_err, unwrap_ok

from vitrina.cart import (
    EMPTY_CART,
    AddLine,
    ClearCart,
    CloseCart,
    InvalidLine,
    OpenCart,
    ReconcileStock,
    RemoveLine,
    StockExceeded,
    ToggleCart,
    UpdateQuantity,
    reduce,
)


def test_repeated_adds_merge_into_one_line_with_summed_quantity():
    state = EMPTY_CART
    for qty in (1, 2, 1):
        state = unwrap_ok(reduce(state, AddLine(make_line(quantity=qty, stock=5))))

    assert len(state.lines) == 1
    assert state.lines[0].quantity == 4


def test_over_limit_add_is_rejected_and_quantity_stays_at_previous_value():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line(quantity=3, stock=5))))
    state = unwrap_ok(reduce(state, AddLine(make_line(quantity=2, stock=5))))

    result = reduce(state, AddLine(make_line(quantity=1, stock=5)))

    rejection = unwrap_err(result)
    assert isinstance(rejection, StockExceeded)
    assert rejection.requested == 6
    assert rejection.available == 5
    assert state.lines[0].quantity == 5


def test_merge_checks_against_the_stored_bound_not_the_incoming_one():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line(quantity=4, stock=5))))

    # Incoming line claims a larger stock; the bound recorded on the cart wins
    result = reduce(state, AddLine(make_line(quantity=2, stock=10)))

    assert isinstance(unwrap_err(result), StockExceeded)


def test_add_over_variant_stock_is_rejected():
    rejection = unwrap_err(reduce(EMPTY_CART, AddLine(make_line(quantity=6, stock=5))))
    assert isinstance(rejection, StockExceeded)


def test_add_rejects_non_positive_quantity_and_missing_product():
    assert isinstance(unwrap_err(reduce(EMPTY_CART, AddLine(make_line(quantity=0)))), InvalidLine)
    assert isinstance(unwrap_err(reduce(EMPTY_CART, AddLine(make_line(quantity=-2)))), InvalidLine)
    assert isinstance(unwrap_err(reduce(EMPTY_CART, AddLine(make_line(product_id="")))), InvalidLine)


def test_line_without_variant_has_no_stock_bound():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line("P3", None, quantity=50))))
    state = unwrap_ok(reduce(state, AddLine(make_line("P3", None, quantity=50))))

    assert state.lines[0].quantity == 100
    assert state.lines[0].line_id == "P3"


def test_different_variants_of_same_product_are_separate_lines():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line(variant_id="P1-AZ-M"))))
    state = unwrap_ok(reduce(state, AddLine(make_line(variant_id="P1-AZ-S", size="S"))))

    assert [line.line_id for line in state.lines] == ["P1:P1-AZ-M", "P1:P1-AZ-S"]


def test_update_to_zero_is_equivalent_to_remove():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line(quantity=2))))
    state = unwrap_ok(reduce(state, AddLine(make_line("P2", "P2-AZ-32", quantity=1))))
    line_id = state.lines[0].line_id

    updated = unwrap_ok(reduce(state, UpdateQuantity(line_id, 0)))
    removed = unwrap_ok(reduce(state, RemoveLine(line_id)))

    assert updated == removed
    assert updated.find(line_id) is None


def test_update_over_bound_is_rejected_and_state_unchanged():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line(quantity=2, stock=3))))
    line_id = state.lines[0].line_id

    rejection = unwrap_err(reduce(state, UpdateQuantity(line_id, 4)))

    assert rejection == StockExceeded(line_id, 4, 3)
    assert state.lines[0].quantity == 2


def test_update_and_remove_of_unknown_line_are_noops():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line())))

    assert unwrap_ok(reduce(state, UpdateQuantity("nope", 3))) == state
    assert unwrap_ok(reduce(state, RemoveLine("nope"))) == state


def test_visibility_commands_leave_lines_alone():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line())))

    toggled = unwrap_ok(reduce(state, ToggleCart()))
    assert toggled.is_open and toggled.lines == state.lines
    assert not unwrap_ok(reduce(toggled, ToggleCart())).is_open
    assert unwrap_ok(reduce(state, OpenCart())).is_open
    assert not unwrap_ok(reduce(toggled, CloseCart())).is_open


def test_clear_empties_lines_only():
    state = unwrap_ok(reduce(EMPTY_CART, OpenCart()))
    state = unwrap_ok(reduce(state, AddLine(make_line())))

    cleared = unwrap_ok(reduce(state, ClearCart()))

    assert cleared.is_empty
    assert cleared.is_open


def test_reconcile_clamps_short_lines_and_drops_sold_out_ones():
    state = unwrap_ok(reduce(EMPTY_CART, AddLine(make_line(quantity=4, stock=5))))
    state = unwrap_ok(reduce(state, AddLine(make_line("P2", "P2-AZ-32", quantity=2, stock=6))))
    state = unwrap_ok(reduce(state, AddLine(make_line("P3", None, quantity=1))))

    reconciled = unwrap_ok(reduce(state, ReconcileStock({"P1:P1-AZ-M": 1, "P2:P2-AZ-32": 0})))

    assert [line.line_id for line in reconciled.lines] == ["P1:P1-AZ-M", "P3"]
    assert reconciled.lines[0].quantity == 1
    assert reconciled.lines[0].stock_bound == 1
