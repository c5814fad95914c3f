import pytest

from vitrina.cli import Shell, main


@pytest.fixture
def shell(shop, store):
    return Shell(shop, store)


async def run(shell, *lines):
    for line in lines:
        assert await shell.handle(line)


async def test_add_then_zero_quantity_empties_the_cart(shell, store, capsys):
    await run(shell, "add P1 Azul M 2")
    assert store.lines[0].quantity == 2
    assert "Added 2x" in capsys.readouterr().out

    await run(shell, "qty 1 0")

    assert store.state.is_empty
    assert "Cart is empty." in capsys.readouterr().out


async def test_add_rejects_sold_out_and_unknown_combinations(shell, store, capsys):
    await run(shell, "add P1 Azul L", "add P1 Rojo M", "add P1")

    out = capsys.readouterr().out
    assert "Out of stock" in out
    assert "Pick a color and size" in out
    assert store.state.is_empty


async def test_full_checkout_walk_hands_off_to_the_provider(shell, store, capsys):
    await run(
        shell,
        "add P1 Azul M 2",
        "checkout",
        'ship address="Calle 10 # 5-20" city=Bogotá region=Cundinamarca postal_code=110111',
        "next",
        "pay stripe",
        "next",
    )
    out = capsys.readouterr().out
    assert "Step 2/3: Payment" in out
    assert "Step 3/3: Confirm" in out

    await run(shell, "submit")

    out = capsys.readouterr().out
    assert "Redirecting to stripe: https://pay.example.test/stripe/" in out
    assert store.state.is_empty
    assert shell.checkout.session is None


async def test_shortfall_is_reported_and_fix_clamps_the_line(shell, shop, store, capsys):
    await run(
        shell,
        "add P1 Azul M 2",
        "checkout",
        'ship address="Calle 10 # 5-20" city=Bogotá region=Cundinamarca postal_code=110111',
        "stock P1-AZ-M 1",
        "next",
    )
    assert "requested 2, only 1 available" in capsys.readouterr().out

    await run(shell, "fix")

    assert store.lines[0].quantity == 1


async def test_unknown_command_and_quit(shell, capsys):
    assert await shell.handle("dance")
    assert "Unknown command" in capsys.readouterr().out
    assert not await shell.handle("quit")


def test_main_rejects_unknown_log_level():
    with pytest.raises(SystemExit):
        main(["--log-level", "LOUD"])
