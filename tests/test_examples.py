"""The bundled example runs end to end."""

import pytest

from examples import checkout_example


@pytest.mark.asyncio
async def test_checkout_example(capsys):
    await checkout_example.main()
    out = capsys.readouterr().out
    assert "Checkout: happy path" in out
    assert "PaymentDeclined" in out
    assert out.count("✓ ORD-") == 2
