"""
Checkout — cart to confirmed order, with rollback on every failure path.

Level 4: shopsaga.checkout
Level 3: shopsaga.saga
Level 2: kungfu.Result
"""

import asyncio

from shopsaga import OrderDetails, cart as C
from shopsaga._logging import add_context, clear_context
from shopsaga.checkout import CheckoutOrchestrator
from shopsaga.payments import PaymentDecision
from shopsaga.policy import CheckoutPolicy
from examples._infra import ADDRESS, banner, run, shop


class StalledGateway:
    def accepts(self, method: str) -> bool:
        return True

    async def process_payment(self, order, method) -> PaymentDecision:
        await asyncio.sleep(1)
        return PaymentDecision(True, "Payment processed", "TXN-LATE")


def fill(orchestrator: CheckoutOrchestrator, user_id: str, *lines: tuple[str, int]) -> None:
    cart = orchestrator.carts.get_or_create_cart(user_id)
    for product_id, quantity in lines:
        product = orchestrator.inventory.catalog.get_product(product_id)
        C.add_item(cart, product_id, quantity, product.price, product.title)


def report(orchestrator: CheckoutOrchestrator, result) -> None:
    if result.success:
        order = result.order
        print(f"  ✓ {order.order_id}: {order.status} total={order.total}")
        print(f"    subtotal={order.subtotal} discount={order.discount} tax={order.tax} shipping={order.shipping}")
    else:
        print(f"  ✗ {type(result.error).__name__}: {result.message}")
    levels = {pid: orchestrator.inventory.stock_level(pid) for pid in ("dune", "cosmos", "atlas")}
    print(f"    stock: {levels}")


async def main() -> None:
    banner("Checkout: happy path")
    orchestrator = shop()
    fill(orchestrator, "alice", ("dune", 2), ("cosmos", 1))
    add_context(request_id="req-1")
    report(orchestrator, await orchestrator.checkout("alice", OrderDetails(ADDRESS, "credit_card", "SAVE10")))
    clear_context()

    banner("Checkout: unsupported payment method, stock untouched")
    fill(orchestrator, "bob", ("dune", 3))
    report(orchestrator, await orchestrator.checkout("bob", OrderDetails(ADDRESS, "bank_transfer")))

    banner("Checkout: payment timeout")
    slow = shop(payments=StalledGateway(), policy=CheckoutPolicy().with_payment_timeout(seconds=0.1))
    fill(slow, "carol", ("cosmos", 2))
    report(slow, await slow.checkout("carol", OrderDetails(ADDRESS, "paypal")))

    banner("Checkout: two shoppers, one atlas")
    fill(orchestrator, "dave", ("atlas", 1))
    fill(orchestrator, "erin", ("atlas", 1))
    first, second = await asyncio.gather(
        orchestrator.checkout("dave", OrderDetails(ADDRESS, "paypal")),
        orchestrator.checkout("erin", OrderDetails(ADDRESS, "paypal")),
    )
    report(orchestrator, first)
    report(orchestrator, second)


if __name__ == "__main__":
    run(main)
