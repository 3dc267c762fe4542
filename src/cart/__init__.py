"""Shopping cart state and the order hand-off message."""

from vitrine.cart.checkout import CustomerDetails, build_order_message, handoff_url
from vitrine.cart.manager import CartManager

__all__ = [
    "CartManager",
    "CustomerDetails",
    "build_order_message",
    "handoff_url",
]
