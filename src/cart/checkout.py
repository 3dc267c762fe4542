"""Order hand-off: turn the cart into a pre-formatted chat message.

The message is opened in the brand's messaging channel, where the order is
actually placed.  Only the text and the compose link are produced here.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import quote

from pydantic import BaseModel
from vitrine.content.models import CatalogItem
from vitrine.shared.errors import CheckoutError

HANDOFF_BASE_URL = "https://wa.me/"


class CustomerDetails(BaseModel):
    """Fields the customer fills in before handing the order off."""

    name: str
    phone: str = ""
    address: str = ""
    notes: str = ""


def _describe(item: CatalogItem) -> str:
    line = item.title
    if item.category:
        line += f" ({item.category})"
    price = (item.model_extra or {}).get("price")
    if price not in (None, ""):
        line += f" - {price}"
    return line


def build_order_message(
    items: Sequence[CatalogItem],
    customer: CustomerDetails,
    brand: str = "H&R GRIFES",
) -> str:
    """Format the cart and customer details as one text blob.

    Raises CheckoutError for an empty cart or a blank customer name.
    """
    if not items:
        raise CheckoutError("The cart is empty")
    if not customer.name.strip():
        raise CheckoutError("Customer name is required")

    lines = [f"Olá, {brand}! Gostaria de fazer um pedido:", ""]
    for number, item in enumerate(items, start=1):
        lines.append(f"{number}. {_describe(item)}")
    lines.extend(["", f"Nome: {customer.name.strip()}"])
    if customer.phone:
        lines.append(f"Telefone: {customer.phone}")
    if customer.address:
        lines.append(f"Endereço: {customer.address}")
    if customer.notes:
        lines.append(f"Observações: {customer.notes}")
    return "\n".join(lines)


def handoff_url(message: str, destination: str) -> str:
    """Return the compose link that opens ``message`` for ``destination``.

    ``destination`` is a phone number in any notation; only digits are kept.
    """
    digits = re.sub(r"\D", "", destination)
    if not digits:
        raise CheckoutError("No destination number configured for checkout")
    return f"{HANDOFF_BASE_URL}{digits}?text={quote(message, safe='')}"
