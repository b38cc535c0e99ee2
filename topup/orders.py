import logging
import re
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from topup import config, crud
from topup.errors import ValidationError
from topup.models import Order, PAID

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
# largest value an SQL BIGINT column holds
MAX_AMOUNT = 2 ** 63 - 1
MAX_AMOUNT_DIGITS = len(str(MAX_AMOUNT))


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(amount: Any) -> int:
    """Coerce a client-supplied amount to a positive integer.

    Accepts ints, integral floats and base-10 integer strings.
    """
    if isinstance(amount, bool):
        raise ValidationError("invalid amount")
    if isinstance(amount, int):
        value = amount
    elif isinstance(amount, float):
        if not amount.is_integer():
            raise ValidationError("invalid amount")
        value = int(amount)
    elif isinstance(amount, str):
        text = amount.strip()
        if len(text.lstrip("+-")) > MAX_AMOUNT_DIGITS or not _INTEGER_RE.fullmatch(text):
            raise ValidationError("invalid amount")
        value = int(text)
    else:
        raise ValidationError("invalid amount")

    if value <= 0 or value > MAX_AMOUNT:
        raise ValidationError("invalid amount")
    return value


def create_order(db: Session, user: Optional[str], game: Optional[str], amount: Any) -> Order:
    if _is_missing(user) or _is_missing(game) or _is_missing(amount):
        raise ValidationError("missing fields")

    order = crud.insert_order(db, user, game, parse_amount(amount))
    logger.info("Created order %s for %s (%s x %d)", order.id, order.user, order.game, order.amount)
    return order


def mark_paid(db: Session, order_id: Optional[str]) -> bool:
    """Move an order to PAID. Unknown ids are accepted and only logged."""
    if _is_missing(order_id):
        raise ValidationError("missing orderId")

    matched = crud.update_order_status(db, order_id, PAID) > 0
    if matched:
        logger.info("Order %s marked as paid", order_id)
    else:
        logger.warning("Mock payment for unknown order %s ignored", order_id)
    return matched


def list_orders(db: Session, limit: int = config.ORDER_LIST_LIMIT) -> List[Order]:
    return crud.list_orders(db, limit)
