import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from topup.database import Base

PENDING = "PENDING"
PAID = "PAID"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_order_id() -> str:
    return str(uuid.uuid4())


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=new_order_id)
    user = Column(String, nullable=False)
    game = Column(String, nullable=False)
    amount = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default=PENDING)      # PENDING | PAID
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)


class AdminAccount(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    must_rotate = Column(Boolean, nullable=False, default=False)  # set on the seed account
