"""Thin accessors over the ``orders`` and ``admins`` tables.

Every accessor turns a driver failure into :class:`StorageError` so the HTTP
layer can answer 500 without leaking details.
"""
import logging
from functools import wraps
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from topup import config
from topup.database import Base, engine, SessionLocal
from topup.errors import StorageError
from topup.models import AdminAccount, Order, PENDING
from topup.security import hash_password

logger = logging.getLogger(__name__)


def _storage(func_):
    @wraps(func_)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func_(db, *args, **kwargs)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Storage failure in %s", func_.__name__)
            raise StorageError() from exc
    return wrapper


@_storage
def insert_order(db: Session, user: str, game: str, amount: int) -> Order:
    order = Order(user=user, game=game, amount=amount, status=PENDING)
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


@_storage
def update_order_status(db: Session, order_id: str, status: str) -> int:
    result = db.execute(
        update(Order).where(Order.id == order_id).values(status=status)
    )
    db.commit()
    return result.rowcount


@_storage
def list_orders(db: Session, limit: int = config.ORDER_LIST_LIMIT) -> List[Order]:
    stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
    return list(db.scalars(stmt))


@_storage
def get_admin_by_username(db: Session, username: str) -> Optional[AdminAccount]:
    return db.scalars(
        select(AdminAccount).where(AdminAccount.username == username)
    ).first()


@_storage
def count_admins(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(AdminAccount))


@_storage
def insert_admin(db: Session, username: str, password_hash: str,
                 must_rotate: bool = False) -> AdminAccount:
    admin = AdminAccount(
        username=username,
        password_hash=password_hash,
        must_rotate=must_rotate,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@_storage
def update_admin_password(db: Session, admin_id: int, password_hash: str) -> None:
    db.execute(
        update(AdminAccount)
        .where(AdminAccount.id == admin_id)
        .values(password_hash=password_hash, must_rotate=False)
    )
    db.commit()


def init_db() -> None:
    """Create missing tables and seed the bootstrap admin on an empty table."""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if count_admins(db) == 0:
            insert_admin(
                db,
                config.DEFAULT_ADMIN_USERNAME,
                hash_password(config.DEFAULT_ADMIN_PASSWORD),
                must_rotate=True,
            )
            logger.warning(
                "Created default admin account '%s' with the documented default "
                "password; change it before going to production",
                config.DEFAULT_ADMIN_USERNAME,
            )
    finally:
        db.close()

