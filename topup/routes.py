from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from topup import auth, config, orders
from topup.database import get_db
from topup.security import global_limit
from topup.sessions import AdminSession, SessionStore

router = APIRouter(prefix="/api")


class TopUpRequest(BaseModel):
    user: Optional[str] = None
    game: Optional[str] = None
    amount: Any = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class MockPayRequest(BaseModel):
    orderId: Optional[str] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user: str
    game: str
    amount: int
    status: str
    created_at: datetime


class OrderList(BaseModel):
    orders: List[OrderOut]


@router.post("/topup")
@global_limit
def create_topup(request: Request, body: TopUpRequest, db: Session = Depends(get_db)):
    order = orders.create_order(db, body.user, body.game, body.amount)

    # No gateway yet: send the customer straight to the success page
    payment_url = request.url_for("success_page").include_query_params(order=order.id)
    return {"orderId": order.id, "paymentUrl": str(payment_url)}


@router.post("/admin/login")
@global_limit
def admin_login(
    request: Request,
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(auth.get_session_store),
):
    session = auth.login(db, store, body.username, body.password)
    response.set_cookie(
        key=config.SESSION_COOKIE,
        value=auth.encode_session_cookie(session),
        max_age=store.ttl_seconds,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )
    return {"ok": True}


@router.get("/admin/orders", response_model=OrderList)
@global_limit
def admin_orders(
    request: Request,
    session: AdminSession = Depends(auth.require_session),
    db: Session = Depends(get_db),
):
    return {"orders": orders.list_orders(db)}


@router.post("/admin/password")
@global_limit
def admin_change_password(
    request: Request,
    body: PasswordChangeRequest,
    session: AdminSession = Depends(auth.current_session),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(auth.get_session_store),
):
    auth.change_password(db, store, session, body.currentPassword, body.newPassword)
    return {"ok": True}


@router.post("/admin/logout")
@global_limit
def admin_logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(auth.get_session_store),
):
    token = auth.decode_session_cookie(request.cookies.get(config.SESSION_COOKIE))
    auth.logout(store, token)
    response.delete_cookie(config.SESSION_COOKIE)
    return {"ok": True}


# Placeholder trust boundary: a real provider callback must be signature-checked
@router.post("/webhook/mock-pay")
@global_limit
def mock_pay(request: Request, body: MockPayRequest, db: Session = Depends(get_db)):
    orders.mark_paid(db, body.orderId)
    return {"ok": True}
