"""Payment submission and the administrator approval workflow.

Status transitions are explicit:

    pending  -> approved | rejected
    rejected -> pending            (reopen a wrongly rejected claim)
    approved -> approved           (re-approval re-runs the grant, which is a set-add)

Anything else raises IllegalTransitionError; approved payments are never revoked.

On approval the status change and the course grant are committed together. The
broadcast and the "course approved" email run afterwards and are best-effort:
their failures are logged and never undo the grant.
"""
from __future__ import annotations
import math
from datetime import datetime
from typing import Optional
from fastapi import BackgroundTasks
from sqlalchemy import or_
from sqlalchemy.orm import Session
from auth_service import grant_course
from audit_service import log_action_to_db
from errors import DeliveryError, IllegalTransitionError, NotFoundError, ValidationError
from mailer import Mailer, course_access_email
from models.payment import Payment, PaymentMethod, PaymentStatus
from realtime import COURSE_ACCESS_UPDATED, ConnectionManager
from schemas.payment import PaymentCreate
from endpoints.logs import log_action, log_error

PAYMENT_METHODS = {m.value for m in PaymentMethod}
PAYMENT_STATUSES = {s.value for s in PaymentStatus}

ALLOWED_TRANSITIONS = {
    PaymentStatus.PENDING.value: {PaymentStatus.APPROVED.value, PaymentStatus.REJECTED.value},
    PaymentStatus.REJECTED.value: {PaymentStatus.PENDING.value},
    PaymentStatus.APPROVED.value: {PaymentStatus.APPROVED.value},
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def submit_payment(db: Session, data: PaymentCreate) -> Payment:
    """Record a purchase claim. No access is granted until an administrator approves it."""
    if data.payment_method not in PAYMENT_METHODS:
        raise ValidationError("Invalid payment method")
    if data.amount is None or data.amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    payment = Payment(
        user_id=data.user_id,
        name=data.name,
        email=data.email,
        phone=data.phone,
        course_id=data.course_id,
        course_name=data.course_name,
        payment_method=data.payment_method,
        txn_id=data.txn_id,
        amount=data.amount,
        status=PaymentStatus.PENDING.value,
        date=datetime.utcnow(),
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    # Admin notification hook: the moderation queue is the admin payments listing
    log_action("payment_submitted", payment.email, context={
        "payment_id": payment.id, "course_id": payment.course_id,
        "method": payment.payment_method, "amount": payment.amount,
    })
    return payment


def get_payment(db: Session, payment_id: int) -> Payment:
    payment = db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def list_payments(
    db: Session,
    status: Optional[str] = None,
    search: str = "",
    page: int = 1,
    limit: int = 10,
) -> dict:
    q = db.query(Payment)
    if status:
        q = q.filter(Payment.status == status)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(
            Payment.name.ilike(pattern),
            Payment.email.ilike(pattern),
            Payment.txn_id.ilike(pattern),
        ))
    total = q.count()
    rows = q.order_by(Payment.date.desc(), Payment.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "payments": rows,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "current_page": page,
    }


def course_access_event(payment: Payment) -> dict:
    return {
        "type": COURSE_ACCESS_UPDATED,
        "email": payment.email,
        "courseId": payment.course_id,
        "courseName": payment.course_name,
        "paymentId": payment.id,
        "userName": payment.name,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


class PaymentWorkflow:
    def __init__(self, mailer: Mailer, broadcaster: ConnectionManager):
        self.mailer = mailer
        self.broadcaster = broadcaster

    async def set_status(
        self,
        db: Session,
        payment_id: int,
        new_status: str,
        actor: str = "admin",
        background: BackgroundTasks | None = None,
    ) -> Payment:
        if new_status not in PAYMENT_STATUSES:
            raise ValidationError("Invalid status value. Only approved, rejected or pending accepted")
        payment = get_payment(db, payment_id)
        previous = payment.status
        if not can_transition(previous, new_status):
            raise IllegalTransitionError(previous, new_status)

        approved = new_status == PaymentStatus.APPROVED.value
        try:
            payment.status = new_status
            payment.updated_at = datetime.utcnow()
            if approved:
                grant_course(db, payment.email, payment.course_id, name=payment.name, payment_id=payment.id)
            log_action_to_db(
                db, "PAYMENT_STATUS_CHANGED", actor=actor,
                target_type="payment", target_id=payment.id,
                description=f"Payment {payment.id} status {previous} -> {new_status}",
                details={"from": previous, "to": new_status, "email": payment.email, "course_id": payment.course_id},
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(payment)
        log_action("payment_status_updated", payment.email, context={
            "payment_id": payment.id, "from": previous, "to": new_status,
        })

        if approved:
            log_action("course_granted", payment.email, context={"course_id": payment.course_id, "payment_id": payment.id})
            await self.broadcast_access(payment)
            if background is not None:
                background.add_task(self.send_approval_email, payment.email, payment.name, payment.course_name or payment.course_id)
            else:
                await self.send_approval_email(payment.email, payment.name, payment.course_name or payment.course_id)
        return payment

    async def broadcast_access(self, payment: Payment) -> dict:
        event = course_access_event(payment)
        try:
            delivered = await self.broadcaster.broadcast(COURSE_ACCESS_UPDATED, event)
            log_action("course_access_broadcast", payment.email, context={"payment_id": payment.id, "subscribers": delivered})
        except Exception as e:
            log_error("course_access_broadcast_failed", e, payment.email, context={"payment_id": payment.id})
        return event

    async def send_approval_email(self, email: str, name: str, course_name: str) -> bool:
        try:
            await self.mailer.send(course_access_email(email, name, course_name))
        except DeliveryError as e:
            log_error("course_access_email_failed", e, email, context={"course": course_name, "detail": e.detail})
            return False
        return True
