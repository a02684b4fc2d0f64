from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from admin_security import require_admin
from schemas.payment import PaymentCreate, PaymentOut, PaymentPage, PaymentStatusLiteral, PaymentStatusUpdate, PaymentStatusResult
from services.payments import PaymentWorkflow, submit_payment, get_payment, list_payments
from mailer import Mailer, get_mailer
from realtime import ConnectionManager, get_broadcaster
from endpoints.logs import log_request

router = APIRouter()
admin_router = APIRouter(prefix="/admin/payments", dependencies=[Depends(require_admin)])

def get_payment_workflow(
    mailer: Mailer = Depends(get_mailer),
    broadcaster: ConnectionManager = Depends(get_broadcaster),
) -> PaymentWorkflow:
    return PaymentWorkflow(mailer, broadcaster)

@router.post("/payments", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def create_payment(request: Request, payment: PaymentCreate, db: Session = Depends(get_db)):
    await log_request(request, "payment_submit", payment.email, {"course_id": payment.course_id})
    return submit_payment(db, payment)

@admin_router.get("", response_model=PaymentPage)
def admin_list_payments(
    status: Optional[PaymentStatusLiteral] = Query(None),
    search: str = Query(""),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return list_payments(db, status=status, search=search, page=page, limit=limit)

@admin_router.get("/{payment_id}", response_model=PaymentOut)
def admin_get_payment(payment_id: int, db: Session = Depends(get_db)):
    return get_payment(db, payment_id)

@admin_router.put("/{payment_id}", response_model=PaymentStatusResult)
async def admin_update_payment(
    payment_id: int,
    update: PaymentStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
    workflow: PaymentWorkflow = Depends(get_payment_workflow),
):
    payment = await workflow.set_status(db, payment_id, update.status, actor=actor, background=background_tasks)
    return {"success": True, "message": "Payment status updated successfully", "payment": payment}
