"""Payment routes: creation, listing and the receipt / signed document / status workflow."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_caller
from backend.app.models.payment import Payment
from backend.app.schemas.payment import (
    PaymentCreate,
    PaymentDetail,
    PaymentRead,
    PaymentWithRelations,
    ReceiptUpload,
    SignedDocumentUpload,
    StatusUpdate,
)
from backend.app.services import payment_workflow
from backend.app.services.payment_workflow import CallerContext
from backend.app.services.time_tracking import calculate_entries_amount, round_hours, total_hours

router = APIRouter(prefix="/payments", tags=["payments"])


def _serialize_payment_detail(payment: Payment, caller: CallerContext) -> dict:
    data = PaymentWithRelations.model_validate(payment).model_dump()
    data["total_hours"] = round_hours(total_hours(payment.time_entries))
    data["calculated_amount"] = calculate_entries_amount(payment.time_entries)
    data["available_actions"] = [action.value for action in payment_workflow.available_actions(payment, caller)]
    return data


@router.post("/", response_model=PaymentWithRelations, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return payment_workflow.create_payment(
        db,
        caller,
        project_id=payload.project_id,
        receiver_id=payload.receiver_id,
        time_entry_ids=payload.time_entry_ids,
        amount=payload.amount,
        requires_signed_document=payload.requires_signed_document,
    )


@router.get("/", response_model=List[PaymentWithRelations])
async def list_payments(
    project_id: int | None = None,
    status: str | None = None,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return payment_workflow.list_payments(db, caller, project_id=project_id, status=status)


@router.get("/{payment_id}", response_model=PaymentDetail)
async def get_payment(payment_id: int, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    payment = payment_workflow.get_payment(db, caller, payment_id)
    return _serialize_payment_detail(payment, caller)


@router.post("/{payment_id}/receipt", response_model=PaymentRead)
async def upload_receipt(
    payment_id: int,
    payload: ReceiptUpload,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return payment_workflow.upload_receipt(db, caller, payment_id, str(payload.receipt_url))


@router.post("/{payment_id}/signed-document", response_model=PaymentRead)
async def upload_signed_document(
    payment_id: int,
    payload: SignedDocumentUpload,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return payment_workflow.upload_signed_document(db, caller, payment_id, payload.signed_document_url)


@router.post("/{payment_id}/status", response_model=PaymentRead)
async def update_payment_status(
    payment_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return payment_workflow.update_status(db, caller, payment_id, payload.status)
