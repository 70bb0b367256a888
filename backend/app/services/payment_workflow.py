"""Payment workflow engine.

Owns the lifecycle of a payment from creation through completion or
cancellation:

    PENDING -> RECEIPT_UPLOADED -> DOCUMENT_SIGNED -> COMPLETED
                                  (CANCELLED via the manual status update)

Every operation receives an explicit ``CallerContext`` rather than reading
request state, checks the caller's role and party slot against ``TRANSITIONS``
and only then touches the database. Status writes are conditional on the
status that was read, so two racing requests cannot both advance a payment.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from pydantic import HttpUrl, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.models.payment import Payment, PaymentStatus
from backend.app.models.project import Project
from backend.app.models.time_entry import TimeEntry
from backend.app.models.user import User, UserRole

logger = get_logger(__name__)


class PaymentWorkflowError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str, errors: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}


class UnauthorizedError(PaymentWorkflowError):
    status_code = 401
    code = "unauthorized"


class ForbiddenError(PaymentWorkflowError):
    status_code = 403
    code = "forbidden"


class NotFoundError(PaymentWorkflowError):
    status_code = 404
    code = "not_found"


class NotAProjectMemberError(PaymentWorkflowError):
    status_code = 400
    code = "not_a_member"


class InvalidTimeEntriesError(PaymentWorkflowError):
    status_code = 400
    code = "invalid_entries"


class InvalidPaymentStateError(PaymentWorkflowError):
    status_code = 409
    code = "invalid_state"


class PaymentValidationError(PaymentWorkflowError):
    status_code = 400
    code = "validation"


@dataclass(frozen=True)
class CallerContext:
    user_id: int
    role: Optional[UserRole]

    @classmethod
    def from_user(cls, user: User) -> "CallerContext":
        return cls(user_id=user.id, role=UserRole(user.role) if user.role else None)


class PaymentAction(str, enum.Enum):
    UPLOAD_RECEIPT = "upload_receipt"
    UPLOAD_SIGNED_DOCUMENT = "upload_signed_document"
    UPDATE_STATUS = "update_status"


class Party(str, enum.Enum):
    SENDER = "sender"
    RECEIVER = "receiver"


ALL_STATUSES = frozenset(PaymentStatus)
MANUAL_STATUS_TARGETS = frozenset({PaymentStatus.PENDING, PaymentStatus.COMPLETED, PaymentStatus.CANCELLED})

# Matches the payments.amount column: Numeric(10, 2).
AMOUNT_QUANTUM = Decimal("0.01")
AMOUNT_LIMIT = Decimal("100000000")

_http_url = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class Transition:
    role: UserRole
    party: Party
    permitted_from: frozenset
    offered_from: frozenset
    targets: frozenset
    forbidden_message: str
    invalid_state_message: str = ""


TRANSITIONS = {
    PaymentAction.UPLOAD_RECEIPT: Transition(
        role=UserRole.PAYER,
        party=Party.SENDER,
        permitted_from=frozenset({PaymentStatus.PENDING}),
        offered_from=frozenset({PaymentStatus.PENDING}),
        targets=frozenset({PaymentStatus.RECEIPT_UPLOADED}),
        forbidden_message="Only payers can upload receipts",
        invalid_state_message="Only pending payments can be updated",
    ),
    PaymentAction.UPLOAD_SIGNED_DOCUMENT: Transition(
        role=UserRole.FREELANCER,
        party=Party.RECEIVER,
        permitted_from=frozenset({PaymentStatus.RECEIPT_UPLOADED}),
        offered_from=frozenset({PaymentStatus.RECEIPT_UPLOADED}),
        targets=frozenset({PaymentStatus.DOCUMENT_SIGNED}),
        forbidden_message="Only freelancers can upload signed documents",
        invalid_state_message="Only payments with uploaded receipts can be updated with signed documents",
    ),
    # Sender override: accepted from every status, offered only where the
    # payment page shows the status menu.
    PaymentAction.UPDATE_STATUS: Transition(
        role=UserRole.PAYER,
        party=Party.SENDER,
        permitted_from=ALL_STATUSES,
        offered_from=frozenset({PaymentStatus.PENDING, PaymentStatus.DOCUMENT_SIGNED}),
        targets=MANUAL_STATUS_TARGETS,
        forbidden_message="Only payers can update payment status",
    ),
}


def _require_caller(caller: Optional[CallerContext]) -> CallerContext:
    if caller is None:
        raise UnauthorizedError("Unauthorized")
    return caller


def _party_id(payment: Payment, party: Party) -> int:
    return payment.sender_id if party is Party.SENDER else payment.receiver_id


def _get_visible_payment(db: Session, caller: CallerContext, payment_id: int) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    # Missing payments and payments the caller is not party to look the same.
    if payment is None or caller.user_id not in (payment.sender_id, payment.receiver_id):
        raise NotFoundError("Payment not found")
    return payment


def _parse_status(value, field: str = "status") -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise PaymentValidationError("Invalid request data", {field: f"Status must be one of {allowed}"})


def get_payment(db: Session, caller: Optional[CallerContext], payment_id: int) -> Payment:
    caller = _require_caller(caller)
    return _get_visible_payment(db, caller, payment_id)


def list_payments(
    db: Session,
    caller: Optional[CallerContext],
    project_id: Optional[int] = None,
    status: Optional[str] = None,
) -> list[Payment]:
    """Payments where the caller occupies the role-appropriate party slot, newest first."""
    caller = _require_caller(caller)
    if caller.role == UserRole.FREELANCER:
        query = db.query(Payment).filter(Payment.receiver_id == caller.user_id)
    elif caller.role == UserRole.PAYER:
        query = db.query(Payment).filter(Payment.sender_id == caller.user_id)
    else:
        return []
    if project_id is not None:
        query = query.filter(Payment.project_id == project_id)
    if status:
        query = query.filter(Payment.status == _parse_status(status).value)
    return query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()


def create_payment(
    db: Session,
    caller: Optional[CallerContext],
    *,
    project_id: int,
    receiver_id: int,
    time_entry_ids: Sequence[int],
    amount,
    requires_signed_document: bool = False,
) -> Payment:
    caller = _require_caller(caller)
    if caller.role != UserRole.PAYER:
        raise ForbiddenError("Only payers can create payments")

    errors = {}
    if not time_entry_ids:
        errors["time_entry_ids"] = "At least one time entry is required"
    try:
        payment_amount = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        payment_amount = None
    if payment_amount is None or not payment_amount.is_finite() or payment_amount <= 0:
        errors["amount"] = "Amount must be greater than 0"
    elif payment_amount >= AMOUNT_LIMIT:
        errors["amount"] = "Amount must have at most 8 digits before the decimal point"
    elif payment_amount != payment_amount.quantize(AMOUNT_QUANTUM):
        errors["amount"] = "Amount must have at most 2 decimal places"
    if errors:
        raise PaymentValidationError("Invalid request data", errors)

    project = db.query(Project).filter(Project.id == project_id, Project.owner_id == caller.user_id).first()
    if not project:
        raise NotFoundError("Project not found or you are not the owner")

    if not any(member.id == receiver_id for member in project.members):
        raise NotAProjectMemberError("Freelancer is not a member of this project")

    requested_ids = list(time_entry_ids)
    matched = (
        db.query(TimeEntry)
        .filter(
            TimeEntry.id.in_(requested_ids),
            TimeEntry.project_id == project_id,
            TimeEntry.user_id == receiver_id,
            TimeEntry.payment_id.is_(None),
        )
        .count()
    )
    if matched != len(requested_ids):
        raise InvalidTimeEntriesError("Some time entries are invalid or already paid")

    payment = Payment(
        project_id=project.id,
        sender_id=caller.user_id,
        receiver_id=receiver_id,
        amount=payment_amount,
        status=PaymentStatus.PENDING.value,
        requires_signed_document=requires_signed_document,
    )
    db.add(payment)
    db.flush()  # obtain payment id for the time entry links

    attached = (
        db.query(TimeEntry)
        .filter(TimeEntry.id.in_(requested_ids), TimeEntry.payment_id.is_(None))
        .update({TimeEntry.payment_id: payment.id}, synchronize_session=False)
    )
    if attached != len(requested_ids):
        db.rollback()
        raise InvalidTimeEntriesError("Some time entries are invalid or already paid")

    db.commit()
    db.refresh(payment)
    logger.info(
        "payment_created",
        payment_id=payment.id,
        project_id=project.id,
        sender_id=caller.user_id,
        receiver_id=receiver_id,
        amount=str(payment_amount),
        time_entry_count=len(requested_ids),
    )
    return payment


def _authorize(
    db: Session, caller: Optional[CallerContext], payment_id: int, action: PaymentAction
) -> tuple[Payment, Transition, PaymentStatus]:
    caller = _require_caller(caller)
    transition = TRANSITIONS[action]
    payment = _get_visible_payment(db, caller, payment_id)
    # Status precedes role: a payer asking to sign a PENDING payment gets invalid_state.
    current = PaymentStatus(payment.status)
    if current not in transition.permitted_from:
        raise InvalidPaymentStateError(transition.invalid_state_message)
    if caller.role != transition.role:
        raise ForbiddenError(transition.forbidden_message)
    if _party_id(payment, transition.party) != caller.user_id:
        raise ForbiddenError(f"Only the payment {transition.party.value} can perform this action")
    return payment, transition, current


def _apply(db: Session, payment: Payment, action: PaymentAction, expected: PaymentStatus, values: dict) -> Payment:
    updated = (
        db.query(Payment)
        .filter(Payment.id == payment.id, Payment.status == expected.value)
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        raise InvalidPaymentStateError("Payment status changed by another request")
    db.commit()
    db.refresh(payment)
    logger.info(
        "payment_transition",
        payment_id=payment.id,
        action=action.value,
        from_status=expected.value,
        to_status=payment.status,
    )
    return payment


def upload_receipt(db: Session, caller: Optional[CallerContext], payment_id: int, receipt_url: str) -> Payment:
    payment, transition, current = _authorize(db, caller, payment_id, PaymentAction.UPLOAD_RECEIPT)
    try:
        url = _http_url.validate_python(str(receipt_url or "").strip())
    except ValidationError:
        raise PaymentValidationError("Invalid request data", {"receipt_url": "Invalid URL"})
    (target,) = transition.targets
    values = {Payment.receipt_url: str(url), Payment.status: target.value}
    return _apply(db, payment, PaymentAction.UPLOAD_RECEIPT, current, values)


def upload_signed_document(
    db: Session, caller: Optional[CallerContext], payment_id: int, signed_document_url: str
) -> Payment:
    payment, transition, current = _authorize(db, caller, payment_id, PaymentAction.UPLOAD_SIGNED_DOCUMENT)
    if not signed_document_url or not str(signed_document_url).strip():
        raise PaymentValidationError("Invalid request data", {"signed_document_url": "Document URL is required"})
    (target,) = transition.targets
    values = {Payment.signed_document_url: str(signed_document_url), Payment.status: target.value}
    return _apply(db, payment, PaymentAction.UPLOAD_SIGNED_DOCUMENT, current, values)


def update_status(db: Session, caller: Optional[CallerContext], payment_id: int, new_status) -> Payment:
    """Set a sender-chosen status.

    Unlike the upload transitions this is not gated on the current status:
    a sender may complete a payment that never had a receipt, or move a signed
    payment back to PENDING. ``requires_signed_document`` is not consulted.
    """
    payment, transition, current = _authorize(db, caller, payment_id, PaymentAction.UPDATE_STATUS)
    target = _parse_status(new_status)
    if target not in transition.targets:
        allowed = ", ".join(sorted(s.value for s in transition.targets))
        raise PaymentValidationError("Invalid request data", {"status": f"Status must be one of {allowed}"})
    return _apply(db, payment, PaymentAction.UPDATE_STATUS, current, {Payment.status: target.value})


def available_actions(payment: Payment, caller: CallerContext) -> list[PaymentAction]:
    """Actions the caller is offered for the payment in its current status."""
    current = PaymentStatus(payment.status)
    return [
        action
        for action, transition in TRANSITIONS.items()
        if caller.role == transition.role
        and _party_id(payment, transition.party) == caller.user_id
        and current in transition.offered_from
    ]
