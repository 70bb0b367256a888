"""Role-aware dashboard summary for payers and freelancers."""

from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.models.payment import Payment
from backend.app.models.project import Project
from backend.app.models.time_entry import TimeEntry
from backend.app.models.user import User, UserRole
from backend.app.services.time_tracking import round_hours, total_hours

RECENT_LIMIT = 5


def get_dashboard_summary(db: Session, user: User) -> dict:
    is_freelancer = user.role == UserRole.FREELANCER.value

    if is_freelancer:
        project_query = db.query(Project).filter(Project.members.any(User.id == user.id))
        payment_query = db.query(Payment).filter(Payment.receiver_id == user.id)
    else:
        project_query = db.query(Project).filter(Project.owner_id == user.id)
        payment_query = db.query(Payment).filter(Payment.sender_id == user.id)

    recent_projects = project_query.order_by(Project.updated_at.desc(), Project.id.desc()).limit(RECENT_LIMIT).all()

    # Time entries are only tracked by freelancers
    entries = []
    if is_freelancer:
        entries = (
            db.query(TimeEntry)
            .filter(TimeEntry.user_id == user.id)
            .order_by(TimeEntry.start_time.desc(), TimeEntry.id.desc())
            .all()
        )

    payments = payment_query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()
    total_amount = sum((Decimal(str(p.amount)) for p in payments if p.amount is not None), Decimal("0.00"))

    return {
        "total_projects": project_query.count(),
        "recent_projects": recent_projects,
        "recent_time_entries": entries[:RECENT_LIMIT],
        "total_hours": round_hours(total_hours(entries)),
        "total_payments": len(payments),
        "total_payment_amount": total_amount,
        "recent_payments": payments[:RECENT_LIMIT],
    }
