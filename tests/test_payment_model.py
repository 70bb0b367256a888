from datetime import datetime, timezone
from decimal import Decimal

import pytest

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.models.payment import Payment, PaymentStatus
from backend.app.models.project import Project
from backend.app.models.time_entry import TimeEntry
from backend.app.models.user import User, UserRole


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def test_payment_defaults_and_relations():
    db = SessionLocal()
    try:
        payer = User(email="payer@example.com", role=UserRole.PAYER.value)
        freelancer = User(email="free@example.com", role=UserRole.FREELANCER.value)
        project = Project(name="Website", hourly_rate=Decimal("75.25"), owner=payer, members=[freelancer])
        db.add_all([payer, freelancer, project])
        db.commit()

        payment = Payment(project=project, sender=payer, receiver=freelancer, amount=Decimal("150.50"))
        entry = TimeEntry(
            user=freelancer,
            project=project,
            start_time=datetime(2030, 1, 1, 9, tzinfo=timezone.utc),
            end_time=datetime(2030, 1, 1, 11, tzinfo=timezone.utc),
            payment=payment,
        )
        db.add_all([payment, entry])
        db.commit()
        db.refresh(payment)

        assert payment.status == PaymentStatus.PENDING.value
        assert payment.requires_signed_document is False
        assert payment.receipt_url is None
        assert payment.amount == Decimal("150.50")
        assert payment.created_at is not None
        assert payment.updated_at is not None
        assert [e.id for e in payment.time_entries] == [entry.id]
        assert payer.sent_payments == [payment]
        assert freelancer.received_payments == [payment]
        assert project.payments == [payment]
        assert project.members == [freelancer]
    finally:
        db.close()
