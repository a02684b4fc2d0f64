import asyncio

import pytest

from errors import IllegalTransitionError, NotFoundError, ValidationError
from models.audit_log import AuditLog
from models.payment import Payment
from models.user import User, UserCourse
from schemas.payment import PaymentCreate
from services.payments import PaymentWorkflow, can_transition, submit_payment


def payment_payload(**overrides):
    payload = {
        "name": "Alice",
        "email": "a@x.com",
        "phone": "01700000000",
        "courseId": "practical-ibarat",
        "courseName": "Practical Ibarat",
        "paymentMethod": "bkash",
        "txnId": "TXN123",
        "amount": 500,
    }
    payload.update(overrides)
    return payload


def test_submit_payment_is_pending(client, db_session):
    r = client.post("/api/payments", json=payment_payload())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert body["paymentMethod"] == "bkash"
    assert body["courseId"] == "practical-ibarat"
    # Submission alone grants nothing
    assert db_session.query(UserCourse).count() == 0


@pytest.mark.parametrize("overrides", [
    {"paymentMethod": "paypal"},
    {"paymentMethod": ""},
    {"txnId": ""},
    {"amount": 0},
    {"email": "nope"},
])
def test_submit_payment_validation(client, db_session, overrides):
    r = client.post("/api/payments", json=payment_payload(**overrides))
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert db_session.query(Payment).count() == 0


def test_submit_payment_missing_field(client, db_session):
    payload = payment_payload()
    payload.pop("phone")
    assert client.post("/api/payments", json=payload).status_code == 400
    assert db_session.query(Payment).count() == 0


def test_approval_grants_course_end_to_end(client, admin_headers, mailer):
    client.post("/api/register", json={"email": "a@x.com", "name": "Alice", "password": "secret1"})
    payment_id = client.post("/api/payments", json=payment_payload()).json()["id"]

    r = client.put(f"/api/admin/payments/{payment_id}", json={"status": "approved"}, headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json()["success"] is True
    assert r.json()["payment"]["status"] == "approved"

    courses = client.get("/api/users/a@x.com/courses").json()["courses"]
    assert courses == ["practical-ibarat"]
    # Approval email went out after the response
    assert mailer.sent[-1].to == "a@x.com"
    assert "Practical Ibarat" in mailer.sent[-1].text


def test_approval_creates_identity_for_unregistered_payer(client, admin_headers, db_session):
    payment_id = client.post("/api/payments", json=payment_payload(email="new@x.com")).json()["id"]
    client.put(f"/api/admin/payments/{payment_id}", json={"status": "approved"}, headers=admin_headers)
    user = db_session.query(User).filter_by(email="new@x.com").first()
    assert user is not None
    assert user.password is None
    assert user.courses == ["practical-ibarat"]


def test_admin_routes_require_key(client):
    payment_id = client.post("/api/payments", json=payment_payload()).json()["id"]
    assert client.put(f"/api/admin/payments/{payment_id}", json={"status": "approved"}).status_code == 401
    assert client.get("/api/admin/payments", headers={"X-Admin-Key": "wrong"}).status_code == 401


def test_set_status_errors(client, admin_headers):
    payment_id = client.post("/api/payments", json=payment_payload()).json()["id"]
    r_bad = client.put(f"/api/admin/payments/{payment_id}", json={"status": "refunded"}, headers=admin_headers)
    assert r_bad.status_code == 400
    r_missing = client.put("/api/admin/payments/9999", json={"status": "approved"}, headers=admin_headers)
    assert r_missing.status_code == 404

    client.put(f"/api/admin/payments/{payment_id}", json={"status": "approved"}, headers=admin_headers)
    r_illegal = client.put(f"/api/admin/payments/{payment_id}", json={"status": "rejected"}, headers=admin_headers)
    assert r_illegal.status_code == 400
    assert r_illegal.json()["code"] == "illegal_transition"


def test_transition_table():
    assert can_transition("pending", "approved")
    assert can_transition("pending", "rejected")
    assert can_transition("rejected", "pending")
    assert can_transition("approved", "approved")
    assert not can_transition("approved", "rejected")
    assert not can_transition("approved", "pending")
    assert not can_transition("rejected", "approved")
    assert not can_transition("pending", "pending")


def test_list_and_search_payments(client, admin_headers):
    for i in range(12):
        client.post("/api/payments", json=payment_payload(name=f"Payer {i}", email=f"p{i}@x.com", txnId=f"TX{i:03d}"))
    client.post("/api/payments", json=payment_payload(name="Special Karim", email="karim@x.com", txnId="ZZZ"))

    page1 = client.get("/api/admin/payments?limit=10&page=1", headers=admin_headers).json()
    assert page1["total"] == 13
    assert page1["totalPages"] == 2
    assert page1["currentPage"] == 1
    assert len(page1["payments"]) == 10
    # Newest first
    assert page1["payments"][0]["name"] == "Special Karim"

    found = client.get("/api/admin/payments?search=karim", headers=admin_headers).json()
    assert [p["email"] for p in found["payments"]] == ["karim@x.com"]

    approved = client.get("/api/admin/payments?status=approved", headers=admin_headers).json()
    assert approved["total"] == 0

    one = found["payments"][0]
    r = client.get(f"/api/admin/payments/{one['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["txnId"] == "ZZZ"
    assert client.get("/api/admin/payments/9999", headers=admin_headers).status_code == 404


# --- workflow level -------------------------------------------------------

def new_payment(db, email="a@x.com"):
    return submit_payment(db, PaymentCreate(**payment_payload(email=email)))


def test_double_approval_grants_once_and_broadcasts_each_time(db_session, mailer, broadcaster):
    workflow = PaymentWorkflow(mailer, broadcaster)
    payment = new_payment(db_session)
    asyncio.run(workflow.set_status(db_session, payment.id, "approved"))
    asyncio.run(workflow.set_status(db_session, payment.id, "approved"))

    user = db_session.query(User).filter_by(email="a@x.com").one()
    assert user.courses == ["practical-ibarat"]
    assert db_session.query(UserCourse).count() == 1
    assert len(broadcaster.events) == 2
    event_name, event = broadcaster.events[0]
    assert event_name == "courseAccessUpdated"
    assert event["type"] == "courseAccessUpdated"
    assert event["email"] == "a@x.com"
    assert event["courseId"] == "practical-ibarat"
    assert event["courseName"] == "Practical Ibarat"
    assert event["paymentId"] == payment.id
    assert event["userName"] == "Alice"
    assert event["timestamp"]


def test_rejection_grants_nothing(db_session, mailer, broadcaster):
    workflow = PaymentWorkflow(mailer, broadcaster)
    payment = new_payment(db_session)
    result = asyncio.run(workflow.set_status(db_session, payment.id, "rejected"))
    assert result.status == "rejected"
    assert db_session.query(UserCourse).count() == 0
    assert broadcaster.events == []
    assert mailer.sent == []


def test_email_failure_does_not_undo_grant(db_session, mailer, broadcaster):
    mailer.fail("smtp down")
    workflow = PaymentWorkflow(mailer, broadcaster)
    payment = new_payment(db_session)
    result = asyncio.run(workflow.set_status(db_session, payment.id, "approved"))
    assert result.status == "approved"
    db_session.expire_all()
    assert db_session.get(Payment, payment.id).status == "approved"
    assert db_session.query(User).filter_by(email="a@x.com").one().courses == ["practical-ibarat"]
    assert len(broadcaster.events) == 1


def test_broadcast_failure_does_not_undo_grant(db_session, mailer):
    class BrokenBroadcaster:
        async def broadcast(self, event, message):
            raise RuntimeError("socket layer down")

    workflow = PaymentWorkflow(mailer, BrokenBroadcaster())
    payment = new_payment(db_session)
    asyncio.run(workflow.set_status(db_session, payment.id, "approved"))
    assert db_session.query(User).filter_by(email="a@x.com").one().courses == ["practical-ibarat"]
    assert mailer.sent[-1].to == "a@x.com"


def test_workflow_errors(db_session, mailer, broadcaster):
    workflow = PaymentWorkflow(mailer, broadcaster)
    payment = new_payment(db_session)
    with pytest.raises(ValidationError):
        asyncio.run(workflow.set_status(db_session, payment.id, "cancelled"))
    with pytest.raises(NotFoundError):
        asyncio.run(workflow.set_status(db_session, 12345, "approved"))
    asyncio.run(workflow.set_status(db_session, payment.id, "rejected"))
    with pytest.raises(IllegalTransitionError):
        asyncio.run(workflow.set_status(db_session, payment.id, "approved"))
    # Reopen then approve
    asyncio.run(workflow.set_status(db_session, payment.id, "pending"))
    asyncio.run(workflow.set_status(db_session, payment.id, "approved"))
    assert db_session.get(Payment, payment.id).status == "approved"


def test_status_changes_are_audited(db_session, mailer, broadcaster, client, admin_headers):
    workflow = PaymentWorkflow(mailer, broadcaster)
    payment = new_payment(db_session)
    asyncio.run(workflow.set_status(db_session, payment.id, "approved", actor="ops"))
    entries = db_session.query(AuditLog).filter_by(target_type="payment", target_id=payment.id).all()
    assert len(entries) == 1
    assert entries[0].actor == "ops"
    assert entries[0].details["to"] == "approved"

    r = client.get("/api/admin/audit?action=PAYMENT_STATUS_CHANGED", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()[0]["target_id"] == payment.id
