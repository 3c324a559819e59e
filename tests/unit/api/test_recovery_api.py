"""API tests for /auth/recovery: two-step flow across requests."""

from laundry_app.domain.models.credential import SECURITY_QUESTIONS


async def test_signup_then_recover_with_differently_cased_email(async_client, sign_up, identity_provider):
    await sign_up("USER@Example.com", answer="Rex")

    start = await async_client.post("/auth/recovery", json={"email": "User@example.COM "})
    assert start.status_code == 200
    data = start.json()
    assert data["state"] == "awaiting_answer"
    assert data["question"] == SECURITY_QUESTIONS[2]
    assert "answer_hash" not in data

    done = await async_client.post(f"/auth/recovery/{data['recovery_id']}/answer", json={"answer": " rex"})
    assert done.status_code == 200
    assert done.json()["state"] == "completed"
    assert done.json()["message"].startswith("Verification successful.")
    assert identity_provider.reset_emails == ["user@example.com"]

    replay = await async_client.post(f"/auth/recovery/{data['recovery_id']}/answer", json={"answer": "rex"})
    assert replay.status_code == 404


async def test_unknown_email_is_404(async_client, identity_provider):
    r = await async_client.post("/auth/recovery", json={"email": "ghost@example.com"})
    assert r.status_code == 404
    assert r.json()["detail"] == "No account found with that email address."
    assert identity_provider.reset_emails == []


async def test_wrong_answer_is_400_and_retry_allowed(async_client, sign_up, identity_provider, audit_repository, drain_audit):
    await sign_up("ann@example.com", answer="Rex")
    start = await async_client.post("/auth/recovery", json={"email": "ann@example.com"})
    recovery_id = start.json()["recovery_id"]

    wrong = await async_client.post(f"/auth/recovery/{recovery_id}/answer", json={"answer": "Max"})
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "The answer to the security question is incorrect."
    assert identity_provider.reset_emails == []
    await drain_audit()
    assert audit_repository.entries[-1].event_action == "recovery_answer_check"
    assert audit_repository.entries[-1].success is False

    right = await async_client.post(f"/auth/recovery/{recovery_id}/answer", json={"answer": "REX"})
    assert right.status_code == 200
    assert identity_provider.reset_emails == ["ann@example.com"]


async def test_blank_answer_is_422(async_client, sign_up):
    await sign_up("ann@example.com")
    start = await async_client.post("/auth/recovery", json={"email": "ann@example.com"})
    r = await async_client.post(f"/auth/recovery/{start.json()['recovery_id']}/answer", json={"answer": "  "})
    assert r.status_code == 422
