from app.models import Job

READ_ONLY = "Test user is in Read-Only mode"


def _seed(db, user_id):
    job = Job(company="Acme", position="Engineer", created_by=user_id)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def test_test_user_cannot_create(client, make_user, db_session):
    _, headers = make_user("demo@example.com", is_test_user=True)
    r = client.post("/api/jobs", json={"company": "Acme", "position": "Engineer"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == READ_ONLY
    assert db_session.query(Job).count() == 0


def test_test_user_cannot_update_or_delete(client, make_user, db_session):
    user, headers = make_user("demo@example.com", is_test_user=True)
    job = _seed(db_session, user.id)

    r = client.patch(f"/api/jobs/{job.id}", json={"position": "Manager"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == READ_ONLY

    r = client.delete(f"/api/jobs/{job.id}", headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == READ_ONLY

    db_session.expire_all()
    stored = db_session.get(Job, job.id)
    assert stored is not None
    assert stored.position == "Engineer"


def test_guard_runs_before_body_checks(client, make_user):
    _, headers = make_user("demo@example.com", is_test_user=True)
    # would be a 400 for empty fields or a 404 for a missing job otherwise
    r = client.patch("/api/jobs/9999", json={"company": ""}, headers=headers)
    assert r.json()["detail"] == READ_ONLY


def test_test_user_can_read(client, make_user, db_session):
    user, headers = make_user("demo@example.com", is_test_user=True)
    job = _seed(db_session, user.id)

    r = client.get("/api/jobs", headers=headers)
    assert r.status_code == 200
    assert r.json()["totalJobs"] == 1

    r = client.get(f"/api/jobs/{job.id}", headers=headers)
    assert r.status_code == 200

    r = client.get("/api/jobs/stats", headers=headers)
    assert r.status_code == 200
    assert r.json()["defaultStats"]["pending"] == 1

    me = client.get("/api/me", headers=headers).json()
    assert me["is_test_user"] is True
