"""Question Routes — verifies HTTP status mapping, envelope shape and authorization.

Invariants:
    - Success envelope: success=true + data (+ count/page/pages on listings)
    - Failure envelope: success=false + message (+ errors for validation)
    - NotFound 404, Forbidden 403, missing caller 401, validation/bad request 400
    - Owner or admin may update/delete; anyone else gets 403
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from qbank import __version__
from qbank.db.base import Base

BASE = "/api/v1/questions"
ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
ADMIN = {"X-User-Id": "root", "X-User-Role": "admin"}

VALID_BODY = {
    "questionText": "Explain how hashing works",
    "company": "Meta",
    "topic": "DS",
    "role": "SWE",
    "difficulty": "Medium",
}


# --- create -------------------------------------------------------------------

async def test_create_returns_201_with_zero_upvotes(client):
    """POST /questions returns 201 with the new question at zero upvotes."""
    res = await client.post(BASE, json=VALID_BODY, headers=ALICE)

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Question created successfully"
    assert body["data"]["upvotes"] == 0
    assert body["data"]["upvotedBy"] == []
    assert body["data"]["submittedBy"] == "alice"
    assert body["data"]["questionText"] == "Explain how hashing works"


async def test_create_anonymous_has_no_submitter(client):
    """Without X-User-Id the question is stored with submittedBy null."""
    res = await client.post(BASE, json=VALID_BODY)
    assert res.status_code == 201
    assert res.json()["data"]["submittedBy"] is None


async def test_create_short_text_is_400_with_field_message(client):
    """A too-short questionText yields 400 naming the field and the minimum."""
    res = await client.post(BASE, json={**VALID_BODY, "questionText": "short"})

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert {
        "field": "questionText",
        "message": "Question must be at least 10 characters",
    }.items() <= body["errors"][0].items()


async def test_create_accepts_long_company_name(client):
    """A 250-character company is valid input and is stored as sent."""
    company = "Acme " * 50

    res = await client.post(BASE, json={**VALID_BODY, "company": company})

    assert res.status_code == 201
    assert res.json()["data"]["company"] == company.strip()


async def test_create_bad_difficulty_is_400(client):
    """A difficulty outside Easy/Medium/Hard is rejected on the difficulty field."""
    res = await client.post(BASE, json={**VALID_BODY, "difficulty": "Extreme"})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "difficulty"


async def test_create_blank_company_is_400(client):
    """A whitespace-only company is reported as missing."""
    res = await client.post(BASE, json={**VALID_BODY, "company": "   "})
    assert res.status_code == 400
    assert res.json()["errors"][0]["message"] == "Company is required"


# --- read ---------------------------------------------------------------------

async def test_get_missing_question_is_404(client):
    """GET on an unknown id returns the failure envelope with 404."""
    res = await client.get(f"{BASE}/{uuid4()}")
    body = res.json()
    assert res.status_code == 404
    assert body["success"] is False
    assert body["message"] == "Question not found"
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert "data" not in body


async def test_get_malformed_id_is_400(client):
    """A non-UUID path id is a validation failure, not a 404."""
    res = await client.get(f"{BASE}/not-a-uuid")
    assert res.status_code == 400


async def test_list_envelope_carries_pagination(client, make_question):
    """Listing carries count, page and pages alongside the data slice."""
    for day in range(1, 6):
        await make_question(created_at=datetime(2026, 2, day, tzinfo=timezone.utc))

    res = await client.get(BASE, params={"limit": 2, "page": 2})

    body = res.json()
    assert res.status_code == 200
    assert body["count"] == 5
    assert body["page"] == 2
    assert body["pages"] == 3
    assert len(body["data"]) == 2


async def test_list_filters_are_conjunctive(client, make_question):
    """Every supplied query filter must match."""
    await make_question(company="Google", difficulty="Hard")
    await make_question(company="Google", difficulty="Easy")
    await make_question(company="Amazon", difficulty="Hard")

    res = await client.get(BASE, params={"company": "Google", "difficulty": "Hard"})

    data = res.json()["data"]
    assert len(data) == 1
    assert data[0]["company"] == "Google"
    assert data[0]["difficulty"] == "Hard"


async def test_list_date_range_params(client, make_question):
    """fromDate/toDate query parameters bound createdAt."""
    await make_question(created_at=datetime(2026, 1, 10, tzinfo=timezone.utc))
    await make_question(created_at=datetime(2026, 2, 10, tzinfo=timezone.utc))

    res = await client.get(BASE, params={"fromDate": "2026-02-01", "toDate": "2026-02-10"})

    assert res.json()["count"] == 1


@pytest.mark.parametrize("params", [
    {"limit": 0},
    {"limit": 101},
    {"page": 0},
    {"sort": "random"},
    {"difficulty": "hard"},
    {"fromDate": "yesterday"},
])
async def test_list_rejects_malformed_query(client, params):
    """Out-of-range paging and unknown enum values are 400."""
    res = await client.get(BASE, params=params)
    assert res.status_code == 400
    assert res.json()["success"] is False


async def test_search_finds_case_insensitive_substring(client, make_question):
    """GET /questions/search matches a substring regardless of case."""
    await make_question(question_text="Explain how hashing works")
    await make_question(question_text="Describe the CAP theorem", company="Netflix", topic="Systems")

    res = await client.get(f"{BASE}/search", params={"q": "hash"})

    body = res.json()
    assert res.status_code == 200
    assert body["count"] == 1
    assert body["data"][0]["questionText"] == "Explain how hashing works"


async def test_search_without_term_is_400(client):
    """Search without q is a bad request."""
    res = await client.get(f"{BASE}/search")
    assert res.status_code == 400
    assert res.json()["message"] == "Search query is required"


async def test_categories_lists_distinct_values(client, make_question):
    """GET /questions/categories lists each value once per field."""
    await make_question(company="Google", topic="Graphs", role="SWE")
    await make_question(company="Meta", topic="Graphs", role="SRE")

    res = await client.get(f"{BASE}/categories")

    data = res.json()["data"]
    assert sorted(data["companies"]) == ["Google", "Meta"]
    assert data["topics"] == ["Graphs"]
    assert sorted(data["roles"]) == ["SRE", "SWE"]


# --- update / delete authorization --------------------------------------------

async def test_owner_can_update(client, make_question):
    """The submitter may edit their question."""
    question = await make_question(submitted_by="alice")

    res = await client.put(
        f"{BASE}/{question.id}", json={"topic": "Hashing"}, headers=ALICE,
    )

    assert res.status_code == 200
    assert res.json()["data"]["topic"] == "Hashing"


async def test_update_ignores_company_and_role(client, make_question):
    """company and role in a PUT body are dropped silently."""
    question = await make_question(submitted_by="alice", company="Meta", role="SWE")

    res = await client.put(
        f"{BASE}/{question.id}",
        json={"company": "Google", "role": "SRE", "difficulty": "Hard"},
        headers=ALICE,
    )

    data = res.json()["data"]
    assert data["company"] == "Meta"
    assert data["role"] == "SWE"
    assert data["difficulty"] == "Hard"


async def test_non_owner_update_is_403(client, make_question):
    """Another user gets 403 with the envelope message."""
    question = await make_question(submitted_by="alice")

    res = await client.put(f"{BASE}/{question.id}", json={"topic": "X"}, headers=BOB)

    assert res.status_code == 403
    assert res.json()["message"] == "Not authorized"


async def test_admin_can_update_anonymous_question(client, make_question):
    """Admins may edit questions nobody owns."""
    question = await make_question(submitted_by=None)
    res = await client.put(f"{BASE}/{question.id}", json={"topic": "Trees"}, headers=ADMIN)
    assert res.status_code == 200


async def test_user_cannot_update_anonymous_question(client, make_question):
    """Anonymous questions are admin-only for edits."""
    question = await make_question(submitted_by=None)
    res = await client.put(f"{BASE}/{question.id}", json={"topic": "Trees"}, headers=ALICE)
    assert res.status_code == 403


async def test_update_without_caller_is_401(client, make_question):
    """Mutations without identity headers are 401."""
    question = await make_question(submitted_by="alice")
    res = await client.put(f"{BASE}/{question.id}", json={"topic": "Trees"})
    assert res.status_code == 401


async def test_update_missing_question_is_404_not_403(client):
    """Lookup precedes the ownership check, so a missing id is 404."""
    res = await client.put(f"{BASE}/{uuid4()}", json={"topic": "Trees"}, headers=BOB)
    assert res.status_code == 404


async def test_non_owner_delete_is_403_and_keeps_record(client, make_question):
    """A refused delete leaves the question readable."""
    question = await make_question(submitted_by="alice")

    res = await client.delete(f"{BASE}/{question.id}", headers=BOB)

    assert res.status_code == 403
    assert (await client.get(f"{BASE}/{question.id}")).status_code == 200


async def test_owner_delete_removes_record(client, make_question):
    """The submitter's delete succeeds and the id then 404s."""
    question = await make_question(submitted_by="alice")

    res = await client.delete(f"{BASE}/{question.id}", headers=ALICE)

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Question deleted successfully"}
    assert (await client.get(f"{BASE}/{question.id}")).status_code == 404


async def test_admin_delete_succeeds(client, make_question):
    """Admins may delete any question."""
    question = await make_question(submitted_by="alice")
    res = await client.delete(f"{BASE}/{question.id}", headers=ADMIN)
    assert res.status_code == 200


# --- upvotes ------------------------------------------------------------------

async def test_upvote_toggle_round_trip(client, make_question):
    """Two toggles by the same caller add then remove the upvote."""
    question = await make_question()

    first = await client.post(f"{BASE}/{question.id}/upvote", headers=ALICE)
    second = await client.post(f"{BASE}/{question.id}/upvote", headers=ALICE)

    assert first.status_code == 200
    assert first.json()["message"] == "Upvote toggled"
    assert first.json()["data"] == {"upvotes": 1, "upvoted": True}
    assert second.json()["data"] == {"upvotes": 0, "upvoted": False}


async def test_upvote_reflected_in_question_and_count(client, make_question):
    """Upvotes show up in the question detail and the count endpoint."""
    question = await make_question()
    await client.post(f"{BASE}/{question.id}/upvote", headers=ALICE)
    await client.post(f"{BASE}/{question.id}/upvote", headers=BOB)

    detail = (await client.get(f"{BASE}/{question.id}")).json()["data"]
    count = (await client.get(f"{BASE}/{question.id}/upvotes")).json()["data"]

    assert detail["upvotes"] == 2
    assert detail["upvotedBy"] == ["alice", "bob"]
    assert count == {"upvotes": 2}


async def test_upvote_without_caller_is_401(client, make_question):
    """Upvoting requires a caller identity."""
    question = await make_question()
    res = await client.post(f"{BASE}/{question.id}/upvote")
    assert res.status_code == 401
    assert res.json()["success"] is False


async def test_upvote_missing_question_is_404(client):
    """Upvoting an unknown id is 404."""
    res = await client.post(f"{BASE}/{uuid4()}/upvote", headers=ALICE)
    assert res.status_code == 404


# --- health -------------------------------------------------------------------

async def test_readiness_reports_database_healthy(client):
    """Readiness passes with a reachable database and migrated schema."""
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"] == {"database": "healthy", "schema": "migrated"}


async def test_readiness_fails_without_questions_table(client, test_engine):
    """A reachable database without the questions table is not ready."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    res = await client.get("/api/v1/health/ready")

    assert res.status_code == 503
    assert res.json() == {
        "status": "not_ready",
        "checks": {"database": "healthy", "schema": "missing"},
    }


async def test_liveness_reports_service_version(client):
    """Liveness names the service and package version."""
    res = await client.get("/api/v1/health/")
    assert res.json() == {"status": "healthy", "service": "qbank-api", "version": __version__}
