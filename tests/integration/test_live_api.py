"""
Live API Integration Tests

Tests against a running stack (API, Postgres, Redis, Supabase).
Marked with @pytest.mark.live for selective execution.

Requires MEMO_ACCESS_TOKEN (a valid Supabase access token) for the
authenticated flows; those tests are skipped without it.

Run with: pytest tests/integration/test_live_api.py -m live
"""

import os

import httpx
import pytest

requires_token = pytest.mark.skipif(
    not os.getenv("MEMO_ACCESS_TOKEN"), reason="MEMO_ACCESS_TOKEN not set"
)


@pytest.mark.live
@requires_token
def test_lifecycle_create_read_trash(api_client):
    """
    Full note lifecycle: Create -> List -> Get -> Trash -> Restore -> Purge.

    Verifies the happy path and that trashed notes leave the active list.
    """
    payload = {"title": "라이브 테스트", "content": "도커 환경에서 실행 중"}
    res_post = api_client.post("/notes/", json=payload)
    assert res_post.status_code == 200
    created = res_post.json()
    assert created["success"] is True
    note_id = created["note_id"]

    res_list = api_client.get("/notes/", params={"sort": "newest"})
    assert res_list.status_code == 200
    assert any(n["id"] == note_id for n in res_list.json()["notes"])

    res_get = api_client.get(f"/notes/{note_id}")
    assert res_get.json()["note"]["title"] == payload["title"]

    assert api_client.delete(f"/notes/{note_id}").json()["success"] is True
    assert api_client.get(f"/notes/{note_id}").json()["note"] is None

    trash = api_client.get("/notes/trash").json()["notes"]
    assert any(n["id"] == note_id for n in trash)

    assert api_client.post(f"/notes/{note_id}/restore").json()["success"] is True
    assert api_client.delete(f"/notes/{note_id}").json()["success"] is True
    assert api_client.delete(f"/notes/{note_id}/permanent").json()["success"] is True


@pytest.mark.live
@requires_token
def test_unknown_note(api_client):
    """A missing note is a successful lookup with no note."""
    res = api_client.get("/notes/00000000-0000-0000-0000-000000000000")
    assert res.status_code == 200
    assert res.json() == {"success": True, "error": None, "note": None}


@pytest.mark.live
@requires_token
def test_validation_error_is_reported_in_body(api_client):
    res = api_client.post("/notes/", json={"title": "", "content": "본문"})
    assert res.status_code == 200
    assert res.json()["error"] == "제목을 입력해주세요."


@pytest.mark.live
def test_unauthenticated_request(wait_for_api):
    """Without a token every handler answers with the re-login message."""
    base_url = os.getenv("MEMO_API_URL", "http://localhost:8000")
    res = httpx.get(f"{base_url}/api/v1/notes/", timeout=10.0)

    assert res.status_code == 200
    assert res.json()["success"] is False
    assert res.json()["error"] == "인증되지 않은 사용자입니다. 다시 로그인해주세요."


@pytest.mark.live
def test_gemini_status(api_client):
    res = api_client.get("/ai/status")

    assert res.status_code == 200
    assert {"configured", "model"} <= set(res.json())
    assert res.json()["connected"] is None
