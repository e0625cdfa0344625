"""
Endpoint tests for fixture generation, listing, diagnostics and mode changes.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session

from tests.conftest import add_match, create_tournament, tournament_matches


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_generate_returns_report(client: TestClient, session: Session):
    tournament = create_tournament(session, 4)

    response = client.post(f"/api/tournaments/{tournament.id}/fixtures/generate", json={"reset": False})

    assert response.status_code == 200
    body = response.json()
    assert body["created_count"] == 6
    assert body["team_count"] == 4
    assert body["mode"] == "single"
    assert body["expected_total"] == 6
    assert body["unique_pairs"] == 6
    assert body["duplicate_count"] == 0
    assert body["blocked"] is False
    assert body["rounds"] == [
        {"round_number": 1, "match_count": 2},
        {"round_number": 2, "match_count": 2},
        {"round_number": 3, "match_count": 2},
    ]


def test_generate_without_body_defaults_to_extend(client: TestClient, session: Session):
    tournament = create_tournament(session, 3)

    first = client.post(f"/api/tournaments/{tournament.id}/fixtures/generate")
    second = client.post(f"/api/tournaments/{tournament.id}/fixtures/generate")

    assert first.status_code == 200
    assert first.json()["created_count"] == 3
    assert second.json()["created_count"] == 0
    assert second.json()["unique_pairs"] == 3


def test_generate_second_leg_blocked_by_scored_match(client: TestClient, session: Session):
    tournament = create_tournament(session, 4, mode="double")
    add_match(session, tournament.id, 1, 2, 1, home_score=2)

    response = client.post(f"/api/tournaments/{tournament.id}/fixtures/generate", json={"reset": False})

    assert response.status_code == 200
    assert response.json()["blocked"] is True
    assert response.json()["created_count"] == 0
    assert len(tournament_matches(session, tournament.id)) == 1


def test_generate_unknown_tournament_is_404(client: TestClient):
    response = client.post("/api/tournaments/999/fixtures/generate", json={})
    assert response.status_code == 404


def test_list_fixtures(client: TestClient, session: Session):
    tournament = create_tournament(session, 4)
    client.post(f"/api/tournaments/{tournament.id}/fixtures/generate")
    match = tournament_matches(session, tournament.id)[0]
    match.home_score = 1
    session.add(match)
    session.commit()

    response = client.get(f"/api/tournaments/{tournament.id}/fixtures")

    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 6
    assert [r["round_number"] for r in rows] == [1, 1, 2, 2, 3, 3]
    assert sum(1 for r in rows if r["is_locked"]) == 1


def test_list_fixtures_unknown_tournament_is_404(client: TestClient):
    assert client.get("/api/tournaments/999/fixtures").status_code == 404


def test_diagnostics_endpoint(client: TestClient, session: Session):
    tournament = create_tournament(session, 4, mode="double")
    client.post(f"/api/tournaments/{tournament.id}/fixtures/generate")

    response = client.get(f"/api/tournaments/{tournament.id}/fixtures/diagnostics")

    assert response.status_code == 200
    body = response.json()
    assert body["total_matches"] == 12
    assert body["pairs_with_two"] == 6
    assert body["pairs_with_more"] == 0
    assert body["pairs_both_orientations"] == 6
    assert body["round_gaps"] == []
    assert [r["round_number"] for r in body["matches_by_round"]] == [1, 2, 3, 4, 5, 6]


def test_get_and_update_mode(client: TestClient, session: Session):
    tournament = create_tournament(session, 4)
    client.post(f"/api/tournaments/{tournament.id}/fixtures/generate")

    assert client.get(f"/api/tournaments/{tournament.id}/mode").json()["mode"] == "single"

    response = client.put(f"/api/tournaments/{tournament.id}/mode", json={"mode": "double"})

    assert response.status_code == 200
    body = response.json()
    assert body["blocked"] is False
    assert body["previous_mode"] == "single"
    assert body["generation"]["created_count"] == 6
    assert client.get(f"/api/tournaments/{tournament.id}/mode").json()["mode"] == "double"


def test_update_mode_blocked_answers_200(client: TestClient, session: Session):
    tournament = create_tournament(session, 4)
    client.post(f"/api/tournaments/{tournament.id}/fixtures/generate")
    match = tournament_matches(session, tournament.id)[0]
    match.home_score = 3
    session.add(match)
    session.commit()

    response = client.put(f"/api/tournaments/{tournament.id}/mode", json={"mode": "double"})

    assert response.status_code == 200
    assert response.json()["blocked"] is True
    assert client.get(f"/api/tournaments/{tournament.id}/mode").json()["mode"] == "single"
    assert len(tournament_matches(session, tournament.id)) == 6


def test_update_mode_rejects_unknown_mode(client: TestClient, session: Session):
    tournament = create_tournament(session, 4)
    response = client.put(f"/api/tournaments/{tournament.id}/mode", json={"mode": "triple"})
    assert response.status_code == 422


def test_mode_unknown_tournament_is_404(client: TestClient):
    assert client.get("/api/tournaments/999/mode").status_code == 404
    assert client.put("/api/tournaments/999/mode", json={"mode": "double"}).status_code == 404
