import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def teams(make_team):
    return make_team("Team A"), make_team("Team B")


@pytest.fixture
def create_match(client, admin_headers, tournament, open_round, teams):
    team_a, team_b = teams

    def _create_match(**overrides):
        body = {
            "tournamentId": tournament["id"],
            "roundId": open_round["id"],
            "team_id": team_a["id"],
            "opponent_team_id": team_b["id"],
            "input_allowed_team_id": team_a["id"],
        }
        body.update(overrides)
        response = client.post("/matches", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_match


def submit(client, team, match_id, action, payload=None):
    body = {"action": action}
    if payload is not None:
        body["payload"] = payload
    return client.post(f"/team/matches/{match_id}/result", json=body, headers=team["headers"])


class TestResultActions:

    def test_input_not_open(self, client: TestClient, teams, create_match):
        team_a, _ = teams
        match = create_match(input_allowed_team_id=None)
        response = submit(client, team_a, match["id"], "save", {"selfScore": "2"})
        assert response.status_code == 403
        assert response.json()["error"]

    def test_admin_only_match(self, client: TestClient, teams, create_match):
        team_a, _ = teams
        match = create_match(input_allowed_team_id="admin")
        assert submit(client, team_a, match["id"], "save").status_code == 403

    def test_save_lock_and_finalize(self, client: TestClient, admin_headers, teams, create_match):
        team_a, team_b = teams
        match = create_match()

        saved = submit(client, team_a, match["id"], "save", {"selfScore": "2", "opponentScore": "1"})
        assert saved.status_code == 200
        body = saved.json()
        assert body["locked_by"] == team_a["id"]
        assert body["result_status"] == "draft"
        assert body["self_score"] == "2"
        assert body["opponent_score"] == "1"

        # Input handed to team B while team A still holds the lock
        handed = client.put(
            f"/matches/{match['id']}", json={"input_allowed_team_id": team_b["id"]}, headers=admin_headers
        )
        assert handed.status_code == 200
        assert handed.json()["locked_by"] == team_a["id"]

        locked = submit(client, team_b, match["id"], "save", {"selfScore": "0"})
        assert locked.status_code == 409

        client.put(f"/matches/{match['id']}", json={"input_allowed_team_id": team_a["id"]}, headers=admin_headers)
        finalized = submit(client, team_a, match["id"], "finalize")
        assert finalized.status_code == 200
        assert finalized.json()["result_status"] == "finalized"
        assert finalized.json()["locked_by"] is None
        assert finalized.json()["finalized_at"] is not None

        again = submit(client, team_a, match["id"], "save", {"selfScore": "3"})
        assert again.status_code == 409

    def test_wrong_team(self, client: TestClient, teams, create_match):
        _, team_b = teams
        match = create_match()
        assert submit(client, team_b, match["id"], "save").status_code == 403

    def test_numeric_scores_and_games(self, client: TestClient, teams, create_match):
        team_a, _ = teams
        match = create_match()
        response = submit(
            client,
            team_a,
            match["id"],
            "save",
            {"selfScore": 2, "opponentScore": 0, "games": [{"player": "Ann", "selfScore": 1}, {"player": "Ann"}]},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["self_score"] == "2"
        assert [g["game_number"] for g in body["games"]] == [1, 2]
        assert body["games"][0]["self_score"] == "1"

    def test_cancel_releases_lock(self, client: TestClient, teams, create_match):
        team_a, _ = teams
        match = create_match()
        submit(client, team_a, match["id"], "save", {"selfScore": "1"})
        cancelled = submit(client, team_a, match["id"], "cancel")
        assert cancelled.status_code == 200
        assert cancelled.json()["locked_by"] is None
        assert cancelled.json()["self_score"] == "1"
        assert cancelled.json()["result_status"] == "draft"

    def test_invalid_action(self, client: TestClient, teams, create_match):
        team_a, _ = teams
        match = create_match()
        response = submit(client, team_a, match["id"], "publish")
        assert response.status_code == 400
        assert "error" in response.json()

    def test_unknown_match(self, client: TestClient, teams):
        team_a, _ = teams
        assert submit(client, team_a, "missing", "save").status_code == 404


class TestAdminMatchRoutes:

    def test_creation_requires_scope(self, client: TestClient, admin_headers, tournament):
        response = client.post("/matches", json={"tournament_id": tournament["id"]}, headers=admin_headers)
        assert response.status_code == 400

    def test_closed_round_refuses_matches(self, client: TestClient, admin_headers, tournament, open_round):
        client.post(f"/tournaments/{tournament['id']}/rounds/{open_round['id']}/close", headers=admin_headers)
        response = client.post(
            "/matches",
            json={"tournament_id": tournament["id"], "round_id": open_round["id"]},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_permission_outside_match_rejected(self, client: TestClient, admin_headers, create_match):
        match = create_match()
        response = client.put(
            f"/matches/{match['id']}", json={"input_allowed_team_id": "someone-else"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_unfinalize(self, client: TestClient, admin_headers, teams, create_match):
        team_a, _ = teams
        match = create_match()
        submit(client, team_a, match["id"], "finalize", {"selfScore": "2"})

        response = client.put(f"/matches/{match['id']}", json={"result_status": "draft"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["result_status"] == "draft"
        assert response.json()["finalized_at"] is None
        assert submit(client, team_a, match["id"], "save", {"selfScore": "3"}).status_code == 200

    def test_admin_finalize_sets_finalized_at(self, client: TestClient, admin_headers, create_match):
        match = create_match()
        response = client.put(f"/matches/{match['id']}", json={"result_status": "finalized"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["result_status"] == "finalized"
        assert response.json()["finalized_at"] is not None

    def test_list_requires_tournament(self, client: TestClient, admin_headers):
        assert client.get("/matches", headers=admin_headers).status_code == 400

    def test_list_by_round(self, client: TestClient, admin_headers, tournament, open_round, create_match):
        match = create_match()
        response = client.get(
            "/matches",
            params={"tournament_id": tournament["id"], "round_id": open_round["id"]},
            headers=admin_headers,
        )
        assert [m["id"] for m in response.json()] == [match["id"]]

    def test_delete_finalized_returns_match(self, client: TestClient, admin_headers, teams, create_match):
        team_a, _ = teams
        match = create_match()
        submit(client, team_a, match["id"], "finalize")

        response = client.delete(f"/matches/{match['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["id"] == match["id"]
        assert client.get(f"/matches/{match['id']}", headers=admin_headers).status_code == 404

    def test_team_cannot_use_admin_routes(self, client: TestClient, teams, tournament):
        team_a, _ = teams
        response = client.get("/matches", params={"tournament_id": tournament["id"]}, headers=team_a["headers"])
        assert response.status_code == 403


class TestTeamMatchRoutes:

    @pytest.fixture
    def own_match(self, client, teams, tournament, open_round):
        team_a, team_b = teams
        response = client.post(
            "/team/matches",
            json={
                "tournamentId": tournament["id"],
                "roundId": open_round["id"],
                "opponent_team_id": team_b["id"],
                "player": "Ann",
            },
            headers=team_a["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_create_sets_owner(self, own_match, teams):
        team_a, _ = teams
        assert own_match["team_id"] == team_a["id"]
        assert own_match["input_allowed_team_id"] is None

    def test_create_requires_round(self, client: TestClient, teams, tournament):
        team_a, _ = teams
        response = client.post("/team/matches", json={"tournamentId": tournament["id"]}, headers=team_a["headers"])
        assert response.status_code == 400

    def test_list_includes_away_matches(self, client: TestClient, teams, own_match):
        team_a, team_b = teams
        assert [m["id"] for m in client.get("/team/matches", headers=team_a["headers"]).json()] == [own_match["id"]]
        assert [m["id"] for m in client.get("/team/matches", headers=team_b["headers"]).json()] == [own_match["id"]]

    def test_update(self, client: TestClient, teams, own_match):
        team_a, _ = teams
        response = client.put(f"/team/matches/{own_match['id']}", json={"deck": "Control"}, headers=team_a["headers"])
        assert response.status_code == 200
        assert response.json()["deck"] == "Control"
        assert response.json()["player"] == "Ann"

    def test_opponent_change_must_keep_permission_valid(
        self, client: TestClient, admin_headers, teams, own_match, make_team
    ):
        team_a, team_b = teams
        team_c = make_team("Team C")
        client.put(f"/matches/{own_match['id']}", json={"input_allowed_team_id": team_b["id"]}, headers=admin_headers)

        response = client.put(
            f"/team/matches/{own_match['id']}", json={"opponent_team_id": team_c["id"]}, headers=team_a["headers"]
        )
        assert response.status_code == 400

        match = client.get(f"/matches/{own_match['id']}", headers=admin_headers).json()
        assert match["opponent_team_id"] == team_b["id"]
        assert submit(client, team_b, own_match["id"], "finalize").status_code == 200

    def test_opponent_change_allowed_when_permission_unaffected(self, client: TestClient, teams, own_match, make_team):
        team_a, _ = teams
        team_c = make_team("Team C")
        response = client.put(
            f"/team/matches/{own_match['id']}", json={"opponent_team_id": team_c["id"]}, headers=team_a["headers"]
        )
        assert response.status_code == 200
        assert response.json()["opponent_team_id"] == team_c["id"]

    def test_update_without_fields(self, client: TestClient, teams, own_match):
        team_a, _ = teams
        assert client.put(f"/team/matches/{own_match['id']}", json={}, headers=team_a["headers"]).status_code == 400

    def test_non_owner_forbidden(self, client: TestClient, teams, own_match):
        _, team_b = teams
        assert client.put(f"/team/matches/{own_match['id']}", json={"deck": "x"}, headers=team_b["headers"]).status_code == 403
        assert client.delete(f"/team/matches/{own_match['id']}", headers=team_b["headers"]).status_code == 403

    def test_finalized_match_is_frozen(self, client: TestClient, admin_headers, teams, own_match):
        team_a, _ = teams
        client.put(f"/matches/{own_match['id']}", json={"result_status": "finalized"}, headers=admin_headers)

        assert client.put(f"/team/matches/{own_match['id']}", json={"deck": "x"}, headers=team_a["headers"]).status_code == 409
        assert client.delete(f"/team/matches/{own_match['id']}", headers=team_a["headers"]).status_code == 409

    def test_delete(self, client: TestClient, teams, own_match):
        team_a, _ = teams
        response = client.delete(f"/team/matches/{own_match['id']}", headers=team_a["headers"])
        assert response.status_code == 204
        assert client.get("/team/matches", headers=team_a["headers"]).json() == []
