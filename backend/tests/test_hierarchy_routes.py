"""
Test Suite for the HTTP layer
Status mapping (401/403/404/503) and response shapes for the hierarchy,
report and analytics routes, served in-process against the in-memory store.
"""
import pytest
from fastapi.testclient import TestClient

from server import app
from factories import OTHER_COMPANY_ID, make_report, make_user, link


def as_user(user_id):
    return {"X-User-Id": user_id}


class TestHierarchyRoutes:
    @pytest.fixture(autouse=True)
    def setup(self, seed):
        users = link([
            make_user("ceo", role="employer", hierarchy_level=0),
            make_user("lead", role="manager", manager_id="ceo", hierarchy_level=3,
                      can_view_team_reports=True, can_manage_employees=True, department="Engineering"),
            make_user("dev", manager_id="lead", department="Engineering"),
            make_user("junior", manager_id="dev", department="Engineering"),
            make_user("other_lead", role="manager", manager_id="ceo", hierarchy_level=3),
            make_user("hr", role="hr", hierarchy_level=3),
            make_user("stranger", role="hr", company_id=OTHER_COMPANY_ID),
        ])
        reports = [
            make_report("r-dev", "dev", wellness=8),
            make_report("r-junior", "junior", wellness=4, risk="high", days_ago=1),
            make_report("r-lead", "lead", wellness=6, days_ago=2),
        ]
        self.db = seed(users=users, reports=reports)
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_identity_is_401(self):
        assert self.client.get("/api/hierarchy/permissions").status_code == 401
        assert self.client.get("/api/hierarchy/permissions", headers=as_user("ghost")).status_code == 401

    def test_tree_for_own_team(self):
        response = self.client.get("/api/hierarchy/tree/lead", headers=as_user("lead"))

        assert response.status_code == 200
        tree = response.json()
        assert [n["user"]["id"] for n in tree] == ["dev"]
        assert tree[0]["children"][0]["user"]["id"] == "junior"
        assert tree[0]["is_expanded"] is True

    def test_tree_for_unknown_manager_is_404(self):
        response = self.client.get("/api/hierarchy/tree/ghost", headers=as_user("hr"))
        assert response.status_code == 404

    def test_tree_for_unrelated_manager_is_403(self):
        response = self.client.get("/api/hierarchy/tree/other_lead", headers=as_user("lead"))
        assert response.status_code == 403

    def test_tree_depth_out_of_range_is_422(self):
        response = self.client.get("/api/hierarchy/tree/lead?max_depth=9", headers=as_user("lead"))
        assert response.status_code == 422

    def test_subordinates(self):
        response = self.client.get("/api/hierarchy/subordinates/ceo", headers=as_user("hr"))

        assert response.status_code == 200
        assert sorted(u["id"] for u in response.json()) == ["dev", "junior", "lead", "other_lead"]

    def test_team_stats(self):
        response = self.client.get("/api/hierarchy/team-stats/lead", headers=as_user("lead"))

        assert response.status_code == 200
        stats = response.json()
        assert stats["team_size"] == 2
        assert stats["avg_team_wellness"] == 6.0
        assert stats["high_risk_team_members"] == 1
        assert stats["team_departments"] == ["Engineering"]

    def test_access_decision(self):
        allowed = self.client.get("/api/hierarchy/access/dev", headers=as_user("lead")).json()
        denied = self.client.get("/api/hierarchy/access/lead", headers=as_user("dev")).json()

        assert allowed["can_access"] is True
        assert denied["can_access"] is False

    def test_permissions(self):
        response = self.client.get("/api/hierarchy/permissions", headers=as_user("lead"))

        assert response.status_code == 200
        assert response.json()["can_manage_team_members"] is True
        assert response.json()["can_access_analytics"] is True

    def test_chain(self):
        response = self.client.get("/api/hierarchy/chain/junior", headers=as_user("hr"))

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == ["dev", "lead", "ceo"]

    @pytest.mark.parametrize("path", [
        "/api/hierarchy/tree/lead",
        "/api/hierarchy/subordinates/lead",
        "/api/hierarchy/team-stats/lead",
        "/api/hierarchy/chain/dev",
    ])
    def test_hr_of_another_company_is_403(self, path):
        response = self.client.get(path, headers=as_user("stranger"))
        assert response.status_code == 403

    def test_access_decision_across_companies(self):
        decision = self.client.get("/api/hierarchy/access/dev", headers=as_user("stranger")).json()
        assert decision["can_access"] is False

    def test_store_outage_is_503_with_retry(self):
        self.db.fail_when = lambda collection, op, query: collection == "mental_health_reports"

        response = self.client.get("/api/hierarchy/team-stats/lead", headers=as_user("lead"))

        assert response.status_code == 503
        assert response.json()["retry"] is True


class TestManagerAssignment:
    @pytest.fixture(autouse=True)
    def setup(self, seed):
        users = link([
            make_user("ceo", role="employer", hierarchy_level=0),
            make_user("lead", role="manager", manager_id="ceo", can_manage_employees=True),
            make_user("other_lead", role="manager", manager_id="ceo"),
            make_user("dev", manager_id="lead"),
            make_user("hr", role="hr"),
        ])
        self.db = seed(users=users)
        self.client = TestClient(app)

    def test_hr_moves_employee(self):
        response = self.client.put(
            "/api/hierarchy/dev/manager", json={"manager_id": "other_lead"}, headers=as_user("hr")
        )

        assert response.status_code == 200
        body = response.json()
        assert body["previous_manager_id"] == "lead"
        assert body["reporting_chain"] == ["ceo", "other_lead"]

    def test_plain_employee_cannot_move_people(self):
        response = self.client.put(
            "/api/hierarchy/lead/manager", json={"manager_id": None}, headers=as_user("dev")
        )
        assert response.status_code == 403

    def test_manager_cannot_move_outside_team(self):
        response = self.client.put(
            "/api/hierarchy/other_lead/manager", json={"manager_id": "lead"}, headers=as_user("lead")
        )
        assert response.status_code == 403

    def test_manager_cannot_move_report_under_unrelated_manager(self):
        response = self.client.put(
            "/api/hierarchy/dev/manager", json={"manager_id": "other_lead"}, headers=as_user("lead")
        )

        assert response.status_code == 403
        assert next(u for u in self.db.users.docs if u["id"] == "dev")["manager_id"] == "lead"

    def test_manager_can_detach_own_report(self):
        response = self.client.put(
            "/api/hierarchy/dev/manager", json={"manager_id": None}, headers=as_user("lead")
        )

        assert response.status_code == 200
        assert response.json()["previous_manager_id"] == "lead"

    def test_cycle_is_400(self):
        response = self.client.put(
            "/api/hierarchy/lead/manager", json={"manager_id": "dev"}, headers=as_user("hr")
        )
        assert response.status_code == 400

    def test_unknown_employee_is_404(self):
        response = self.client.put(
            "/api/hierarchy/ghost/manager", json={"manager_id": "lead"}, headers=as_user("hr")
        )
        assert response.status_code == 404


class TestReportAndAnalyticsRoutes:
    @pytest.fixture(autouse=True)
    def setup(self, seed):
        users = link([
            make_user("lead", role="manager", hierarchy_level=3, can_view_team_reports=True, department="Ops"),
            make_user("dev", manager_id="lead", department="Ops"),
            make_user("peer"),
            make_user("hr", role="hr", hierarchy_level=3),
        ])
        reports = [
            make_report("r-dev", "dev", wellness=8),
            make_report("r-peer", "peer", wellness=5, risk="medium", days_ago=1),
            make_report("r-lead", "lead", wellness=6, days_ago=2),
        ]
        self.db = seed(users=users, reports=reports)
        self.client = TestClient(app)

    def test_filtered_reports_for_employee(self):
        response = self.client.get("/api/reports/filtered?days=7", headers=as_user("dev"))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == ["r-dev"]

    def test_filtered_reports_for_hr(self):
        response = self.client.get("/api/reports/filtered?days=30", headers=as_user("hr"))

        assert sorted(r["id"] for r in response.json()) == ["r-dev", "r-lead", "r-peer"]

    def test_filtered_reports_other_company_is_403(self):
        response = self.client.get(
            f"/api/reports/filtered?company_id={OTHER_COMPANY_ID}", headers=as_user("hr")
        )
        assert response.status_code == 403

    def test_recent_reports_need_company_wide_role(self):
        assert self.client.get("/api/reports/recent", headers=as_user("lead")).status_code == 403

        response = self.client.get("/api/reports/recent", headers=as_user("hr"))
        assert response.status_code == 200
        body = response.json()
        assert len(body["reports"]) == 3
        assert body["analytics"]["total_reports"] == 3
        assert body["analytics"]["department_breakdown"]["Ops"]["count"] == 2

    def test_personal_history(self):
        response = self.client.get("/api/reports/history", headers=as_user("peer"))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()["recent_reports"]] == ["r-peer"]

    def test_hierarchy_analytics_gated(self):
        assert self.client.get("/api/analytics/hierarchy", headers=as_user("dev")).status_code == 403

        response = self.client.get("/api/analytics/hierarchy", headers=as_user("lead"))
        assert response.status_code == 200
        teams = response.json()["team_wellness_comparison"]
        assert [t["manager_id"] for t in teams] == ["lead"]
