"""HTTP tests for the ratings, sessions, admin and analytics routers."""

from datetime import date
from unittest.mock import patch

from pymongo.errors import PyMongoError


# ── Ratings ──────────────────────────────────────────────────────────


class TestRatingRoutes:
    def test_submit(self, client):
        response = client.post(
            "/api/ratings/submit",
            json={"rating": 5, "label": "Great"},
            headers={"User-Agent": "pytest-agent"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Rating submitted successfully"
        assert body["rating"]["rating"] == 5
        assert body["rating"]["user_agent"] == "pytest-agent"
        assert "_id" in body["rating"]

    def test_submit_out_of_range(self, client, mongo_db):
        for score in (0, 6):
            response = client.post("/api/ratings/submit", json={"rating": score, "label": "x"})
            assert response.status_code == 422
        assert mongo_db["ratings"].count_documents({}) == 0

    def test_submit_rejects_non_integer_scores(self, client, mongo_db):
        for score in (True, "5", 5.0):
            response = client.post("/api/ratings/submit", json={"rating": score, "label": "x"})
            assert response.status_code == 422
        assert mongo_db["ratings"].count_documents({}) == 0

    def test_all(self, client):
        client.post("/api/ratings/submit", json={"rating": 4, "label": "Good"})
        client.post("/api/ratings/submit", json={"rating": 2, "label": "Poor"})

        response = client.get("/api/ratings/all")

        assert response.status_code == 200
        assert sorted(r["rating"] for r in response.json()) == [2, 4]

    def test_stats(self, client):
        for rating, label in [(5, "Great"), (3, "Ok"), (5, "Great")]:
            client.post("/api/ratings/submit", json={"rating": rating, "label": label})

        body = client.get("/api/ratings/stats").json()

        assert body["stats"] == [
            {"rating": 3, "count": 1, "label": "Ok"},
            {"rating": 5, "count": 2, "label": "Great"},
        ]
        assert body["totalRatings"] == 3
        assert round(body["averageRating"], 2) == 4.33

    def test_stats_empty(self, client):
        assert client.get("/api/ratings/stats").json() == {
            "stats": [], "totalRatings": 0, "averageRating": 0
        }

    def test_database_error_is_generic_500(self, client):
        with patch("app.api.routes.rating_routes.RatingService.list_all", side_effect=PyMongoError("socket closed")):
            response = client.get("/api/ratings/all")

        assert response.status_code == 500
        assert response.json() == {"error": "PersistenceError", "message": "Database operation failed"}


# ── Sessions ─────────────────────────────────────────────────────────


class TestSessionRoutes:
    def test_create_requires_service_key(self, client):
        response = client.post("/api/sessions", json={"user_id": "u1", "google_id": "g1"})
        assert response.status_code == 401

        response = client.post(
            "/api/sessions", json={"user_id": "u1", "google_id": "g1"},
            headers={"X-Service-Key": "wrong"}
        )
        assert response.status_code == 401

    def test_create_returns_token(self, client, service_headers):
        response = client.post(
            "/api/sessions",
            json={"user_id": "u1", "google_id": "g1", "ttl_minutes": 30,
                  "device_info": {"browser": "Chrome", "os": "Android", "device": "mobile"}},
            headers=service_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["session_id"]

    def test_me(self, client, login):
        headers = login("u1")

        response = client.get("/api/sessions/me", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == "u1"
        assert body["external_id"] == "google-u1"
        assert body["is_active"] is True

    def test_me_when_session_swept_after_auth(self, client, login):
        headers = login("u1")

        with patch("app.api.routes.session_routes.SessionService.get", return_value=None):
            response = client.get("/api/sessions/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    def test_missing_or_bad_token(self, client):
        assert client.get("/api/sessions/me").status_code == 401
        bad = {"Authorization": "Bearer not-a-jwt"}
        assert client.get("/api/sessions/me", headers=bad).status_code == 401

    def test_logout_invalidates_token(self, client, login):
        headers = login("u1")

        assert client.delete("/api/sessions/current", headers=headers).status_code == 200
        assert client.get("/api/sessions/me", headers=headers).status_code == 401

    def test_revoke_all(self, client, login):
        laptop = login("u1", device_info={"browser": "Firefox", "os": "Linux"})
        phone = login("u1", device_info={"browser": "Safari", "os": "iOS"})

        listing = client.get("/api/sessions", headers=laptop)
        assert len(listing.json()) == 2

        response = client.post("/api/sessions/revoke-all", headers=laptop)
        assert response.json()["count"] == 2
        assert client.get("/api/sessions/me", headers=phone).status_code == 401


# ── Admin ────────────────────────────────────────────────────────────


class TestAdminRoutes:
    def test_students_are_forbidden(self, client, login):
        response = client.get("/api/admin/activity", headers=login("u1"))
        assert response.status_code == 403

    def test_record_and_query(self, client, admin_headers):
        response = client.post(
            "/api/admin/activity",
            json={"action": "experience_rejected", "target_type": "experience", "target_id": "exp-7",
                  "details": {"reason": "duplicate", "previous_status": "pending"}},
            headers=admin_headers,
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["admin_id"] == "admin-1"
        assert entry["details"] == {"reason": "duplicate", "previous_status": "pending"}

        by_action = client.get("/api/admin/activity/actions/experience_rejected", headers=admin_headers)
        by_target = client.get("/api/admin/activity/targets/experience/exp-7", headers=admin_headers)
        by_admin = client.get("/api/admin/activity/admins/admin-1", headers=admin_headers)
        recent = client.get("/api/admin/activity", headers=admin_headers)
        for response in (by_action, by_target, by_admin, recent):
            assert [e["_id"] for e in response.json()] == [entry["_id"]]

    def test_record_rejects_unknown_action(self, client, admin_headers, mongo_db):
        response = client.post(
            "/api/admin/activity",
            json={"action": "experience_published", "target_type": "experience", "target_id": "exp-7"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert mongo_db["admin_activities"].count_documents({}) == 0

    def test_suspend_revokes_sessions_and_audits(self, client, login, admin_headers):
        student = login("u-9")

        response = client.post(
            "/api/admin/users/u-9/suspend", json={"reason": "spam"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert client.get("/api/sessions/me", headers=student).status_code == 401
        audit = client.get("/api/admin/activity/targets/user/u-9", headers=admin_headers).json()
        assert audit[0]["action"] == "user_suspended"
        assert audit[0]["details"] == {"reason": "spam"}

    def test_cleanup_sessions(self, client, login, admin_headers):
        student = login("u-3")
        client.delete("/api/sessions/current", headers=student)

        response = client.post("/api/admin/sessions/cleanup", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["count"] == 1
        audit = client.get("/api/admin/activity/actions/system_maintenance", headers=admin_headers).json()
        assert audit[0]["details"]["bulk_count"] == 1


# ── Analytics ────────────────────────────────────────────────────────


class TestAnalyticsRoutes:
    def test_track_is_public_and_counts(self, client, admin_headers):
        assert client.post("/api/analytics/track").status_code == 200
        assert client.post("/api/analytics/track").status_code == 200

        days = client.get("/api/analytics/daily", headers=admin_headers).json()

        assert len(days) == 1
        assert days[0]["metrics"]["page_views"] == 2

    def test_track_page_and_stats(self, client, admin_headers):
        client.post("/api/analytics/track", json={"page": "/post", "referrer": "https://example.com"})
        client.post("/api/analytics/track", json={"page": "/"})
        client.post("/api/analytics/track")

        response = client.get("/api/analytics/stats", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["totalViews"] == 3
        assert body["todayViews"] == 3
        assert body["pageViews"]["/post"] == 1
        assert body["pageViews"]["/"] == 1

    def test_stats_requires_admin(self, client, login):
        assert client.get("/api/analytics/stats", headers=login("u1")).status_code == 403

    def test_daily_requires_admin(self, client, login):
        response = client.post(
            "/api/analytics/daily", json={"metrics": {"page_views": 1}}, headers=login("u1")
        )
        assert response.status_code == 403

    def test_update_daily(self, client, admin_headers):
        body = {"day": "2025-03-14", "metrics": {"experiences_submitted": 2, "experiences_approved": 1}}

        client.post("/api/analytics/daily", json=body, headers=admin_headers)
        response = client.post("/api/analytics/daily", json=body, headers=admin_headers)

        assert response.status_code == 200
        metrics = response.json()["metrics"]
        assert metrics["experiences_submitted"] == 4
        assert metrics["experiences_approved"] == 2

    def test_update_daily_unknown_metric(self, client, admin_headers):
        response = client.post(
            "/api/analytics/daily", json={"metrics": {"likes": 1}}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_update_daily_rejects_boolean_delta(self, client, admin_headers, mongo_db):
        response = client.post(
            "/api/analytics/daily", json={"metrics": {"page_views": True}}, headers=admin_headers
        )
        assert response.status_code == 422
        assert mongo_db["analytics"].count_documents({}) == 0

    def test_top_lists_and_performance(self, client, admin_headers):
        top = client.put(
            "/api/analytics/daily/2025-03-14/top",
            json={"top_companies": [{"name": "Microsoft", "count": 5}],
                  "top_graduation_years": [{"year": 2025, "count": 9}]},
            headers=admin_headers,
        )
        assert top.status_code == 200
        assert top.json()["metrics"]["top_graduation_years"] == [{"year": 2025, "count": 9}]

        perf = client.put(
            "/api/analytics/daily/2025-03-14/performance",
            json={"error_rate": 0.5},
            headers=admin_headers,
        )
        assert perf.status_code == 200
        assert perf.json()["performance"]["error_rate"] == 0.5
        assert perf.json()["metrics"]["top_companies"] == [{"name": "Microsoft", "count": 5}]

        days = client.get(
            "/api/analytics/daily", params={"start": "2025-03-01", "end": "2025-03-31"},
            headers=admin_headers
        ).json()
        assert [d["date"][:10] for d in days] == [date(2025, 3, 14).isoformat()]


def test_health(client):
    with patch("app.main.test_mongo_connection", return_value=True):
        response = client.get("/health")
    assert response.json() == {"status": "healthy", "mongodb": "connected"}
