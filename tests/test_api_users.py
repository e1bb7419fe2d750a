# =============================================================================
# tests/test_api_users.py - User Endpoint Tests
# =============================================================================
# Integration tests for /api/users: identity bootstrap, session expiry and
# recovery, profile edits, likes and follows.
#
# Run with: pytest tests/test_api_users.py -v
# =============================================================================

from datetime import timedelta

from lib.utils import utc_now


# =============================================================================
# Identity Bootstrap
# =============================================================================

class TestRegister:
    """Tests for POST /api/users/register."""

    def test_register_new_user(self, client, fake_db):
        response = client.post(
            "/api/users/register",
            json={"uid": "alice", "name": "Alice", "email": "Alice@Example.com"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["data"]["email"] == "alice@example.com"
        assert body["data"]["likedRecipes"] == []
        assert fake_db.users["alice"]["last_active"]

    def test_register_existing_uid(self, client, fake_db):
        fake_db.add_user("alice", name="Alice")

        response = client.post(
            "/api/users/register",
            json={"uid": "alice", "name": "Someone Else", "email": "alice@example.com"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "User already exists"
        assert fake_db.users["alice"]["name"] == "Alice"

    def test_register_email_taken(self, client, fake_db):
        fake_db.add_user("alice", email="shared@example.com")

        response = client.post(
            "/api/users/register",
            json={"uid": "bob", "name": "Bob", "email": "shared@example.com"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "EMAIL_TAKEN"
        assert "bob" not in fake_db.users

    def test_register_invalid_email(self, client, fake_db):
        response = client.post(
            "/api/users/register",
            json={"uid": "bob", "name": "Bob", "email": "bob"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestCreateOrUpdate:
    """Tests for POST /api/users/create-or-update."""

    def test_creates(self, client, fake_db):
        response = client.post(
            "/api/users/create-or-update",
            json={"uid": "carol", "name": "Carol", "email": "carol@example.com"},
        )

        assert response.status_code == 201
        assert response.json()["message"] == "User created successfully"

    def test_updates(self, client, fake_db, auth_headers):
        fake_db.add_user("carol", name="Carol")

        response = client.post(
            "/api/users/create-or-update",
            json={"uid": "carol", "name": "Caroline", "photoURL": "https://img.example.com/c.png"},
            headers=auth_headers("carol"),
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Caroline"
        assert fake_db.users["carol"]["photo_url"] == "https://img.example.com/c.png"

    def test_update_without_token_rejected(self, client, fake_db):
        fake_db.add_user("alice", email="alice@example.com")

        response = client.post(
            "/api/users/create-or-update",
            json={"uid": "alice", "email": "evil@example.com"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "MISSING_CREDENTIAL"
        assert fake_db.users["alice"]["email"] == "alice@example.com"

    def test_update_of_other_user_forbidden(self, client, fake_db, auth_headers):
        fake_db.add_user("alice", name="Alice", email="alice@example.com")
        fake_db.add_user("mallory")

        response = client.post(
            "/api/users/create-or-update",
            json={"uid": "alice", "name": "Hacked", "email": "evil@example.com"},
            headers=auth_headers("mallory"),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"
        assert fake_db.users["alice"]["name"] == "Alice"
        assert fake_db.users["alice"]["email"] == "alice@example.com"

    def test_create_needs_name_and_email(self, client, fake_db):
        response = client.post("/api/users/create-or-update", json={"uid": "dave"})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert fake_db.users == {}


# =============================================================================
# Sessions
# =============================================================================

class TestSessions:
    """Idle expiry through the API and recovery via login."""

    def test_current_refreshes_last_active(self, client, fake_db, auth_headers):
        before = utc_now() - timedelta(minutes=10)
        fake_db.add_user("alice", last_active=before)

        response = client.get("/api/users/current", headers=auth_headers("alice"))

        assert response.status_code == 200
        assert response.json()["data"]["uid"] == "alice"
        assert fake_db.users["alice"]["last_active"] != before.isoformat()

    def test_expired_then_login(self, client, fake_db, auth_headers):
        stale = utc_now() - timedelta(hours=2)
        fake_db.add_user("alice", last_active=stale)

        expired = client.get("/api/users/current", headers=auth_headers("alice"))

        assert expired.status_code == 401
        assert expired.json() == {
            "success": False,
            "message": "Session expired. Please login again.",
            "error": "SESSION_EXPIRED",
            "sessionExpired": True,
        }
        assert fake_db.users["alice"]["last_active"] == stale.isoformat()

        login = client.post("/api/users/login", headers=auth_headers("alice"))
        assert login.status_code == 200
        assert login.json()["data"]["uid"] == "alice"

        again = client.get("/api/users/current", headers=auth_headers("alice"))
        assert again.status_code == 200

    def test_login_unknown_user(self, client, fake_db, auth_headers):
        response = client.post("/api/users/login", headers=auth_headers("ghost"))

        assert response.status_code == 404
        assert response.json()["error"] == "USER_NOT_FOUND"

    def test_login_with_matching_uid(self, client, fake_db, auth_headers):
        fake_db.add_user("alice", last_active=utc_now() - timedelta(hours=2))

        response = client.post(
            "/api/users/login", json={"uid": "alice"}, headers=auth_headers("alice")
        )

        assert response.status_code == 200

    def test_anonymous_login_cannot_revive_session(self, client, fake_db, auth_headers):
        """Posting a uid without a token leaves the expired session expired."""
        stale = utc_now() - timedelta(hours=2)
        fake_db.add_user("alice", last_active=stale)

        response = client.post("/api/users/login", json={"uid": "alice"})

        assert response.status_code == 401
        assert response.json()["error"] == "MISSING_CREDENTIAL"
        assert fake_db.users["alice"]["last_active"] == stale.isoformat()

        current = client.get("/api/users/current", headers=auth_headers("alice"))
        assert current.status_code == 401
        assert current.json()["error"] == "SESSION_EXPIRED"

    def test_login_for_another_user_forbidden(self, client, fake_db, auth_headers):
        stale = utc_now() - timedelta(hours=2)
        fake_db.add_user("alice", last_active=stale)
        fake_db.add_user("mallory")

        response = client.post(
            "/api/users/login", json={"uid": "alice"}, headers=auth_headers("mallory")
        )

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"
        assert fake_db.users["alice"]["last_active"] == stale.isoformat()

    def test_login_with_bad_token(self, client, fake_db):
        fake_db.add_user("alice")

        response = client.post(
            "/api/users/login", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIAL"

    def test_current_without_record(self, client, fake_db, auth_headers):
        """A verified but unregistered identity gets a 404 for its record."""
        response = client.get("/api/users/current", headers=auth_headers("newbie"))

        assert response.status_code == 404


class TestProfile:
    """Tests for profile reads and edits."""

    def test_update_profile(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")

        response = client.put(
            "/api/users/profile",
            json={"bio": "Pasta enthusiast", "specialties": ["Italian", " "], "sessionTimeoutMinutes": 60},
            headers=auth_headers("alice"),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["bio"] == "Pasta enthusiast"
        assert data["specialties"] == ["Italian"]
        assert data["sessionTimeoutMinutes"] == 60

    def test_public_profile(self, client, fake_db):
        fake_db.add_user("alice", name="Alice")

        response = client.get("/api/users/profile/alice")

        assert response.json()["data"]["name"] == "Alice"

    def test_public_profile_missing(self, client, fake_db):
        response = client.get("/api/users/profile/ghost")

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"


# =============================================================================
# Likes
# =============================================================================

class TestUserLikes:
    """Tests for /api/users/like and /api/users/unlike."""

    def test_like_and_unlike(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")
        fake_db.add_user("bob")
        recipe = fake_db.add_recipe("alice")

        liked = client.post(f"/api/users/like/{recipe['id']}", headers=auth_headers("bob"))
        assert liked.status_code == 200
        assert liked.json()["data"] == {"recipeId": recipe["id"], "likeCount": 1}

        listing = client.get("/api/users/bob/liked-recipes").json()
        assert [r["id"] for r in listing["data"]] == [recipe["id"]]

        unliked = client.delete(f"/api/users/unlike/{recipe['id']}", headers=auth_headers("bob"))
        assert unliked.json()["data"] == {"recipeId": recipe["id"], "likeCount": 0}

    def test_unlike_without_like(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")
        fake_db.add_user("bob")
        recipe = fake_db.add_recipe("alice")

        response = client.delete(f"/api/users/unlike/{recipe['id']}", headers=auth_headers("bob"))

        assert response.status_code == 400
        assert response.json()["error"] == "NOT_LIKED"

    def test_liked_recipes_unknown_user(self, client, fake_db):
        assert client.get("/api/users/ghost/liked-recipes").status_code == 404

    def test_user_recipes(self, client, fake_db):
        fake_db.add_user("alice")
        recipe = fake_db.add_recipe("alice")

        body = client.get("/api/users/alice/recipes").json()

        assert body["count"] == 1
        assert body["data"][0]["id"] == recipe["id"]


# =============================================================================
# Follows
# =============================================================================

class TestFollows:
    """Tests for /api/users/follow and /api/users/unfollow."""

    def test_follow_then_follow_again(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")
        fake_db.add_user("bob")

        first = client.post("/api/users/follow/bob", headers=auth_headers("alice"))
        second = client.post("/api/users/follow/bob", headers=auth_headers("alice"))

        assert first.status_code == 200
        assert first.json()["message"] == "User followed successfully"
        assert second.status_code == 400
        assert second.json()["error"] == "ALREADY_FOLLOWING"
        assert fake_db.users["bob"]["followers"] == ["alice"]

    def test_unfollow_without_follow(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")
        fake_db.add_user("bob")

        response = client.delete("/api/users/unfollow/bob", headers=auth_headers("alice"))

        assert response.status_code == 400
        assert response.json()["error"] == "NOT_FOLLOWING"

    def test_follow_self(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")

        response = client.post("/api/users/follow/alice", headers=auth_headers("alice"))

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot follow yourself"

    def test_follow_unknown(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")

        response = client.post("/api/users/follow/ghost", headers=auth_headers("alice"))

        assert response.status_code == 404
        assert response.json()["message"] == "User to follow not found"

    def test_follow_requires_token(self, client, fake_db):
        response = client.post("/api/users/follow/bob")

        assert response.status_code == 401

    def test_follower_listings(self, client, fake_db, auth_headers):
        fake_db.add_user("alice")
        fake_db.add_user("bob")
        client.post("/api/users/follow/bob", headers=auth_headers("alice"))

        followers = client.get("/api/users/bob/followers").json()
        following = client.get("/api/users/alice/following").json()

        assert [u["uid"] for u in followers["data"]] == ["alice"]
        assert [u["uid"] for u in following["data"]] == ["bob"]


class TestHealth:

    def test_health(self, client):
        body = client.get("/api/health").json()

        assert body["status"] == "healthy"

    def test_ready(self, client):
        assert client.get("/api/health/ready").json()["database"] == "healthy"
