"""
HTTP tests for registration, sign-in/out, and the profile page.
"""
from app.models import User, Profile
from conftest import PASSWORD, make_user, make_post, register


class TestAuth:

    def test_register_creates_user_and_profile(self, app, client):
        resp = register(client, "hank")
        assert resp.status_code == 302
        with app.app_context():
            user = User.query.filter_by(email="hank@example.com").one()
            assert user.profile.username == "hank"
            assert user.check_password(PASSWORD)

    def test_register_duplicate_username(self, app, client):
        with app.app_context():
            make_user("ivy", email="ivy@example.com")
        resp = client.post("/auth/register", data={
            "username": "ivy", "email": "other@example.com",
            "password": PASSWORD, "confirm_password": PASSWORD,
        })
        assert resp.status_code == 200
        assert b"Username already taken." in resp.data
        with app.app_context():
            assert User.query.count() == 1

    def test_register_password_mismatch(self, client):
        resp = client.post("/auth/register", data={
            "username": "jay", "email": "jay@example.com",
            "password": PASSWORD, "confirm_password": "nope-nope-nope",
        })
        assert resp.status_code == 200
        assert b"Passwords must match." in resp.data

    def test_login_and_logout(self, app, client):
        with app.app_context():
            make_user("kim")
        resp = client.post("/auth/login", data={"email": "kim@example.com", "password": PASSWORD})
        assert resp.status_code == 302
        assert client.get("/profile").status_code == 200

        resp = client.post("/auth/logout")
        assert resp.status_code == 302
        assert client.get("/profile").status_code == 302

    def test_login_wrong_password(self, app, client):
        with app.app_context():
            make_user("lee")
        resp = client.post("/auth/login", data={"email": "lee@example.com", "password": "wrong-password"})
        assert resp.status_code == 200
        assert b"Invalid email or password." in resp.data

    def test_login_honours_local_next_only(self, app, client):
        with app.app_context():
            make_user("max")
        creds = {"email": "max@example.com", "password": PASSWORD}
        resp = client.post("/auth/login?next=https://evil.example/", data=creds)
        assert resp.headers["Location"].endswith("/")
        assert "evil" not in resp.headers["Location"]


class TestProfilePage:

    def test_requires_login(self, client):
        resp = client.get("/profile")
        assert resp.status_code == 302
        assert "/auth/login" in resp.headers["Location"]

    def test_tabs(self, app, auth_client):
        (pol,) = [t["id"] for t in auth_client.get("/api/topics").get_json() if t["name"] == "Politics"]
        created = auth_client.post("/api/posts", json={
            "title": "Four-day week", "content": "Now.", "topic_ids": [pol],
        }).get_json()["post"]
        auth_client.post(f"/api/feed/{created['id']}/comment", json={"content": "bump"})
        auth_client.post(f"/api/feed/{created['id']}/react", json={"reaction_type": "support"})

        posts = auth_client.get("/profile")
        assert posts.status_code == 200
        assert b"Four-day week" in posts.data
        assert b"Posts (1)" in posts.data
        assert b"Comments (1)" in posts.data
        assert b"Reactions (1)" in posts.data

        comments = auth_client.get("/profile?tab=comments")
        assert b"Your comment: bump" in comments.data

        reactions = auth_client.get("/profile?tab=reactions")
        assert b"Support" in reactions.data

    def test_unknown_tab_falls_back_to_posts(self, auth_client):
        resp = auth_client.get("/profile?tab=secrets")
        assert resp.status_code == 200
        assert b"No posts yet" in resp.data


class TestUsernameChange:

    def test_api_rename(self, app, auth_client):
        resp = auth_client.post("/api/profile/username", json={"username": "carol.b"})
        assert resp.status_code == 200
        assert resp.get_json()["username"] == "carol.b"

    def test_api_taken(self, app, auth_client):
        with app.app_context():
            make_user("nina")
        resp = auth_client.post("/api/profile/username", json={"username": "nina"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Username already taken."
        with app.app_context():
            assert Profile.query.filter_by(username="carol").count() == 1

    def test_api_empty(self, auth_client):
        resp = auth_client.post("/api/profile/username", json={"username": "  "})
        assert resp.status_code == 400

    def test_api_non_text_is_400(self, app, auth_client):
        resp = auth_client.post("/api/profile/username", json={"username": ["x"]})
        assert resp.status_code == 400
        assert "error" in resp.get_json()
        with app.app_context():
            assert Profile.query.filter_by(username="carol").count() == 1

    def test_form_taken_flashes(self, app, auth_client):
        with app.app_context():
            make_user("omar")
        resp = auth_client.post("/profile/username", data={"username": "omar"}, follow_redirects=True)
        assert resp.status_code == 200
        assert b"Username already taken." in resp.data

    def test_form_rename(self, app, auth_client):
        resp = auth_client.post("/profile/username", data={"username": "carol_c"}, follow_redirects=True)
        assert b"Username updated." in resp.data
        with app.app_context():
            assert Profile.query.filter_by(username="carol_c").count() == 1
            assert Profile.query.filter_by(username="carol").count() == 0

    def test_requires_login(self, client):
        assert client.post("/api/profile/username", json={"username": "x_y_z"}).status_code == 401


class TestPostAuthorDisplay:

    def test_feed_shows_profile_username(self, app, client):
        with app.app_context():
            user = make_user("pat")
            make_post(user, title="Remote work wins")
        resp = client.get("/")
        assert b"pat" in resp.data
