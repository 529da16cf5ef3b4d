import pytest
from sqlalchemy.exc import OperationalError

from universe.repositories import PostRepository
from universe.services.post_service import MAX_LIKES

from conftest import IMAGE_B64, PASSWORD, bearer, make_app


def post_payload(caption="Freshers week!"):
    return {"caption": caption, "image": IMAGE_B64, "imageMimeType": "image/png"}


@pytest.fixture
def created_post(client, student):
    r = client.post("/posts", json=post_payload(), headers=bearer(student["token"]))
    assert r.status_code == 201
    return r.get_json()["post"]


def test_student_creates_post(client, student):
    r = client.post("/posts", json=post_payload(), headers=bearer(student["token"]))
    assert r.status_code == 201
    body = r.get_json()
    assert body["message"] == "Post created successfully"
    post = body["post"]
    assert post["likes"] == 0
    assert post["studentId"] == student["user"]["id"]
    assert post["organisationId"] is None
    assert post["authorId"] == student["user"]["id"]
    assert post["image"] == IMAGE_B64
    assert post["User"]["name"] == "Alice"


def test_organisation_cannot_create_post_by_default(client, organiser):
    r = client.post("/posts", json=post_payload(), headers=bearer(organiser["token"]))
    assert r.status_code == 403
    assert r.get_json() == {"error": "Insufficient permissions"}


def test_organisation_post_when_enabled():
    app = make_app(POST_CREATION_ROLES=["STUDENT", "ORGANISATION"])
    try:
        client = app.test_client()
        r = client.post("/auth/register", json={
            "email": "events@music-soc.org", "password": PASSWORD, "role": "ORGANISATION",
        })
        org = r.get_json()

        r = client.post("/posts", json=post_payload(), headers=bearer(org["token"]))
        assert r.status_code == 201
        post = r.get_json()["post"]
        assert post["organisationId"] == org["user"]["id"]
        assert post["studentId"] is None
        assert post["User"]["role"] == "ORGANISATION"

        r = client.delete(f"/posts/{post['id']}", headers=bearer(org["token"]))
        assert r.status_code == 200
    finally:
        app.extensions["db_engine"].dispose()


@pytest.mark.parametrize("missing", ["caption", "image", "imageMimeType"])
def test_create_missing_fields(client, student, missing):
    payload = post_payload()
    del payload[missing]
    r = client.post("/posts", json=payload, headers=bearer(student["token"]))
    assert r.status_code == 400
    assert r.get_json() == {"error": "Missing required fields: caption, image, imageMimeType"}


def test_every_post_route_requires_authentication(client, created_post):
    for method, url in (
        ("get", "/posts"),
        ("get", f"/posts/{created_post['id']}"),
        ("get", "/posts/user/anyone"),
        ("post", "/posts"),
        ("delete", f"/posts/{created_post['id']}"),
        ("post", f"/posts/{created_post['id']}/like"),
    ):
        r = getattr(client, method)(url)
        assert r.status_code == 401, url


def test_list_all_posts(client, student):
    headers = bearer(student["token"])
    for caption in ("first", "second", "third"):
        client.post("/posts", json=post_payload(caption), headers=headers)

    r = client.get("/posts", headers=headers)
    assert r.status_code == 200
    captions = [p["caption"] for p in r.get_json()["posts"]]
    assert sorted(captions) == ["first", "second", "third"]
    assert len(captions) == 3


def test_list_user_posts(client, register, student):
    bob = register("bob@uni.ac.uk", name="Bob")
    client.post("/posts", json=post_payload("alice"), headers=bearer(student["token"]))
    client.post("/posts", json=post_payload("bob"), headers=bearer(bob["token"]))

    r = client.get(f"/posts/user/{bob['user']['id']}", headers=bearer(student["token"]))
    assert r.status_code == 200
    assert [p["caption"] for p in r.get_json()["posts"]] == ["bob"]


def test_get_post(client, student, created_post):
    r = client.get(f"/posts/{created_post['id']}", headers=bearer(student["token"]))
    assert r.status_code == 200
    assert r.get_json()["post"]["id"] == created_post["id"]

    r = client.get("/posts/missing", headers=bearer(student["token"]))
    assert r.status_code == 404
    assert r.get_json() == {"error": "Post not found"}


def test_only_owner_can_delete(client, register, student, created_post):
    bob = register("bob@uni.ac.uk")
    url = f"/posts/{created_post['id']}"

    r = client.delete(url, headers=bearer(bob["token"]))
    assert r.status_code == 403
    assert r.get_json() == {"error": "Not authorized to delete this post"}

    r = client.delete(url, headers=bearer(student["token"]))
    assert r.status_code == 200
    assert r.get_json() == {"message": "Post deleted successfully"}

    assert client.delete(url, headers=bearer(student["token"])).status_code == 404


def test_like_adjusts_count(client, student, created_post):
    url = f"/posts/{created_post['id']}/like"
    headers = bearer(student["token"])

    r = client.post(url, json={"delta": 1}, headers=headers)
    assert r.status_code == 200
    assert r.get_json() == {"post": {"id": created_post["id"], "likes": 1}}

    r = client.post(url, json={"delta": 2}, headers=headers)
    assert r.get_json()["post"]["likes"] == 3


def test_unlike_is_clamped_at_zero(client, student, created_post):
    url = f"/posts/{created_post['id']}/like"
    headers = bearer(student["token"])

    r = client.post(url, json={"delta": -1}, headers=headers)
    assert r.status_code == 200
    assert r.get_json()["post"]["likes"] == 0

    client.post(url, json={"delta": 1}, headers=headers)
    r = client.post(url, json={"delta": -5}, headers=headers)
    assert r.get_json()["post"]["likes"] == 0

    r = client.get(f"/posts/{created_post['id']}", headers=headers)
    assert r.get_json()["post"]["likes"] == 0


def test_huge_delta_is_clamped_to_column_range(client, student, created_post):
    url = f"/posts/{created_post['id']}/like"
    headers = bearer(student["token"])

    r = client.post(url, json={"delta": 2**70}, headers=headers)
    assert r.status_code == 200
    assert r.get_json()["post"]["likes"] == MAX_LIKES

    r = client.post(url, json={"delta": 1}, headers=headers)
    assert r.get_json()["post"]["likes"] == MAX_LIKES

    r = client.post(url, json={"delta": -(2**70)}, headers=headers)
    assert r.status_code == 200
    assert r.get_json()["post"]["likes"] == 0


@pytest.mark.parametrize("body", [{}, {"delta": None}, {"delta": "1"}, {"delta": 1.5}, {"delta": True}])
def test_like_rejects_bad_delta(client, student, created_post, body):
    r = client.post(f"/posts/{created_post['id']}/like", json=body, headers=bearer(student["token"]))
    assert r.status_code == 400
    assert r.get_json() == {"error": "Missing postId or delta"}


def test_like_missing_post(client, student):
    r = client.post("/posts/missing/like", json={"delta": 1}, headers=bearer(student["token"]))
    assert r.status_code == 404


def test_database_failure_returns_generic_error(client, student, monkeypatch):
    def broken(self):
        raise OperationalError("SELECT * FROM posts", {}, Exception("disk I/O error"))

    monkeypatch.setattr(PostRepository, "list_newest_first", broken)

    r = client.get("/posts", headers=bearer(student["token"]))
    assert r.status_code == 500
    assert r.get_json() == {"error": "Failed to fetch posts"}
