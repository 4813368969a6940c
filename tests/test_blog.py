"""Tests for blog posts, slugs, visibility, comments and likes."""

import pytest

from autologic.domain.blog.service import slugify

from .conftest import auth_headers, make_user


def post_payload(**overrides):
    payload = {
        "title": "5 Signs Your Brakes Need Service",
        "titleAr": "خمس علامات على حاجة الفرامل للصيانة",
        "excerpt": "Know when to visit the shop",
        "excerptAr": "اعرف متى تزور الورشة",
        "content": "<p>Squealing is the first sign.</p>",
        "contentAr": "<p>الصرير هو العلامة الأولى.</p>",
        "category": "maintenance",
        "tags": ["Brakes", "Safety"],
        "status": "published",
    }
    payload.update(overrides)
    return payload


def create_post(client, admin, **overrides):
    resp = client.post("/api/blog", json=post_payload(**overrides), headers=auth_headers(admin))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["post"]


class TestSlugify:
    @pytest.mark.parametrize(
        "title,slug",
        [
            ("Hello World", "hello-world"),
            ("  --Oil & Filter!! ", "oil-filter"),
            ("2024 Guide", "2024-guide"),
            ("تغيير الزيت", ""),
        ],
    )
    def test_slugify(self, title, slug):
        assert slugify(title) == slug


class TestCreatePost:
    def test_slug_and_publication(self, client, admin):
        post = create_post(client, admin)
        assert post["slug"] == "5-signs-your-brakes-need-service"
        assert post["publishedAt"] is not None
        assert post["tags"] == ["brakes", "safety"]

    def test_duplicate_titles_get_suffix(self, client, admin):
        create_post(client, admin)
        second = create_post(client, admin)
        third = create_post(client, admin)
        assert second["slug"] == "5-signs-your-brakes-need-service-2"
        assert third["slug"] == "5-signs-your-brakes-need-service-3"

    def test_arabic_only_title_falls_back(self, client, admin):
        post = create_post(client, admin, title="تغيير الزيت")
        assert post["slug"] == "post"

    def test_draft_has_no_publication_date(self, client, admin):
        post = create_post(client, admin, status="draft")
        assert post["publishedAt"] is None

    def test_script_tags_are_stripped(self, client, admin):
        post = create_post(client, admin, content="<p>Hi</p><script>alert(1)</script>")
        assert "<script>" not in post["content"]
        assert "<p>Hi</p>" in post["content"]

    def test_customer_cannot_create(self, client, customer):
        resp = client.post("/api/blog", json=post_payload(), headers=auth_headers(customer))
        assert resp.status_code == 403


class TestVisibility:
    def test_public_list_hides_drafts(self, client, admin):
        create_post(client, admin)
        create_post(client, admin, title="Draft post", status="draft")
        assert client.get("/api/blog").json()["total"] == 1
        assert client.get("/api/blog", headers=auth_headers(admin)).json()["total"] == 2

    def test_draft_is_404_for_public(self, client, admin):
        draft = create_post(client, admin, status="draft")
        assert client.get(f"/api/blog/{draft['id']}").status_code == 404
        assert client.get(f"/api/blog/{draft['id']}", headers=auth_headers(admin)).status_code == 200

    def test_views_are_counted(self, client, admin):
        post = create_post(client, admin)
        client.get(f"/api/blog/{post['id']}")
        resp = client.get(f"/api/blog/slug/{post['slug']}")
        assert resp.json()["data"]["post"]["views"] == 2

    def test_filter_by_tag(self, client, admin):
        create_post(client, admin)
        create_post(client, admin, title="Tyres", tags=["tires"])
        body = client.get("/api/blog", params={"tag": "tires"}).json()
        assert [p["title"] for p in body["data"]["posts"]] == ["Tyres"]

    def test_filter_by_arabic_tag(self, client, admin):
        create_post(client, admin, tags=["فرامل"])
        create_post(client, admin, title="Other")
        assert client.get("/api/blog", params={"tag": "فرامل"}).json()["total"] == 1

    def test_invalid_category_filter(self, client):
        resp = client.get("/api/blog", params={"category": "gossip"})
        assert resp.status_code == 400

    def test_localized_title(self, client, admin):
        post = create_post(client, admin)
        data = client.get(f"/api/blog/{post['id']}", params={"lang": "ar"}).json()["data"]["post"]
        assert data["title"] == "خمس علامات على حاجة الفرامل للصيانة"

    def test_related_posts(self, client, admin):
        first = create_post(client, admin)
        create_post(client, admin, title="Same category")
        create_post(client, admin, title="Shared tag", category="news", tags=["safety"])
        create_post(client, admin, title="Unrelated", category="news", tags=["ev"])
        related = client.get(f"/api/blog/{first['id']}/related").json()["data"]["posts"]
        assert {p["title"] for p in related} == {"Same category", "Shared tag"}

    def test_categories_and_tags(self, client, admin):
        create_post(client, admin)
        create_post(client, admin, title="Draft", status="draft", category="news", tags=["ev"])
        categories = client.get("/api/blog/categories/list").json()["data"]["categories"]
        tags = client.get("/api/blog/tags/list").json()["data"]["tags"]
        assert {c["value"]: c["count"] for c in categories} == {"maintenance": 1, "news": 0}
        assert {t["value"]: t["count"] for t in tags} == {"brakes": 1, "ev": 0, "safety": 1}


class TestAdminEdits:
    def test_status_change_stamps_publication(self, client, admin):
        draft = create_post(client, admin, status="draft")
        resp = client.put(
            f"/api/blog/{draft['id']}/status", json={"status": "published"}, headers=auth_headers(admin)
        )
        assert resp.json()["data"]["post"]["publishedAt"] is not None

    def test_update_slug_stays_unique(self, client, admin):
        create_post(client, admin, title="Taken")
        other = create_post(client, admin, title="Other")
        resp = client.put(f"/api/blog/{other['id']}", json={"slug": "Taken"}, headers=auth_headers(admin))
        assert resp.json()["data"]["post"]["slug"] == "taken-2"

    def test_delete(self, client, admin, r2):
        post = create_post(client, admin)
        assert client.delete(f"/api/blog/{post['id']}", headers=auth_headers(admin)).status_code == 204
        assert client.get(f"/api/blog/{post['id']}", headers=auth_headers(admin)).status_code == 404


class TestReaderInteractions:
    def test_customer_comment_awaits_approval(self, client, admin, customer):
        post = create_post(client, admin)
        resp = client.post(
            f"/api/blog/{post['id']}/comments",
            json={"content": "Great tips", "contentAr": "نصائح رائعة"},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["post"]["comments"] == []

        admin_view = client.get(f"/api/blog/{post['id']}", headers=auth_headers(admin)).json()
        comments = admin_view["data"]["post"]["comments"]
        assert len(comments) == 1
        assert comments[0]["isApproved"] is False

    def test_admin_comment_is_approved(self, client, admin):
        post = create_post(client, admin)
        resp = client.post(
            f"/api/blog/{post['id']}/comments",
            json={"content": "Thanks all", "contentAr": "شكرا للجميع"},
            headers=auth_headers(admin),
        )
        assert resp.json()["data"]["post"]["comments"][0]["isApproved"] is True

    def test_no_comments_on_drafts(self, client, admin):
        draft = create_post(client, admin, status="draft")
        resp = client.post(
            f"/api/blog/{draft['id']}/comments",
            json={"content": "x", "contentAr": "س"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400

    def test_like_toggle(self, client, db, admin, customer):
        post = create_post(client, admin)
        other = make_user(db, "customer", email="fan@example.com")

        assert client.post(f"/api/blog/{post['id']}/like", headers=auth_headers(customer)).json()["data"] == {
            "likes": 1,
            "userLiked": True,
        }
        client.post(f"/api/blog/{post['id']}/like", headers=auth_headers(other))
        assert client.post(f"/api/blog/{post['id']}/like", headers=auth_headers(customer)).json()["data"] == {
            "likes": 1,
            "userLiked": False,
        }

    def test_like_requires_login(self, client, admin):
        post = create_post(client, admin)
        assert client.post(f"/api/blog/{post['id']}/like").status_code == 401
