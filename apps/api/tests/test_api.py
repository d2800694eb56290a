from marketplace.models.inquiry import Inquiry

BASE = "/api"


# ============================================================
# auth
# ============================================================

def test_login_and_verify(client, admin_user, admin_credentials):
    r = client.post(f"{BASE}/auth/login", json=admin_credentials)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["userId"] == admin_user.id
    assert "expiresAt" in body

    r = client.get(f"{BASE}/auth/verify", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200, r.text
    assert r.json() == {"valid": True, "user": {"id": admin_user.id, "username": "admin", "role": "admin"}}


def test_login_with_wrong_password(client, admin_user, admin_credentials):
    r = client.post(f"{BASE}/auth/login", json={**admin_credentials, "password": "nope"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_login_is_throttled_after_five_attempts(client, admin_user, admin_credentials):
    for _ in range(5):
        r = client.post(f"{BASE}/auth/login", json={**admin_credentials, "password": "nope"})
        assert r.status_code == 401

    # 6回目は正しいパスワードでも弾く
    r = client.post(f"{BASE}/auth/login", json=admin_credentials)
    assert r.status_code == 429
    assert r.json()["error"]["code"] == "TOO_MANY_REQUESTS"
    assert int(r.headers["retry-after"]) > 0


def test_security_headers_on_every_response(client):
    for r in (client.get("/health"), client.get(f"{BASE}/vehicles/999999")):
        assert r.headers["x-frame-options"] == "DENY"
        assert r.headers["x-content-type-options"] == "nosniff"
        assert r.headers["referrer-policy"] == "strict-origin-when-cross-origin"


def test_protected_endpoints_require_token(client, payload_factory):
    r = client.post(f"{BASE}/vehicles", json=payload_factory())
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"
    assert r.json()["error"]["code"] == "UNAUTHORIZED"

    r = client.get(f"{BASE}/inquiries", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


# ============================================================
# vehicles
# ============================================================

def test_vehicle_crud(client, auth_headers, payload_factory):
    r = client.post(f"{BASE}/vehicles", json=payload_factory(), headers=auth_headers)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["category"] == "flatbed"
    assert created["descriptionJa"] == "ワンオーナー車"
    assert created["dimensions"]["length"] == 4.69
    # 日時は UTC オフセット付きで返す
    assert created["createdAt"].endswith(("Z", "+00:00"))

    vehicle_id = created["id"]
    r = client.put(
        f"{BASE}/vehicles/{vehicle_id}",
        json=payload_factory(price=1_500_000, status="sold"),
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "sold"

    r = client.get(f"{BASE}/vehicles/{vehicle_id}")
    assert r.json()["price"] == 1_500_000

    r = client.delete(f"{BASE}/vehicles/{vehicle_id}", headers=auth_headers)
    assert r.status_code == 204

    r = client.get(f"{BASE}/vehicles/{vehicle_id}")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_vehicle_validation_error_body(client, auth_headers, payload_factory):
    r = client.post(f"{BASE}/vehicles", json=payload_factory(price=0, mileage=-1), headers=auth_headers)
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {e["field"] for e in error["details"]["errors"]} == {"price", "mileage"}


def test_request_type_errors_are_400(client, auth_headers, payload_factory):
    r = client.post(f"{BASE}/vehicles", json=payload_factory(year="twenty"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert r.json()["error"]["details"]["errors"][0]["field"] == "year"


def test_invalid_category_is_400(client, auth_headers, payload_factory):
    r = client.post(f"{BASE}/vehicles", json=payload_factory(category="ufo"), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_CATEGORY"


def test_list_and_search(client, make_vehicle):
    make_vehicle(category="crane", make="Hino", price=4_000_000)
    make_vehicle(category="dump", make="Isuzu", price=2_000_000)

    r = client.get(f"{BASE}/vehicles", params={"category": "crane", "pageSize": 10})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["totalCount"] == 1
    assert body["pageSize"] == 10
    assert body["items"][0]["make"] == "Hino"

    r = client.get(f"{BASE}/vehicles", params={"minPrice": 3_000_000})
    assert [v["make"] for v in r.json()["items"]] == ["Hino"]

    r = client.get(f"{BASE}/vehicles/search", params={"q": "isuzu"})
    assert [v["make"] for v in r.json()] == ["Isuzu"]

    assert client.get(f"{BASE}/vehicles/search").json() == []


def test_related_endpoint(client, make_vehicle):
    base = make_vehicle(category="crane", price=3_000_000)
    make_vehicle(category="crane", price=3_200_000)

    r = client.get(f"{BASE}/vehicles/{base.id}/related", params={"limit": 2})
    assert r.status_code == 200
    assert all(v["id"] != base.id for v in r.json())


# ============================================================
# images
# ============================================================

def test_image_upload_and_serve(client, auth_headers, make_vehicle, png_bytes, blob_store):
    vehicle = make_vehicle()

    r = client.post(
        f"{BASE}/vehicles/{vehicle.id}/images",
        files={"image": ("truck.png", png_bytes, "image/png")},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    image = r.json()
    assert image["thumbnailUrl"] == f"/api/images/thumb_{image['filename']}"

    r = client.get(image["url"])
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"
    assert client.get(image["thumbnailUrl"]).status_code == 200

    r = client.get(f"{BASE}/vehicles/{vehicle.id}")
    assert [i["id"] for i in r.json()["images"]] == [image["id"]]

    r = client.delete(f"{BASE}/images/{image['id']}", headers=auth_headers)
    assert r.status_code == 204
    assert client.get(image["url"]).status_code == 404
    assert blob_store.blobs == {}


def test_vehicle_delete_purges_blobs(client, auth_headers, make_vehicle, png_bytes, blob_store):
    vehicle = make_vehicle()
    client.post(
        f"{BASE}/vehicles/{vehicle.id}/images",
        files={"image": ("truck.png", png_bytes, "image/png")},
        headers=auth_headers,
    )
    assert len(blob_store.blobs) == 2

    assert client.delete(f"{BASE}/vehicles/{vehicle.id}", headers=auth_headers).status_code == 204
    assert blob_store.blobs == {}


# ============================================================
# inquiries
# ============================================================

def _inquiry_json(vehicle_id, **overrides):
    data = {
        "vehicleId": vehicle_id,
        "customerName": "Taro",
        "customerPhone": "090-0000-0000",
        "message": "Is this still available?",
        "inquiryType": "phone",
    }
    data.update(overrides)
    return data


def test_inquiry_submit_and_manage(client, auth_headers, make_vehicle):
    vehicle = make_vehicle()

    r = client.post(f"{BASE}/inquiries", json=_inquiry_json(vehicle.id))
    assert r.status_code == 201, r.text
    inquiry_id = r.json()["id"]

    r = client.put(f"{BASE}/inquiries/{inquiry_id}", json={"status": "contacted"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "contacted"

    r = client.get(f"{BASE}/inquiries", params={"status": "contacted"}, headers=auth_headers)
    assert r.json()["totalCount"] == 1

    r = client.put(f"{BASE}/inquiries/{inquiry_id}", json={"status": "bogus"}, headers=auth_headers)
    assert r.status_code == 400


def test_inquiry_honeypot(client, db_session, make_vehicle):
    vehicle = make_vehicle()

    r = client.post(f"{BASE}/inquiries", json=_inquiry_json(vehicle.id, website="http://spam.example"))
    assert r.status_code == 200
    assert r.json() == {"message": "Inquiry submitted"}

    assert db_session.query(Inquiry).count() == 0


def test_inquiry_for_unknown_vehicle(client):
    r = client.post(f"{BASE}/inquiries", json=_inquiry_json(31337))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_VEHICLE"


# ============================================================
# categories / pages / documents / health
# ============================================================

def test_categories_public_and_admin(client, auth_headers):
    r = client.get(f"{BASE}/categories")
    assert r.status_code == 200
    assert len(r.json()) == 14
    assert r.json()[0]["nameJa"] == "平ボディ"

    r = client.post(
        f"{BASE}/categories",
        json={"nameJa": "トレーラー", "nameEn": "Trailer", "slug": "trailer"},
        headers=auth_headers,
    )
    assert r.status_code == 201
    category_id = r.json()["id"]

    r = client.post(
        f"{BASE}/categories/{category_id}/icon",
        files={"icon": ("t.svg", b"<svg xmlns='http://www.w3.org/2000/svg'/>", "image/svg+xml")},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["icon"].startswith("<svg")

    r = client.post(
        f"{BASE}/categories/{category_id}/icon",
        files={"icon": ("t.png", b"png", "image/png")},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_FILE"

    assert client.delete(f"{BASE}/categories/{category_id}", headers=auth_headers).status_code == 204


def test_pages_public_vs_admin(client, auth_headers):
    for slug, published in (("about", True), ("secret", False)):
        r = client.post(
            f"{BASE}/pages",
            json={"slug": slug, "titleJa": slug, "contentJa": "本文", "isPublished": published},
            headers=auth_headers,
        )
        assert r.status_code == 201, r.text

    assert [p["slug"] for p in client.get(f"{BASE}/pages").json()] == ["about"]
    assert client.get(f"{BASE}/pages/slug/secret").status_code == 404
    assert len(client.get(f"{BASE}/pages/admin", headers=auth_headers).json()) == 2
    assert client.get(f"{BASE}/pages/admin").status_code == 401


def test_document_upload(client, auth_headers):
    pdf = b"%PDF-1.4\n%test\n"
    r = client.post(
        f"{BASE}/documents/upload",
        files={"document": ("shaken.pdf", pdf, "application/pdf")},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["filename"].startswith("document_")
    assert body["url"] == f"/api/documents/{body['filename']}"

    r = client.get(body["url"])
    assert r.status_code == 200
    assert r.content == pdf

    r = client.post(
        f"{BASE}/documents/upload",
        files={"document": ("a.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )
    assert r.status_code == 400

    assert client.delete(body["url"], headers=auth_headers).status_code == 204
    assert client.get(body["url"]).status_code == 404


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
