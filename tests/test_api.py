RALLY_BODY = {
    "name": "Great Lakes 1000",
    "description": "A thousand miles around the lakes",
    "start_date": "2024-06-01",
    "end_date": "2024-06-03",
    "location_city": "Buffalo",
    "location_state": "NY",
    "location_country": "United States",
    "latitude": 42.8864,
    "longitude": -78.8784,
    "is_public": True,
}


def _create_rally(client, **overrides):
    response = client.post("/rally", json=dict(RALLY_BODY, **overrides))
    assert response.status_code == 200, response.text
    return response.json()


def test_health_and_config(client):
    assert client.get("/health").json() == {"ok": True}
    config = client.get("/config").json()
    assert config["default_search_radius_miles"] == 100
    assert config["default_page_size"] == 20


def test_login_sets_session(login):
    member_client = login("Rider@Example.com")

    me = member_client.get("/me").json()["member"]
    assert me["email"] == "rider@example.com"

    member_client.post("/members/logout")
    assert member_client.get("/me").json() == {"member": None}


def test_login_rejects_bad_email(client):
    response = client.post("/members/login", json={"email": "not-an-email"})
    assert response.status_code == 400


def test_writes_require_authentication(client):
    assert client.post("/rally", json=RALLY_BODY).status_code == 401
    assert client.get("/me/rallies").status_code == 401


def test_create_and_fetch_rally(login, client):
    organizer = login("organizer@example.com")

    created = _create_rally(organizer)

    assert created["my_role"] == "ORGANIZER"
    assert created["country_code"] == "US"
    public_view = client.get(f"/rally/{created['id']}").json()
    assert public_view["name"] == "Great Lakes 1000"
    assert public_view["my_role"] is None
    assert public_view["points_public"] is None
    roster = organizer.get("/me/rallies").json()
    assert [row["role"] for row in roster] == ["ORGANIZER"]


def test_create_rally_validation_error(login):
    organizer = login("organizer@example.com")

    response = organizer.post("/rally", json=dict(RALLY_BODY, name=""))

    assert response.status_code == 400
    assert response.json()["detail"] == "Name may not be null/empty"


def test_private_rally_is_hidden_from_strangers(login, client):
    organizer = login("organizer@example.com")
    stranger = login("stranger@example.com")
    rally = _create_rally(organizer, is_public=False)

    assert organizer.get(f"/rally/{rally['id']}").status_code == 200
    for caller in (stranger, client):
        response = caller.get(f"/rally/{rally['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Rally not found"
    assert client.get("/rally/9999").json()["detail"] == "Rally not found"
    assert stranger.get("/rallies").json()["total"] == 0
    assert organizer.get("/rallies").json()["total"] == 1

    joined = stranger.post(f"/rally/{rally['id']}/register")
    assert joined.status_code == 200
    assert joined.json()["role"] == "RIDER"
    assert stranger.get(f"/rally/{rally['id']}").status_code == 200
    assert stranger.get("/rallies").json()["total"] == 1


def test_search_endpoint(login, client):
    organizer = login("organizer@example.com")
    _create_rally(organizer)
    _create_rally(
        organizer,
        name="Big Apple Loop",
        latitude=40.7128,
        longitude=-74.0060,
        start_date="2024-08-01",
        end_date="2024-08-02",
    )

    near = client.get("/rallies", params={"near_lat": 43.1566, "near_lng": -77.6088}).json()
    by_date = client.get("/rallies", params={"from": "2024-07-15", "to": "2024-08-01"}).json()
    paged = client.get("/rallies", params={"size": 1, "page": 1}).json()

    assert [r["name"] for r in near["items"]] == ["Great Lakes 1000"]
    assert [r["name"] for r in by_date["items"]] == ["Big Apple Loop"]
    assert paged["total"] == 2 and paged["total_pages"] == 2
    assert [r["name"] for r in paged["items"]] == ["Big Apple Loop"]
    assert client.get("/rallies", params={"from": "2024-09-01", "to": "2024-08-01"}).status_code == 400


def test_registration_promotion_and_scoring_flow(login):
    organizer = login("organizer@example.com")
    rider = login("rider@example.com")
    aide = login("aide@example.com")
    rally = _create_rally(organizer)
    rally_id = rally["id"]

    rider_row = rider.post(f"/rally/{rally_id}/register").json()
    aide_row = aide.post(f"/rally/{rally_id}/register").json()
    assert rider.post(f"/rally/{rally_id}/register").status_code == 400

    assert rider.put(
        f"/rally/{rally_id}/promote",
        json={"target_member_id": aide_row["member_id"], "new_role": "AIDE"},
    ).status_code == 404
    promoted = organizer.put(
        f"/rally/{rally_id}/promote",
        json={"target_member_id": aide_row["member_id"], "new_role": "AIDE"},
    )
    assert promoted.json()["role"] == "AIDE"

    bonus_point = organizer.post(
        f"/rally/{rally_id}/bonuspoint", json={"code": "NF", "name": "Niagara Falls", "points": 250}
    ).json()

    odometer = rider.put(
        f"/rally/{rally_id}/odometer/start",
        json={"rider_id": rider_row["member_id"], "odometer": 10000},
    )
    assert odometer.json()["odometer_in"] == 10000

    claim = rider.post(
        f"/rally/{rally_id}/earned-bonus-point",
        json={"bonus_point_id": bonus_point["id"], "odometer": 10042, "earned_at": "2024-06-01T09:15:00"},
    ).json()
    assert claim["confirmed"] is False

    denied = rider.put(f"/earned-bonus-point/{claim['id']}/confirm", json={"confirmed": True})
    assert denied.status_code == 400
    confirmed = aide.put(f"/earned-bonus-point/{claim['id']}/confirm", json={"confirmed": True})
    assert confirmed.json()["confirmed"] is True

    listed = rider.get(f"/rally-participant/{rider_row['id']}/earned-bonus-points").json()
    assert [(e["id"], e["confirmed"]) for e in listed] == [(claim["id"], True)]


def test_catalog_endpoints(login, client):
    organizer = login("organizer@example.com")
    rally = _create_rally(organizer, points_public=True)
    rally_id = rally["id"]
    first = organizer.post(f"/rally/{rally_id}/bonuspoint", json={"code": "A", "points": 10}).json()
    second = organizer.post(f"/rally/{rally_id}/bonuspoint", json={"code": "B", "points": 20}).json()

    combination = organizer.post(
        f"/rally/{rally_id}/combination",
        json={
            "code": "AB",
            "points": 100,
            "combination_points": [{"bonus_point_id": first["id"]}, {"bonus_point_id": second["id"]}],
        },
    ).json()

    assert len(combination["combination_points"]) == 2
    assert [bp["code"] for bp in client.get(f"/rally/{rally_id}/bonuspoints").json()] == ["A", "B"]
    assert client.get(f"/combination/{combination['id']}/bonuspoints").status_code == 200
    assert organizer.delete(f"/bonuspoint/{first['id']}").status_code == 400
    assert organizer.delete(f"/combination/{combination['id']}").status_code == 200
    assert organizer.delete(f"/bonuspoint/{first['id']}").json()["deleted_bonus_point"] == first["id"]


def test_promote_rejects_non_integer_target(login):
    organizer = login("organizer@example.com")
    rider = login("rider@example.com")
    rally_id = _create_rally(organizer)["id"]
    rider_row = rider.post(f"/rally/{rally_id}/register").json()

    for target in (True, "abc", 1.5):
        response = organizer.put(
            f"/rally/{rally_id}/promote", json={"target_member_id": target, "new_role": "AIDE"}
        )
        assert response.status_code == 400, target
        assert response.json()["detail"] == "target_member_id must be an integer"

    roster = {p["member_id"]: p["role"] for p in organizer.get(f"/rally/{rally_id}/participants").json()}
    assert roster[rider_row["member_id"]] == "RIDER"


def test_fractional_odometer_is_rejected(login):
    organizer = login("organizer@example.com")
    rider = login("rider@example.com")
    rally_id = _create_rally(organizer)["id"]
    rider_row = rider.post(f"/rally/{rally_id}/register").json()

    response = rider.put(
        f"/rally/{rally_id}/odometer/start",
        json={"rider_id": rider_row["member_id"], "odometer": 12345.9},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "odometer must be an integer"
