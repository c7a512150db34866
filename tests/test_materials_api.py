import pytest

from conftest import OTHER_USER_ID, USER_ID


@pytest.fixture
def group(client, auth_headers, other_headers):
    group = client.post("/groups/", json={"name": "Physics Club"}, headers=auth_headers).json()
    client.post("/groups/join", json={"invite_code": group["invite_code"]}, headers=other_headers)
    return group


def add_material(client, headers, **fields):
    payload = {"title": " Lecture notes ", "type": "pdf", "url": "https://example.com/notes.pdf", **fields}
    response = client.post("/materials/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_add_and_list_own_materials(client, auth_headers, other_headers):
    material = add_material(client, auth_headers)

    assert material["title"] == "Lecture notes"
    assert material["user_id"] == USER_ID
    assert material["useful_count"] == 0
    assert [m["id"] for m in client.get("/materials/", headers=auth_headers).json()] == [material["id"]]
    assert client.get("/materials/", headers=other_headers).json() == []


@pytest.mark.parametrize("fields", [
    {"title": "   "},
    {"title": "x" * 201},
    {"description": "x" * 1001},
    {"type": "video"},
    {"url": "not a url"},
    {"url": "https://example.com/" + "x" * 2000},
])
def test_material_validation(client, auth_headers, fields):
    payload = {"title": "Notes", "type": "link", "url": "https://example.com", **fields}
    assert client.post("/materials/", json=payload, headers=auth_headers).status_code == 422


def test_material_for_someone_elses_subject_is_rejected(client, auth_headers, other_headers):
    subject = client.post("/study/subjects", json={"name": "Physics", "color": "#123456"}, headers=auth_headers).json()

    response = client.post("/materials/", json={
        "title": "Notes", "type": "link", "url": "https://example.com", "subject_id": subject["id"],
    }, headers=other_headers)

    assert response.status_code == 404


def test_sharing_to_a_group_makes_it_visible_to_members(group, client, auth_headers, other_headers):
    material = add_material(client, auth_headers)

    shared = client.put(f"/materials/{material['id']}/group", json={"group_id": group["id"]}, headers=auth_headers)

    assert shared.status_code == 200
    assert shared.json()["group_id"] == group["id"]
    visible = client.get("/materials/", headers=other_headers).json()
    assert [m["id"] for m in visible] == [material["id"]]
    by_group = client.get("/materials/", params={"group_id": group["id"]}, headers=other_headers).json()
    assert [m["id"] for m in by_group] == [material["id"]]


def test_only_the_owner_can_share_or_delete(group, client, auth_headers, other_headers, fake_db):
    material = add_material(client, auth_headers, group_id=group["id"])

    response = client.put(f"/materials/{material['id']}/group", json={"group_id": group["id"]}, headers=other_headers)
    assert response.status_code == 403
    assert client.delete(f"/materials/{material['id']}", headers=other_headers).status_code == 403

    assert client.delete(f"/materials/{material['id']}", headers=auth_headers).status_code == 204
    assert fake_db.rows("study_materials") == []


def test_sharing_requires_membership_of_the_group(client, auth_headers, other_headers):
    foreign = client.post("/groups/", json={"name": "Not yours"}, headers=other_headers).json()
    material = add_material(client, auth_headers)

    response = client.put(f"/materials/{material['id']}/group", json={"group_id": foreign["id"]}, headers=auth_headers)

    assert response.status_code == 403
    assert client.post("/materials/", json={
        "title": "Notes", "type": "link", "url": "https://example.com", "group_id": foreign["id"],
    }, headers=auth_headers).status_code == 403


def test_mark_useful_counts_up(group, client, auth_headers, other_headers):
    material = add_material(client, auth_headers, group_id=group["id"])

    client.post(f"/materials/{material['id']}/useful", headers=other_headers)
    response = client.post(f"/materials/{material['id']}/useful", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["useful_count"] == 2


def test_private_materials_are_hidden_from_others(client, auth_headers, other_headers):
    material = add_material(client, auth_headers)

    assert client.post(f"/materials/{material['id']}/useful", headers=other_headers).status_code == 404
    assert client.delete(f"/materials/{material['id']}", headers=other_headers).status_code == 404


def test_deleting_a_group_unshares_its_materials(group, client, auth_headers, fake_db):
    material = add_material(client, auth_headers, group_id=group["id"])

    client.delete(f"/groups/{group['id']}", headers=auth_headers)

    assert fake_db.rows("study_materials")[0]["group_id"] is None
    assert [m["id"] for m in client.get("/materials/", headers=auth_headers).json()] == [material["id"]]


def test_filter_by_subject(client, auth_headers):
    subject = client.post("/study/subjects", json={"name": "Physics", "color": "#123456"}, headers=auth_headers).json()
    tagged = add_material(client, auth_headers, subject_id=subject["id"])
    add_material(client, auth_headers, title="Other")

    listed = client.get("/materials/", params={"subject_id": subject["id"]}, headers=auth_headers).json()

    assert [m["id"] for m in listed] == [tagged["id"]]
    assert OTHER_USER_ID not in {m["user_id"] for m in listed}
