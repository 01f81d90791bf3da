from conftest import create_student


def test_create_and_list_students(client, auth_headers, criteria_ids):
    created = create_student(client, auth_headers, "Dewi", "2001", {criteria_ids[0]: 88.5}, class_name="8B")
    assert created["name"] == "Dewi"
    assert created["class"] == "8B"
    assert created["scores"] == {str(criteria_ids[0]): 88.5}

    resp = client.get("/students", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["students"][0]["nis"] == "2001"
    assert data["students"][0]["scores"] == {str(criteria_ids[0]): 88.5}


def test_duplicate_nis_is_rejected(client, auth_headers):
    create_student(client, auth_headers, "Dewi", "2001", {})
    resp = client.post(
        "/students",
        json={"name": "Eka", "class": "8B", "nis": "2001"},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_scores_must_be_within_range(client, auth_headers, criteria_ids):
    resp = client.post(
        "/students",
        json={"name": "Eka", "class": "8B", "nis": "3001", "scores": {str(criteria_ids[0]): 101}},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_scores_for_unknown_criteria_are_rejected(client, auth_headers):
    resp = client.post(
        "/students",
        json={"name": "Eka", "class": "8B", "nis": "3001", "scores": {"9999": 50}},
        headers=auth_headers,
    )
    assert resp.status_code == 404


def test_update_student(client, auth_headers, criteria_ids):
    student = create_student(client, auth_headers, "Fajar", "4001", {criteria_ids[1]: 70})

    resp = client.put(
        f"/students/{student['id']}",
        json={"name": "Fajar Nugroho", "class": "9C"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Fajar Nugroho"
    assert data["class"] == "9C"
    assert data["nis"] == "4001"
    assert data["scores"] == {str(criteria_ids[1]): 70.0}


def test_replace_scores(client, auth_headers, criteria_ids):
    student = create_student(client, auth_headers, "Gita", "5001", {criteria_ids[0]: 60, criteria_ids[1]: 65})

    resp = client.put(
        f"/students/{student['id']}/scores",
        json={"scores": {str(criteria_ids[2]): 95}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["scores"] == {str(criteria_ids[2]): 95.0}

    listed = client.get("/students", headers=auth_headers).json()["students"][0]
    assert listed["scores"] == {str(criteria_ids[2]): 95.0}


def test_delete_student(client, auth_headers, criteria_ids):
    student = create_student(client, auth_headers, "Hadi", "6001", {criteria_ids[0]: 60})

    resp = client.delete(f"/students/{student['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert client.get("/students", headers=auth_headers).json()["total"] == 0

    assert client.delete(f"/students/{student['id']}", headers=auth_headers).status_code == 404
    assert client.put(
        f"/students/{student['id']}", json={"name": "X"}, headers=auth_headers
    ).status_code == 404
