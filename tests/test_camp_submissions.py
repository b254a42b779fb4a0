import pytest


@pytest.fixture
async def submission(client, auth_headers):
    r = await client.post("/api/camp-submissions", headers=auth_headers, json={
        "name": "Kiran Das",
        "dob": "2012-08-20",
        "email": "KIRAN@SchoolMail.com",
        "phone": "",
        "institution": "St. Mary's High School",
        "institutionType": "School",
    })
    assert r.status_code == 201, r.text
    return r.json()


class TestCampSubmissions:
    async def test_create(self, submission):
        assert submission["email"] == "kiran@schoolmail.com"
        assert submission["phone"] is None
        assert submission["institution_type"] == "School"

    async def test_invalid_institution_type(self, client, auth_headers):
        r = await client.post("/api/camp-submissions", headers=auth_headers,
                              json={"name": "X", "institutionType": "Factory"})
        assert r.status_code == 422

    async def test_list_filters(self, client, auth_headers, submission):
        await client.post("/api/camp-submissions", headers=auth_headers,
                          json={"name": "Nurse Joy", "institutionType": "Hospital"})

        r = await client.get("/api/camp-submissions", params={"institution_type": "School"}, headers=auth_headers)
        assert [s["id"] for s in r.json()] == [submission["id"]]
        r = await client.get("/api/camp-submissions", params={"q": "mary"}, headers=auth_headers)
        assert len(r.json()) == 1
        r = await client.get("/api/camp-submissions", headers=auth_headers)
        assert len(r.json()) == 2

    async def test_update_and_delete(self, client, auth_headers, submission):
        sid = submission["id"]
        r = await client.patch(f"/api/camp-submissions/{sid}", headers=auth_headers, json={"comments": "Needs follow-up"})
        assert r.json()["comments"] == "Needs follow-up"

        r = await client.patch(f"/api/camp-submissions/{sid}", headers=auth_headers, json={})
        assert r.status_code == 400

        r = await client.delete(f"/api/camp-submissions/{sid}", headers=auth_headers)
        assert r.json() == {"message": "Camp submission deleted successfully"}
        r = await client.get(f"/api/camp-submissions/{sid}", headers=auth_headers)
        assert r.status_code == 404

    async def test_other_user_gets_404(self, client, other_headers, submission):
        r = await client.get(f"/api/camp-submissions/{submission['id']}", headers=other_headers)
        assert r.status_code == 404
