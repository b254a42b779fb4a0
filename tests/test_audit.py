"""Change capture and the audit read endpoints."""


class TestCapture:
    async def test_intake_writes_insert_events(self, client, auth_headers, patient):
        r = await client.get("/api/audit/recent", params={"action": "insert"}, headers=auth_headers)
        assert r.status_code == 200
        page = r.json()
        tables = sorted(e["table_name"] for e in page["items"])
        assert tables == ["medical_histories", "patients", "visits"]
        assert page["total"] == 3
        actor = patient["patient"]["created_by"]
        assert all(e["actor_id"] == actor for e in page["items"])

    async def test_update_records_changed_fields(self, client, auth_headers, patient):
        pid = patient["patient"]["id"]
        await client.put(f"/api/patients/{pid}", json={"city": "Mumbai"}, headers=auth_headers)

        r = await client.get(f"/api/audit/patients/{pid}", headers=auth_headers)
        body = r.json()
        assert body["patientId"] == pid
        assert [e["action"] for e in body["items"]] == ["UPDATE", "INSERT"]
        update = body["items"][0]
        assert update["changed_fields"] == ["city"]
        assert update["old_data"]["city"] == "Pune"
        assert update["new_data"]["city"] == "Mumbai"
        assert update["new_data"]["updated_by"] == patient["patient"]["created_by"]

    async def test_delete_records_every_row(self, client, auth_headers, patient):
        pid = patient["patient"]["id"]
        await client.delete(f"/api/patients/{pid}", headers=auth_headers)
        r = await client.get("/api/audit/recent", params={"action": "DELETE"}, headers=auth_headers)
        deleted = sorted(e["table_name"] for e in r.json()["items"])
        assert deleted == ["medical_histories", "patients", "visits"]

    async def test_appointments_are_audited(self, client, auth_headers):
        r = await client.post("/api/appointments", headers=auth_headers, json={
            "patient_name": "Walk In", "phone": "9876543210", "date": "2030-01-02", "time_slot": "10:00",
        })
        appt_id = r.json()["id"]
        r = await client.get(f"/api/audit/public/appointments/{appt_id}", headers=auth_headers)
        body = r.json()
        assert body["schema"] == "public"
        assert body["table"] == "appointments"
        assert body["rowId"] == appt_id
        assert body["items"][0]["new_data"]["status"] == "Pending"


class TestReading:
    async def test_provenance(self, client, auth_headers, patient):
        pid = patient["patient"]["id"]
        await client.put(f"/api/patients/{pid}", json={"occupation": "Engineer"}, headers=auth_headers)

        r = await client.get(f"/api/audit/patients/{pid}/provenance", headers=auth_headers)
        assert r.status_code == 200
        body = r.json()
        owner = patient["patient"]["created_by"]
        assert body["patientId"] == pid
        assert body["row"]["id"] == pid
        assert body["createdByFromRow"] == owner
        assert body["updatedByFromRow"] == owner
        assert body["firstInsert"]["action"] == "INSERT"
        assert body["lastChange"]["action"] == "UPDATE"

    async def test_provenance_hidden_from_others(self, client, patient, other_headers):
        r = await client.get(f"/api/audit/patients/{patient['patient']['id']}/provenance", headers=other_headers)
        assert r.status_code == 404

    async def test_actor_history(self, client, auth_headers, patient):
        actor = patient["patient"]["created_by"]
        r = await client.get(f"/api/audit/actors/{actor}", headers=auth_headers)
        body = r.json()
        assert body["actorId"] == actor
        assert body["total"] == 3
        assert body["limit"] == 50

    async def test_default_limits(self, client, auth_headers, patient):
        pid = patient["patient"]["id"]
        r = await client.get("/api/audit/recent", headers=auth_headers)
        assert r.json()["limit"] == 50
        r = await client.get(f"/api/audit/patients/{pid}", headers=auth_headers)
        assert r.json()["limit"] == 100
        r = await client.get(f"/api/audit/public/patients/{pid}", headers=auth_headers)
        assert r.json()["limit"] == 100

    async def test_other_users_see_nothing(self, client, patient, other_headers):
        r = await client.get("/api/audit/recent", headers=other_headers)
        assert r.json()["total"] == 0
        assert r.json()["items"] == []

    async def test_admin_sees_all(self, client, patient, admin_headers):
        r = await client.get("/api/audit/recent", headers=admin_headers)
        assert r.json()["total"] == 3

    async def test_limit_and_offset_clamped(self, client, auth_headers, patient):
        r = await client.get("/api/audit/recent", params={"limit": 1000, "offset": -4}, headers=auth_headers)
        body = r.json()
        assert body["limit"] == 200
        assert body["offset"] == 0
        assert len(body["items"]) == 3

        r = await client.get("/api/audit/recent", params={"limit": 0}, headers=auth_headers)
        assert r.json()["limit"] == 1
        assert len(r.json()["items"]) == 1

    async def test_unknown_action_is_ignored(self, client, auth_headers, patient):
        r = await client.get("/api/audit/recent", params={"action": "TRUNCATE", "table": "visits"},
                             headers=auth_headers)
        assert r.json()["total"] == 1
