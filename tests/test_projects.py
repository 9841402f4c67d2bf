"""Tests for the cookie-authenticated project routes."""

import uuid

import pytest

pytestmark = pytest.mark.anyio

UNAUTHORIZED = {"error": "Unauthorized"}


class TestProjectCrud:
    async def test_anonymous_callers_are_rejected(self, make_client):
        client = make_client()
        assert (await client.get("/api/session/project/list")).status_code == 401
        res = await client.post("/api/session/project/create", json={"name": "P"})
        assert res.status_code == 401
        assert res.json() == UNAUTHORIZED

    async def test_create_list_get_update_delete(self, alice):
        project = await alice.create_project("P1", description="first")
        assert project["name"] == "P1"
        assert project["description"] == "first"

        listed = (await alice.client.get("/api/session/project/list")).json()
        assert [p["id"] for p in listed] == [project["id"]]

        url = f"/api/session/project/{project['id']}"
        assert (await alice.client.get(url)).json()["name"] == "P1"

        res = await alice.client.patch(url, json={"name": "Renamed"})
        assert res.status_code == 200
        assert res.json()["name"] == "Renamed"
        assert res.json()["description"] == "first"

        res = await alice.client.delete(url)
        assert res.json() == {"status": "ok"}
        assert (await alice.client.get(url)).status_code == 401
        assert (await alice.client.get("/api/session/project/list")).json() == []

    async def test_list_is_newest_first(self, alice):
        first = await alice.create_project("first")
        second = await alice.create_project("second")
        listed = (await alice.client.get("/api/session/project/list")).json()
        assert [p["id"] for p in listed] == [second["id"], first["id"]]

    async def test_create_requires_name(self, alice):
        res = await alice.client.post("/api/session/project/create", json={})
        assert res.status_code == 400

    async def test_patch_ignores_null_name(self, alice):
        project = await alice.create_project("P1")
        res = await alice.client.patch(f"/api/session/project/{project['id']}", json={"name": None})
        assert res.status_code == 200
        assert res.json()["name"] == "P1"


class TestProjectAccessGuard:
    async def test_non_member_gets_401_not_404(self, alice, bob):
        project = await alice.create_project("Private")
        base = f"/api/session/project/{project['id']}"

        for method, path in [
            ("GET", base),
            ("PATCH", base),
            ("DELETE", base),
            ("GET", base + "/conditions"),
            ("GET", base + "/features"),
            ("GET", base + "/keys"),
            ("GET", base + "/project-requirements"),
            ("GET", base + "/discussions"),
        ]:
            kwargs = {"json": {"name": "x"}} if method == "PATCH" else {}
            res = await bob.client.request(method, path, **kwargs)
            assert res.status_code == 401, (method, path)
            assert res.json() == UNAUTHORIZED

        res = await bob.client.post(base + "/keys", json={"name": "stolen"})
        assert res.status_code == 401

    async def test_missing_project_is_indistinguishable_from_foreign_one(self, alice, bob):
        project = await alice.create_project("Private")
        foreign = await bob.client.get(f"/api/session/project/{project['id']}")
        missing = await bob.client.get(f"/api/session/project/{uuid.uuid4()}")
        assert foreign.status_code == missing.status_code == 401
        assert foreign.json() == missing.json()

    async def test_non_member_cannot_delete(self, alice, bob):
        project = await alice.create_project("Private")
        await bob.client.delete(f"/api/session/project/{project['id']}")
        assert (await alice.client.get(f"/api/session/project/{project['id']}")).status_code == 200


class TestKeys:
    async def test_secret_is_disclosed_exactly_once(self, alice):
        project = await alice.create_project()
        key = await alice.create_key(project["id"], "K1")

        assert key["token"] == key["secret"]
        assert key["secret"].startswith("sk_")
        assert len(key["secret"]) == 3 + 48
        assert key["projectId"] == project["id"]

        res = await alice.client.get(f"/api/session/project/{project['id']}/keys")
        assert res.status_code == 200
        assert key["secret"] not in res.text
        assert set(res.json()[0]) == {"id", "name", "projectId", "createdAt"}

    async def test_delete_key_revokes_cli_access(self, alice, make_client):
        project = await alice.create_project()
        key = await alice.create_key(project["id"])
        cli = make_client(headers={"x-cli-secret": key["secret"]})
        check = f"/api/cli/{project['id']}/{key['id']}/check"
        assert (await cli.get(check)).status_code == 200

        res = await alice.client.delete(f"/api/session/project/{project['id']}/keys/{key['id']}")
        assert res.json() == {"status": "ok"}
        assert (await cli.get(check)).status_code == 404

    async def test_delete_key_of_other_project_is_404(self, alice):
        p1 = await alice.create_project("P1")
        p2 = await alice.create_project("P2")
        key = await alice.create_key(p1["id"])
        res = await alice.client.delete(f"/api/session/project/{p2['id']}/keys/{key['id']}")
        assert res.status_code == 404


class TestConditionsAndFeatures:
    async def test_condition_crud(self, alice):
        project = await alice.create_project()
        base = f"/api/session/project/{project['id']}/conditions"

        created = (await alice.client.post(base, json={"name": "C1", "message": "hello"})).json()
        assert created["projectId"] == project["id"]
        assert created["message"] == "hello"

        updated = (await alice.client.patch(f"{base}/{created['id']}", json={"message": None})).json()
        assert updated["name"] == "C1"
        assert updated["message"] is None

        assert (await alice.client.delete(f"{base}/{created['id']}")).status_code == 200
        assert (await alice.client.get(base)).json() == []

    async def test_child_of_another_project_is_404(self, alice):
        p1 = await alice.create_project("P1")
        p2 = await alice.create_project("P2")
        condition = (
            await alice.client.post(f"/api/session/project/{p1['id']}/conditions", json={"name": "C"})
        ).json()

        res = await alice.client.patch(
            f"/api/session/project/{p2['id']}/conditions/{condition['id']}", json={"name": "hijack"}
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Condition not found"}

    async def test_feature_status_and_requirements(self, alice):
        project = await alice.create_project()
        base = f"/api/session/project/{project['id']}/features"

        feature = (await alice.client.post(base, json={"name": "F1"})).json()
        assert feature["status"] == "OPEN"

        res = await alice.client.patch(f"{base}/{feature['id']}", json={"status": "LOCKED"})
        assert res.json()["status"] == "LOCKED"
        res = await alice.client.patch(f"{base}/{feature['id']}", json={"status": "DONE"})
        assert res.status_code == 400

        req_base = f"{base}/{feature['id']}/requirements"
        r1 = (await alice.client.post(req_base, json={"name": "R1"})).json()
        r2 = (await alice.client.post(req_base, json={"name": "R2"})).json()
        assert r1["featureId"] == feature["id"]

        listed = (await alice.client.get(req_base)).json()
        assert [r["id"] for r in listed] == [r1["id"], r2["id"]]

        res = await alice.client.patch(f"{req_base}/{r1['id']}", json={"status": "CLOSED"})
        assert res.json()["status"] == "CLOSED"

        assert (await alice.client.delete(f"{req_base}/{r2['id']}")).status_code == 200
        assert [r["id"] for r in (await alice.client.get(req_base)).json()] == [r1["id"]]

    async def test_requirements_of_unknown_feature_are_404(self, alice):
        project = await alice.create_project()
        res = await alice.client.get(f"/api/session/project/{project['id']}/features/{uuid.uuid4()}/requirements")
        assert res.status_code == 404
        assert res.json() == {"error": "Feature not found"}


class TestProjectRequirementsAndDiscussions:
    async def test_project_requirements_are_oldest_first(self, alice):
        project = await alice.create_project()
        base = f"/api/session/project/{project['id']}/project-requirements"
        first = (await alice.client.post(base, json={"name": "Tests pass"})).json()
        second = (await alice.client.post(base, json={"name": "Docs updated"})).json()

        assert [r["id"] for r in (await alice.client.get(base)).json()] == [first["id"], second["id"]]

        res = await alice.client.patch(f"{base}/{first['id']}", json={"name": "All tests pass"})
        assert res.json()["name"] == "All tests pass"
        assert (await alice.client.delete(f"{base}/{second['id']}")).status_code == 200

    async def test_messages_are_attributed_to_the_user(self, alice, bob):
        project = await alice.create_project()
        base = f"/api/session/project/{project['id']}/discussions"
        discussion = (await alice.client.post(base, json={"name": "Design"})).json()
        assert (await alice.client.get(f"{base}/{discussion['id']}")).json()["name"] == "Design"

        msg_base = f"{base}/{discussion['id']}/messages"
        message = (await alice.client.post(msg_base, json={"body": "hi"})).json()
        assert message["authorName"] == "Alice"
        assert message["discussionId"] == discussion["id"]

        edited = (await alice.client.patch(f"{msg_base}/{message['id']}", json={"body": "hello"})).json()
        assert edited["body"] == "hello"

        assert (await bob.client.get(msg_base)).status_code == 401

        assert (await alice.client.delete(f"{msg_base}/{message['id']}")).status_code == 200
        assert (await alice.client.get(msg_base)).json() == []

    async def test_author_falls_back_to_email(self, bob):
        project = await bob.create_project()
        base = f"/api/session/project/{project['id']}/discussions"
        discussion = (await bob.client.post(base, json={"name": "D"})).json()
        message = (await bob.client.post(f"{base}/{discussion['id']}/messages", json={"body": "x"})).json()
        assert message["authorName"] == "bob@test.com"

    async def test_deleting_discussion_removes_it(self, alice):
        project = await alice.create_project()
        base = f"/api/session/project/{project['id']}/discussions"
        discussion = (await alice.client.post(base, json={"name": "D"})).json()
        await alice.client.post(f"{base}/{discussion['id']}/messages", json={"body": "x"})

        assert (await alice.client.delete(f"{base}/{discussion['id']}")).status_code == 200
        assert (await alice.client.get(f"{base}/{discussion['id']}")).status_code == 404
