"""Integration tests for API endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.factories import build_benchmark, spreadsheet_csv, spreadsheet_row


async def _create_project(client: AsyncClient, name: str = "Operating Systems") -> dict:
    response = await client.post("/api/v1/projects", json={"name": name, "description": "OS"})
    assert response.status_code == 201, response.text
    return response.json()


async def _upload_guide(client: AsyncClient, document: str = None) -> dict:
    response = await client.post(
        "/api/v1/guides",
        files={"file": ("srg.xml", (document or build_benchmark()).encode("utf-8"), "application/xml")},
    )
    assert response.status_code == 201, response.text
    return response.json()["guide"]


async def _create_component(client: AsyncClient, project: dict, guide: dict, **overrides) -> dict:
    body = {
        "project_id": project["id"],
        "security_requirements_guide_id": guide["id"],
        "name": "Photon OS 3",
        "prefix": "PHOS-03",
        "version": 1,
        "release": 1,
    }
    body.update(overrides)
    response = await client.post("/api/v1/components", json=body)
    assert response.status_code == 201, response.text
    return response.json()["component"]


async def _rules(client: AsyncClient, component: dict) -> list[dict]:
    response = await client.get(f"/api/v1/components/{component['id']}/rules")
    assert response.status_code == 200
    return response.json()["data"]


async def _release(client: AsyncClient, component: dict) -> dict:
    for rule in await _rules(client, component):
        assert (await client.post(f"/api/v1/rules/{rule['id']}/lock")).status_code == 200
    response = await client.post(f"/api/v1/components/{component['id']}/release")
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Integration tests for health endpoints."""

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/api/v1/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"] == "ok"


@pytest.mark.asyncio
class TestProjectEndpoints:
    """Integration tests for project endpoints."""

    async def test_create_and_get(self, client: AsyncClient):
        project = await _create_project(client)

        response = await client.get(f"/api/v1/projects/{project['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Operating Systems"

    async def test_duplicate_name(self, client: AsyncClient):
        await _create_project(client)

        response = await client.post("/api/v1/projects", json={"name": "Operating Systems"})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    async def test_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/v1/projects/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
class TestGuideEndpoints:
    """Integration tests for guide endpoints."""

    async def test_upload_and_get(self, client: AsyncClient, notifier):
        guide = await _upload_guide(client)

        response = await client.get(f"/api/v1/guides/{guide['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["full_title"].endswith("V2R4")
        assert data["rules_count"] == 3
        assert data["components_count"] == 0
        assert "Vulcan New SRG (Security Requirement Guide) Upload" in notifier.headers

    async def test_download_document(self, client: AsyncClient):
        document = build_benchmark()
        guide = await _upload_guide(client, document)

        response = await client.get(f"/api/v1/guides/{guide['id']}/document")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert 'filename="srg.xml"' in response.headers["content-disposition"]
        assert response.text == document

    async def test_download_document_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/v1/guides/{uuid4()}/document")

        assert response.status_code == 404

    async def test_duplicate_upload_is_record_invalid(self, client: AsyncClient):
        await _upload_guide(client)

        response = await client.post(
            "/api/v1/guides",
            files={"file": ("srg.xml", build_benchmark().encode("utf-8"), "application/xml")},
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "RECORD_INVALID"
        assert error["details"]["errors"]["srg_id"] == ["ID has already been taken"]

    async def test_list_guides(self, client: AsyncClient):
        await _upload_guide(client)
        await _upload_guide(client, build_benchmark(release="5"))

        response = await client.get("/api/v1/guides")

        assert response.status_code == 200
        assert response.json()["total"] == 2

    async def test_delete_refused_while_in_use(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        await _create_component(client, project, guide)

        response = await client.delete(f"/api/v1/guides/{guide['id']}")

        assert response.status_code == 409
        assert "dependent components exist" in response.json()["error"]["message"]

    async def test_delete_unused(self, client: AsyncClient):
        guide = await _upload_guide(client)

        response = await client.delete(f"/api/v1/guides/{guide['id']}")

        assert response.status_code == 204
        assert (await client.get(f"/api/v1/guides/{guide['id']}")).status_code == 404


@pytest.mark.asyncio
class TestComponentEndpoints:
    """Integration tests for the component lifecycle."""

    async def test_create_from_guide(self, client: AsyncClient, notifier):
        project = await _create_project(client)
        guide = await _upload_guide(client)

        component = await _create_component(client, project, guide)

        assert component["rules_count"] == 3
        assert component["released"] is False
        assert component["releasable"] is False
        assert component["based_on_version"] == "V2R4"
        assert "Vulcan New Component Creation" in notifier.headers
        rules = await _rules(client, component)
        assert [r["rule_id"] for r in rules] == ["000001", "000002", "000003"]

    async def test_invalid_prefix(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)

        response = await client.post(
            "/api/v1/components",
            json={
                "project_id": project["id"],
                "security_requirements_guide_id": guide["id"],
                "name": "Photon OS 3",
                "prefix": "PH",
            },
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["errors"]["prefix"] == ["must be of the form AAAA-00"]

    async def test_create_from_spreadsheet(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        content = spreadsheet_csv([spreadsheet_row(1, prefix="SHEE-01"), spreadsheet_row(2, prefix="SHEE-01")])

        response = await client.post(
            "/api/v1/components/spreadsheet",
            data={
                "project_id": project["id"],
                "security_requirements_guide_id": guide["id"],
                "name": "From sheet",
            },
            files={"file": ("component.csv", content, "text/csv")},
        )

        assert response.status_code == 201, response.text
        data = response.json()
        assert data["mode"] == "from_spreadsheet"
        assert data["component"]["prefix"] == "SHEE-01"
        assert data["rules_created"] == 2

    async def test_spreadsheet_missing_srg_ids(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        content = spreadsheet_csv([spreadsheet_row(42)])

        response = await client.post(
            "/api/v1/components/spreadsheet",
            data={
                "project_id": project["id"],
                "security_requirements_guide_id": guide["id"],
                "name": "From sheet",
            },
            files={"file": ("component.csv", content, "text/csv")},
        )

        assert response.status_code == 422
        assert "SRG-OS-000042-GPOS-00042" in response.json()["error"]["message"]

    async def test_release_flow_and_frozen_rules(self, client: AsyncClient, notifier):
        """Test lock all, release, then rules refuse further changes."""
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)

        released = await _release(client, component)

        assert released["released"] is True
        assert released["releasable"] is False
        assert "Vulcan Component Release" in notifier.headers
        rule = (await _rules(client, component))[0]
        response = await client.post(f"/api/v1/rules/{rule['id']}/unlock")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "RULE_FROZEN"

    async def test_release_refused_with_unlocked_rules(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)

        response = await client.post(f"/api/v1/components/{component['id']}/release")

        assert response.status_code == 422
        assert "not yet locked" in response.json()["error"]["message"]

    async def test_unrelease_refused(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)
        await _release(client, component)

        response = await client.patch(f"/api/v1/components/{component['id']}", json={"released": False})

        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Cannot unrelease a released component"

    async def test_duplicate_and_overlay(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)
        rules = await _rules(client, component)
        response = await client.post(
            f"/api/v1/rules/{rules[0]['id']}/satisfies",
            json={"satisfied_rule_id": rules[1]["id"]},
        )
        assert response.status_code == 201
        assert response.json()["satisfies"] == [rules[1]["rule_id"]]

        response = await client.post(f"/api/v1/components/{component['id']}/overlay", json={})
        assert response.status_code == 422

        response = await client.post(
            f"/api/v1/components/{component['id']}/duplicate", json={"name": "Copy"}
        )
        assert response.status_code == 201
        assert response.json()["edges_created"] == 1

        await _release(client, component)
        response = await client.post(
            f"/api/v1/components/{component['id']}/overlay", json={"prefix": "OVER-01"}
        )
        assert response.status_code == 201
        overlay = response.json()["component"]
        assert overlay["component_id"] == component["id"]
        assert overlay["released"] is False

    async def test_export_csv(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)

        response = await client.get(f"/api/v1/components/{component['id']}/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "Photon OS 3-V1R1.csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("IA Control,CCI,SRGID,STIGID")
        assert len(lines) == 4

    async def test_delete_component(self, client: AsyncClient, notifier):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)

        response = await client.delete(f"/api/v1/components/{component['id']}")

        assert response.status_code == 204
        assert (await client.get(f"/api/v1/components/{component['id']}")).status_code == 404
        assert "Vulcan Component Removal" in notifier.headers
        response = await client.get(f"/api/v1/projects/{project['id']}/components")
        assert response.json()["total"] == 0


@pytest.mark.asyncio
class TestRuleEndpoints:
    """Integration tests for rule endpoints."""

    async def test_update_rule(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)
        rule = (await _rules(client, component))[0]

        response = await client.patch(
            f"/api/v1/rules/{rule['id']}",
            json={"status": "Not Applicable", "status_justification": "No network stack"},
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["status"] == "Not Applicable"
        assert data["status_justification"] == "No network stack"

    async def test_update_locked_rule(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)
        rule = (await _rules(client, component))[0]
        await client.post(f"/api/v1/rules/{rule['id']}/lock")

        response = await client.patch(f"/api/v1/rules/{rule['id']}", json={"title": "Changed"})

        assert response.status_code == 409

    async def test_self_satisfaction_refused(self, client: AsyncClient):
        project = await _create_project(client)
        guide = await _upload_guide(client)
        component = await _create_component(client, project, guide)
        rule = (await _rules(client, component))[0]

        response = await client.post(
            f"/api/v1/rules/{rule['id']}/satisfies", json={"satisfied_rule_id": rule["id"]}
        )

        assert response.status_code == 409
