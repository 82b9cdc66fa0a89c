from typing import Dict

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from feedback_admin.api.v1.academic_config import service
from feedback_admin.core.models import Tenant

BASE = "/api/v1/academic-config"

MBA_TREE = {
    "courses": [
        {
            "name": "MBA",
            "years": [
                {
                    "name": "1",
                    "departments": [
                        {
                            "name": "Finance",
                            "subjects": [
                                {"name": "Accounts", "code": "FN101", "type": "Theory", "batches": ["A", "B"]},
                            ],
                        }
                    ],
                }
            ],
        }
    ],
    "batches": ["A", "B", "C", "D"],
}


@pytest.mark.asyncio
async def test_requires_token(client: AsyncClient) -> None:
    response = await client.get(BASE)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_returns_template_before_first_save(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.get(BASE, headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "template"
    assert data["template_id"] == "default"
    assert data["tree"]["courses"][0]["name"] == "Engineering"


@pytest.mark.asyncio
async def test_save_then_get(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.put(BASE, json=MBA_TREE, headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "SAVED"
    assert data["created_departments"] == ["Finance"]
    assert data["course_index"]["MBA"]["year_departments"] == {"1": ["Finance"]}
    assert data["subject_table"]["MBA"]["1"]["Finance"]["Accounts"]["batches"] == ["A", "B"]

    response = await client.get(BASE, headers=admin_headers)
    data = response.json()
    assert data["source"] == "stored"
    assert data["tree"]["courses"] == [
        {
            "name": "MBA",
            "semesters": None,
            "years": [
                {
                    "name": "1",
                    "departments": [
                        {
                            "name": "Finance",
                            "subjects": [
                                {"name": "Accounts", "code": "FN101", "type": "Theory", "batches": ["A", "B"]}
                            ],
                        }
                    ],
                }
            ],
        }
    ]

    departments = await client.get("/api/v1/departments", headers=admin_headers)
    assert [(d["name"], d["code"]) for d in departments.json()] == [("Finance", "finance")]


@pytest.mark.asyncio
async def test_save_with_duplicate_siblings_is_rejected(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    tree = {"courses": [{"name": "MBA"}, {"name": "MBA"}], "batches": []}
    response = await client.put(BASE, json=tree, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"] == {"field": "tree", "message": "Duplicate course 'MBA'."}


@pytest.mark.asyncio
async def test_save_with_case_only_duplicate_is_rejected(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    tree = {"courses": [{"name": "Engineering"}, {"name": "engineering"}], "batches": []}
    response = await client.put(BASE, json=tree, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "tree"


@pytest.mark.asyncio
async def test_save_write_failure_returns_503(
    client: AsyncClient, admin_headers: Dict[str, str], monkeypatch
) -> None:
    async def failing_upsert(*args, **kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(service, "upsert_config", failing_upsert)

    response = await client.put(BASE, json=MBA_TREE, headers=admin_headers)
    assert response.status_code == 503
    assert response.json()["detail"] == {"state": "FAILED", "message": "Failed to save academic configuration"}

    # Nothing was stored: the next load still offers the template
    response = await client.get(BASE, headers=admin_headers)
    assert response.json()["source"] == "template"


@pytest.mark.asyncio
async def test_operation_add_course(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {"tree": MBA_TREE, "action": "add", "level": "course", "name": "MCA"}
    response = await client.post(f"{BASE}/operations", json=payload, headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Course added."
    assert [c["name"] for c in data["tree"]["courses"]] == ["MBA", "MCA"]


@pytest.mark.asyncio
async def test_operation_validation_error(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {"tree": MBA_TREE, "action": "add", "level": "year", "path": {"course_index": 0}, "name": "7"}
    response = await client.post(f"{BASE}/operations", json=payload, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"] == {
        "field": "name",
        "message": "Only the values 1, 2, 3, or 4 are allowed for years.",
    }


@pytest.mark.asyncio
async def test_operation_cascade_delete_blocked(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {
        "tree": MBA_TREE,
        "action": "delete",
        "level": "department",
        "path": {"course_index": 0, "year_index": 0, "department_index": 0},
    }
    response = await client.post(f"{BASE}/operations", json=payload, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["detail"] == (
        "Cannot delete department with existing subjects. Please delete all subjects first."
    )


@pytest.mark.asyncio
async def test_operation_invalid_path(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {"tree": MBA_TREE, "action": "add", "level": "department", "path": {"course_index": 0}, "name": "HR"}
    response = await client.post(f"{BASE}/operations", json=payload, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid year selected."


@pytest.mark.asyncio
async def test_validate_endpoint(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {
        "tree": MBA_TREE,
        "level": "batch",
        "name": "A",
        "path": {"course_index": 0, "year_index": 0, "department_index": 0, "subject_index": 0},
    }
    response = await client.post(f"{BASE}/validate", json=payload, headers=admin_headers)
    assert response.json() == {"valid": False, "message": "Batch A already exists in this subject."}

    payload["name"] = "C"
    response = await client.post(f"{BASE}/validate", json=payload, headers=admin_headers)
    assert response.json() == {"valid": True, "message": None}


@pytest.mark.asyncio
async def test_dropdown_cascade(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    await client.put(BASE, json=MBA_TREE, headers=admin_headers)

    response = await client.get(f"{BASE}/dropdown", headers=admin_headers)
    assert response.json() == {"level": "course", "options": ["MBA"], "semesters": None}

    response = await client.get(f"{BASE}/dropdown", params={"course": "MBA"}, headers=admin_headers)
    assert response.json() == {"level": "year", "options": ["1"], "semesters": ["Odd", "Even"]}

    params = {"course": "MBA", "year": "1"}
    response = await client.get(f"{BASE}/dropdown", params=params, headers=admin_headers)
    assert response.json()["options"] == ["Finance"]

    params["department"] = "Finance"
    response = await client.get(f"{BASE}/dropdown", params=params, headers=admin_headers)
    assert response.json()["options"] == ["Accounts"]

    params["subject"] = "Accounts"
    response = await client.get(f"{BASE}/dropdown", params=params, headers=admin_headers)
    assert response.json() == {"level": "batch", "options": ["A", "B"], "semesters": None}

    response = await client.get(f"{BASE}/dropdown", params={"course": "BBA"}, headers=admin_headers)
    assert response.json()["options"] == []


@pytest.mark.asyncio
async def test_templates_list_and_apply(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.get(f"{BASE}/templates", headers=admin_headers)
    assert response.status_code == 200
    assert {t["id"] for t in response.json()} == {"default", "icem", "igsb"}

    response = await client.post(f"{BASE}/templates/icem/apply", headers=admin_headers)
    assert response.status_code == 200
    assert list(response.json()["course_index"]) == ["BE", "MTech", "MCA", "MBA"]

    response = await client.post(f"{BASE}/templates/unknown/apply", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_faculty_can_read_but_not_save(client: AsyncClient, tenant: Tenant, make_headers) -> None:
    headers = make_headers(tenant.id, role="FACULTY")
    assert (await client.get(BASE, headers=headers)).status_code == 200
    assert (await client.get(f"{BASE}/dropdown", headers=headers)).status_code == 200

    response = await client.put(BASE, json=MBA_TREE, headers=headers)
    assert response.status_code == 403
    payload = {"tree": MBA_TREE, "action": "add", "level": "course", "name": "MCA"}
    assert (await client.post(f"{BASE}/operations", json=payload, headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_hod_with_granted_update_can_save(client: AsyncClient, tenant: Tenant, make_headers) -> None:
    headers = make_headers(tenant.id, role="hod", permissions={"academic_config": {"update": True}})
    response = await client.put(BASE, json=MBA_TREE, headers=headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_configs_are_scoped_per_tenant(
    client: AsyncClient, db_session, admin_headers: Dict[str, str], make_headers
) -> None:
    other = Tenant(code="IGSB", name="IGSB")
    db_session.add(other)
    await db_session.commit()

    await client.put(BASE, json=MBA_TREE, headers=admin_headers)

    response = await client.get(BASE, headers=make_headers(other.id))
    data = response.json()
    assert data["source"] == "template"
    assert data["template_id"] == "igsb"
