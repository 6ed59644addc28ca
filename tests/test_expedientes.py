from __future__ import annotations

from app.core.models import ExpedienteEstado


def test_list_requires_credentials(client):
    response = client.get("/expedientes")
    assert response.status_code == 401
    assert response.get_json()["code"] == "MissingCredential"


def test_agent_only_lists_own_case_files(client, auth_headers, user_id):
    response = client.get("/expedientes", headers=auth_headers("asesor"))
    assert response.status_code == 200
    body = response.get_json()
    assert body["pagination"]["total"] == 2
    assert {e["asesorId"] for e in body["data"]} == {user_id("asesor")}


def test_reviewer_and_admin_list_everything(client, auth_headers):
    for key in ("revisor", "admin"):
        body = client.get("/expedientes", headers=auth_headers(key)).get_json()
        assert body["pagination"]["total"] == 4


def test_agent_filter_by_other_owner_returns_nothing(client, auth_headers, user_id):
    response = client.get(f"/expedientes?asesorId={user_id('asesor2')}", headers=auth_headers("asesor"))
    assert response.status_code == 200
    assert response.get_json()["data"] == []


def test_list_filters_by_state_and_search(client, auth_headers):
    approved = client.get("/expedientes?estado=aprobado", headers=auth_headers("admin")).get_json()
    assert approved["pagination"]["total"] == 2
    assert {e["estado"] for e in approved["data"]} == {"APROBADO"}

    search = client.get("/propiedades?q=palermo", headers=auth_headers("admin")).get_json()
    assert [e["titulo"] for e in search["data"]] == ["Departamento 3 ambientes Palermo"]


def test_list_rejects_unknown_state_filter(client, auth_headers):
    response = client.get("/expedientes?estado=ARCHIVADO", headers=auth_headers("admin"))
    assert response.status_code == 400
    assert response.get_json()["code"] == "InvalidState"


def test_pagination_caps_page_size(client, auth_headers):
    body = client.get("/expedientes?limit=500&page=1", headers=auth_headers("admin")).get_json()
    assert body["pagination"]["limit"] == 100

    page = client.get("/expedientes?limit=3&page=2", headers=auth_headers("admin")).get_json()
    assert page["pagination"] == {"page": 2, "limit": 3, "total": 4, "totalPages": 2}
    assert len(page["data"]) == 1


def test_detail_of_foreign_case_file_is_not_found(client, auth_headers, expediente_id):
    foreign = expediente_id("asesor2", ExpedienteEstado.APROBADO)
    response = client.get(f"/expedientes/{foreign}", headers=auth_headers("asesor"))
    assert response.status_code == 404
    assert response.get_json()["code"] == "NotFound"

    missing = client.get("/expedientes/99999", headers=auth_headers("admin"))
    assert missing.status_code == 404
    assert missing.get_json()["error"] == response.get_json()["error"]


def test_detail_includes_mandate_and_documents(client, auth_headers, expediente_id):
    own = expediente_id("asesor", ExpedienteEstado.APROBADO)
    response = client.get(f"/propiedades/{own}", headers=auth_headers("asesor"))
    assert response.status_code == 200
    body = response.get_json()
    assert body["id"] == own
    assert body["mandato"] is None
    assert body["documentos"] == []
    assert body["asesor"]["email"] == "asesor@coldwell.local"


def test_create_assigns_actor_and_pending_state(client, auth_headers, user_id):
    response = client.post(
        "/expedientes",
        json={"titulo": "  Monoambiente Centro ", "propietarioNombre": "Eva Ruiz", "estado": "APROBADO"},
        headers=auth_headers("asesor2"),
    )
    assert response.status_code == 201
    created = response.get_json()["expediente"]
    assert created["titulo"] == "Monoambiente Centro"
    assert created["estado"] == "PENDIENTE"
    assert created["asesorId"] == user_id("asesor2")


def test_create_requires_title_and_owner_name(client, auth_headers):
    response = client.post("/expedientes", json={"propietarioNombre": "Eva"}, headers=auth_headers("asesor"))
    assert response.status_code == 400
    assert response.get_json()["campo"] == "titulo"

    response = client.post("/expedientes", json={"titulo": "Casa"}, headers=auth_headers("asesor"))
    assert response.get_json()["campo"] == "propietarioNombre"


def test_update_only_while_pending(client, auth_headers, expediente_id):
    pending = expediente_id("asesor", ExpedienteEstado.PENDIENTE)
    response = client.put(
        f"/expedientes/{pending}",
        json={"direccion": "Gorriti 4800"},
        headers=auth_headers("asesor"),
    )
    assert response.status_code == 200
    assert response.get_json()["expediente"]["direccion"] == "Gorriti 4800"

    approved = expediente_id("asesor", ExpedienteEstado.APROBADO)
    response = client.put(f"/expedientes/{approved}", json={"titulo": "Otro"}, headers=auth_headers("asesor"))
    assert response.status_code == 400
    assert response.get_json()["code"] == "NotEditable"
    assert response.get_json()["estadoActual"] == "APROBADO"


def test_agent_cannot_change_state(client, auth_headers, expediente_id):
    pending = expediente_id("asesor", ExpedienteEstado.PENDIENTE)
    response = client.put(
        f"/expedientes/{pending}/estado",
        json={"estado": "APROBADO"},
        headers=auth_headers("asesor"),
    )
    assert response.status_code == 403
    assert response.get_json()["code"] == "Forbidden"


def test_reviewer_changes_state_of_any_case_file(client, auth_headers, expediente_id):
    pending = expediente_id("asesor", ExpedienteEstado.PENDIENTE)
    response = client.patch(
        f"/propiedades/{pending}/estado",
        json={"estado": "aprobado", "observaciones": "Documentación completa"},
        headers=auth_headers("revisor"),
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["mensaje"] == "Estado del expediente actualizado a APROBADO"
    assert body["data"]["estado"] == "APROBADO"
    assert body["data"]["observaciones"] == "Documentación completa"

    # Any target is accepted, including going back to pending.
    back = client.put(f"/expedientes/{pending}/estado", json={"estado": "PENDIENTE"}, headers=auth_headers("admin"))
    assert back.status_code == 200
    assert back.get_json()["data"]["estado"] == "PENDIENTE"


def test_state_change_rejects_unknown_or_missing_state(client, auth_headers, expediente_id):
    pending = expediente_id("asesor", ExpedienteEstado.PENDIENTE)
    response = client.put(f"/expedientes/{pending}/estado", json={"estado": "ARCHIVADO"}, headers=auth_headers("admin"))
    assert response.status_code == 400
    assert response.get_json()["estadosPermitidos"] == ["PENDIENTE", "APROBADO", "RECHAZADO"]

    response = client.put(f"/expedientes/{pending}/estado", json={}, headers=auth_headers("admin"))
    assert response.status_code == 400
    assert response.get_json()["code"] == "MissingField"


def test_state_change_of_missing_case_file_is_not_found(client, auth_headers):
    response = client.put("/expedientes/99999/estado", json={"estado": "APROBADO"}, headers=auth_headers("admin"))
    assert response.status_code == 404


def test_owner_filter_rejects_non_ascii_digits(client, auth_headers):
    response = client.get("/expedientes?asesorId=%C2%B2", headers=auth_headers("admin"))
    assert response.status_code == 400
    assert response.get_json()["code"] == "ValidationError"

    response = client.get("/expedientes?asesorId=-1", headers=auth_headers("admin"))
    assert response.status_code == 400
