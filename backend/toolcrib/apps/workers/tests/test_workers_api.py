from __future__ import annotations


def _create_worker(client, code="T-1", name="Ana"):
    response = client.post("/workers", json={"codigo": code, "nombre": name})
    assert response.status_code == 201, response.text
    return response.json()


def _create_loan(client, worker_id):
    response = client.post(
        "/loans",
        json={
            "trabajadorId": worker_id,
            "items": [{"nombre": "Llave", "cantidadPrestada": 1, "comentarioDetalle": "30mm"}],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_worker_is_active(client):
    worker = _create_worker(client)

    assert worker["activo"] is True
    assert worker["codigo"] == "T-1"
    assert worker["fecha_registro"]


def test_duplicate_worker_code_is_400(client):
    _create_worker(client)

    response = client.post("/workers", json={"codigo": "T-1", "nombre": "Otro"})

    assert response.status_code == 400
    assert response.json()["mensaje"] == "Ya existe un trabajador con este código"


def test_deactivate_with_open_loan_reports_count(client):
    worker = _create_worker(client)
    _create_loan(client, worker["id"])
    _create_loan(client, worker["id"])

    response = client.delete(f"/workers/{worker['id']}")

    assert response.status_code == 400
    assert response.json()["prestamosActivos"] == 2
    assert client.get(f"/workers/{worker['id']}").json()["activo"] is True


def test_deactivate_then_list_filters(client):
    ana = _create_worker(client, "T-1", "Ana")
    _create_worker(client, "T-2", "Beto")

    response = client.delete(f"/workers/{ana['id']}")

    assert response.status_code == 200
    assert response.json() == {"mensaje": "Trabajador desactivado correctamente"}
    active = client.get("/workers", params={"activo": "true"}).json()
    assert [w["nombre"] for w in active] == ["Beto"]
    assert client.get(f"/workers/{ana['id']}").json()["activo"] is False


def test_update_worker_activo_false_is_guarded(client):
    worker = _create_worker(client)
    _create_loan(client, worker["id"])

    response = client.put(f"/workers/{worker['id']}", json={"activo": False})

    assert response.status_code == 400
    assert response.json()["prestamosActivos"] == 1


def test_worker_loans_route(client):
    worker = _create_worker(client)
    loan = _create_loan(client, worker["id"])

    loans = client.get(f"/workers/{worker['id']}/loans")
    pending = client.get(f"/workers/{worker['id']}/loans", params={"estado": "pendiente"})
    missing = client.get("/workers/999/loans")

    assert [item["id"] for item in loans.json()] == [loan["id"]]
    assert len(pending.json()) == 1
    assert missing.status_code == 404


def test_worker_stats_route(client):
    worker = _create_worker(client)
    _create_loan(client, worker["id"])

    response = client.get("/workers/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["totalTrabajadores"] == 1
    assert body["trabajadoresTopPrestamos"] == [
        {"id": worker["id"], "codigo": "T-1", "nombre": "Ana", "totalPrestamos": 1}
    ]
