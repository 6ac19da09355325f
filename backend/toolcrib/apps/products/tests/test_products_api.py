from __future__ import annotations

PRODUCT = {
    "codigo": "TOR-38",
    "nombre": "Tornillo 3/8",
    "cantidad": 2,
    "unidadMedida": "unidades",
    "clasificacion": "Ferretería",
    "subclasificacion": "Fijaciones",
    "ubicacionEstante": "A1",
}


def _create_product(client, **overrides):
    response = client.post("/products", json={**PRODUCT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_read_product(client):
    created = _create_product(client)

    assert created["codigo"] == "TOR-38"
    assert created["unidad_medida"] == "unidades"
    assert created["ubicacion_estante"] == "A1"
    assert client.get(f"/products/{created['id']}").json()["nombre"] == "Tornillo 3/8"


def test_create_product_requires_fields(client):
    response = client.post("/products", json={"codigo": "X"})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {"nombre", "unidadMedida", "clasificacion"} <= set(errors)


def test_duplicate_code_is_400(client):
    _create_product(client)

    response = client.post("/products", json=PRODUCT)

    assert response.status_code == 400
    assert response.json() == {"mensaje": "Ya existe un producto con este código"}


def test_stock_out_beyond_available_is_rejected(client):
    product = _create_product(client)

    response = client.post(
        f"/products/{product['id']}/stock",
        json={"tipo": "salida", "cantidad": 5},
    )

    assert response.status_code == 400
    assert response.json() == {
        "mensaje": "Stock insuficiente",
        "stockDisponible": 2,
        "cantidadSolicitada": 5,
    }
    assert client.get(f"/products/{product['id']}").json()["cantidad"] == 2


def test_stock_rejects_boolean_quantity(client):
    product = _create_product(client)

    response = client.post(
        f"/products/{product['id']}/stock",
        json={"tipo": "salida", "cantidad": True},
    )

    assert response.status_code == 400
    assert "cantidad" in response.json()["errors"]
    assert client.get(f"/products/{product['id']}").json()["cantidad"] == 2


def test_create_product_rejects_boolean_quantity(client):
    response = client.post("/products", json={**PRODUCT, "cantidad": True})

    assert response.status_code == 400
    assert "cantidad" in response.json()["errors"]


def test_stock_in_updates_quantity(client):
    product = _create_product(client)

    response = client.post(
        f"/products/{product['id']}/stock",
        json={"tipo": "entrada", "cantidad": 8, "motivo": "Compra"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["mensaje"] == "Stock actualizado correctamente (entrada de 8 unidades)"
    assert body["producto"]["cantidad"] == 10


def test_stock_with_unknown_kind_is_400(client):
    product = _create_product(client)

    response = client.post(f"/products/{product['id']}/stock", json={"tipo": "robo", "cantidad": 1})

    assert response.status_code == 400
    assert "tipo" in response.json()["errors"]


def test_shelf_and_stats_routes_are_not_shadowed_by_id(client):
    _create_product(client)

    shelf = client.get("/products/shelf/A1")
    empty_shelf = client.get("/products/shelf/Z9")
    stats = client.get("/products/stats")

    assert shelf.status_code == 200
    assert [p["codigo"] for p in shelf.json()] == ["TOR-38"]
    assert empty_shelf.status_code == 404
    assert stats.status_code == 200
    assert stats.json()["totalStock"] == 2
    assert stats.json()["stockBajo"]["cantidad"] == 1


def test_update_and_delete_product(client):
    product = _create_product(client)

    updated = client.put(f"/products/{product['id']}", json={"nombre": "Tornillo 1/2"})
    deleted = client.delete(f"/products/{product['id']}")

    assert updated.status_code == 200
    assert updated.json()["nombre"] == "Tornillo 1/2"
    assert deleted.json() == {"mensaje": "Producto eliminado correctamente"}
    assert client.get(f"/products/{product['id']}").status_code == 404
