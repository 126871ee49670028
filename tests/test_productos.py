from bson import ObjectId


def test_crear_y_listar_productos(client, db, comercial):
    res = client.post('/api/productos', json={"nombre": " Orla ", "descripcion": "Orla clásica"}, headers=comercial["headers"])
    assert res.status_code == 201
    assert res.get_json()["producto"]["nombre"] == "Orla"

    client.post('/api/productos', json={"nombre": "Beca"}, headers=comercial["headers"])
    body = client.get('/api/productos', headers=comercial["headers"]).get_json()
    assert [p["nombre"] for p in body["productos"]] == ["Beca", "Orla"]


def test_nombre_obligatorio_y_unico(client, comercial):
    assert client.post('/api/productos', json={"nombre": "  "}, headers=comercial["headers"]).status_code == 400
    client.post('/api/productos', json={"nombre": "Orla"}, headers=comercial["headers"])
    assert client.post('/api/productos', json={"nombre": "Orla"}, headers=comercial["headers"]).status_code == 400


def test_actualizar_producto(client, comercial):
    orla = client.post('/api/productos', json={"nombre": "Orla"}, headers=comercial["headers"]).get_json()["producto"]
    client.post('/api/productos', json={"nombre": "Beca"}, headers=comercial["headers"])

    res = client.put(f'/api/productos/{orla["_id"]}', json={"nombre": "Beca"}, headers=comercial["headers"])
    assert res.status_code == 400

    res = client.put(f'/api/productos/{orla["_id"]}', json={"nombre": "Orla premium"}, headers=comercial["headers"])
    assert res.get_json()["producto"]["nombre"] == "Orla premium"
    assert res.get_json()["producto"]["actualizadoPor"] == comercial["userId"]

    assert client.put(f'/api/productos/{ObjectId()}', json={"nombre": "X"}, headers=comercial["headers"]).status_code == 404


def test_eliminar_es_baja_logica(client, db, comercial):
    orla = client.post('/api/productos', json={"nombre": "Orla"}, headers=comercial["headers"]).get_json()["producto"]
    assert client.delete(f'/api/productos/{orla["_id"]}', headers=comercial["headers"]).status_code == 200

    assert client.get('/api/productos', headers=comercial["headers"]).get_json()["productos"] == []
    assert db.productos.find_one({"_id": ObjectId(orla["_id"])})["activo"] is False
    assert client.delete(f'/api/productos/{ObjectId()}', headers=comercial["headers"]).status_code == 404

    # El nombre queda libre para un producto nuevo
    assert client.post('/api/productos', json={"nombre": "Orla"}, headers=comercial["headers"]).status_code == 201
