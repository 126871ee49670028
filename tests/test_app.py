from datetime import timedelta
from bson import ObjectId
from conftest import crear_token


def test_sin_token_es_401(client):
    res = client.get('/api/contactos')
    assert res.status_code == 401
    assert res.get_json() == {"success": False, "message": "Token de acceso requerido"}


def test_token_expirado_e_invalido(client):
    expirado = crear_token(ObjectId(), expira_en=timedelta(seconds=-5))
    res = client.get('/api/productos', headers={"Authorization": f"Bearer {expirado}"})
    assert res.status_code == 401
    assert res.get_json()["message"] == "Token expirado"

    res = client.get('/api/productos', headers={"Authorization": "Bearer no.es.jwt"})
    assert res.status_code == 401
    assert res.get_json()["message"] == "Token inválido"


def test_preflight_no_requiere_token(client):
    res = client.options('/api/contactos', headers={
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "GET"
    })
    assert res.status_code == 200


def test_health(client):
    res = client.get('/health')
    body = res.get_json()
    assert res.status_code in (200, 503)
    assert body["status"] in ("OK", "ERROR")
    assert "timestamp" in body
    assert "status" in body["database"]
    assert client.get('/api/health').status_code == res.status_code


def test_ruta_inexistente_responde_json(client, admin):
    res = client.get('/api/no-existe', headers=admin["headers"])
    assert res.status_code == 404
    assert res.get_json()["success"] is False


def test_error_no_controlado_es_500(client, admin, monkeypatch):
    from crm_colegios.services.producto_service import ProductoService

    def fallar():
        raise RuntimeError("boom")

    monkeypatch.setattr(ProductoService, 'listar', staticmethod(fallar))
    res = client.get('/api/productos', headers=admin["headers"])
    assert res.status_code == 500
    assert res.get_json() == {"success": False, "message": "Error interno del servidor"}


def test_swagger_publicado(client):
    res = client.get('/apispec_1.json')
    assert res.status_code == 200
    assert "info" in res.get_json()
