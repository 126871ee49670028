import pytest
from crm_colegios.errors import ConflictError
from crm_colegios.services.configuracion_service import ConfiguracionService


def test_actualizar_incrementa_version_y_devuelve_lo_escrito(db):
    primera = ConfiguracionService.actualizar('graduaciones_mostrar_contactos', True, 'u1')
    assert primera["valor"] is True
    assert primera["version"] == 1

    segunda = ConfiguracionService.actualizar('graduaciones_mostrar_contactos', False, 'u1')
    assert segunda["valor"] is False
    assert segunda["version"] == 2
    assert ConfiguracionService.mostrar_contactos_graduaciones() is False


def test_version_desactualizada_es_conflicto(db):
    ConfiguracionService.actualizar('graduaciones_anio_seleccionado', 2006, 'u1')
    ConfiguracionService.actualizar('graduaciones_anio_seleccionado', 2007, 'u2', version_esperada=1)

    with pytest.raises(ConflictError):
        ConfiguracionService.actualizar('graduaciones_anio_seleccionado', 2008, 'u1', version_esperada=1)
    assert ConfiguracionService.anio_seleccionado() == 2007


def test_mostrar_contactos_acepta_string(db):
    ConfiguracionService.actualizar('graduaciones_mostrar_contactos', 'true', 'u1')
    assert ConfiguracionService.mostrar_contactos_graduaciones() is True


def test_anio_por_defecto(db):
    assert ConfiguracionService.anio_seleccionado() == 2007
    assert ConfiguracionService.anio_seleccionado(default=None) is None


def test_api_configuracion(client, admin, comercial):
    res = client.put('/api/configuracion/graduaciones_mostrar_contactos', json={"valor": True}, headers=admin["headers"])
    assert res.status_code == 200
    assert res.get_json()["configuracion"]["valor"] is True

    res = client.get('/api/configuracion/graduaciones_mostrar_contactos', headers=comercial["headers"])
    assert res.get_json()["configuracion"]["valor"] is True

    res = client.get('/api/configuracion', headers=comercial["headers"])
    assert len(res.get_json()["configuraciones"]) == 1

    assert client.get('/api/configuracion/no_existe', headers=admin["headers"]).status_code == 404


def test_api_configuracion_solo_admin_y_valor_requerido(client, admin, comercial):
    res = client.put('/api/configuracion/graduaciones_mostrar_contactos', json={"valor": True}, headers=comercial["headers"])
    assert res.status_code == 403

    res = client.put('/api/configuracion/graduaciones_mostrar_contactos', json={}, headers=admin["headers"])
    assert res.status_code == 400


def test_api_conflicto_de_version(client, admin):
    client.put('/api/configuracion/graduaciones_mostrar_contactos', json={"valor": True}, headers=admin["headers"])
    res = client.put('/api/configuracion/graduaciones_mostrar_contactos', json={"valor": False, "version": 5}, headers=admin["headers"])
    assert res.status_code == 409
    assert res.get_json()["success"] is False


def test_api_anio_seleccionado(client, admin, comercial):
    url = '/api/configuracion/graduaciones_anio_seleccionado'
    assert client.put(url, json={"anio": 2006}, headers=comercial["headers"]).status_code == 403
    assert client.put(url, json={"anio": 1800}, headers=admin["headers"]).status_code == 400
    assert client.put(url, json={"anio": "abc"}, headers=admin["headers"]).status_code == 400

    res = client.put(url, json={"anio": 2006}, headers=admin["headers"])
    assert res.status_code == 200
    assert res.get_json()["configuracion"]["valor"] == 2006
    assert ConfiguracionService.anio_seleccionado() == 2006


def test_api_init_permissions(client, admin, comercial, db):
    assert client.post('/api/configuracion/init-permissions', headers=comercial["headers"]).status_code == 403
    res = client.post('/api/configuracion/init-permissions', headers=admin["headers"])
    assert res.status_code == 200
    assert res.get_json()["data"]["permisosCreados"] == 11
