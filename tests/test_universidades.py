from bson import ObjectId
from conftest import insertar_contacto
from crm_colegios.services.permission_service import PermissionService

COLEGIO = {"codigo": "csj", "nombre": "Colegio San José", "tipo": "Privada", "ciudad": "Madrid"}


def _crear(client, admin, **cambios):
    return client.post('/api/universidades', json=dict(COLEGIO, **cambios), headers=admin["headers"])


def test_crear_colegio_solo_admin(client, admin, comercial):
    assert _crear(client, comercial).status_code == 403
    res = _crear(client, admin)
    assert res.status_code == 201
    universidad = res.get_json()["universidad"]
    assert universidad["codigo"] == "CSJ"
    assert universidad["tipo"] == "privada"
    assert universidad["activa"] is True


def test_crear_valida_campos_y_duplicados(client, admin):
    assert client.post('/api/universidades', json={"codigo": "X"}, headers=admin["headers"]).status_code == 400
    assert _crear(client, admin, codigo="DEMASIADOLARGO").status_code == 400
    assert _crear(client, admin, tipo="concertada").status_code == 400

    assert _crear(client, admin).status_code == 201
    assert _crear(client, admin, nombre="Otro").status_code == 400
    assert _crear(client, admin, codigo="OTRO").status_code == 400


def test_crear_asocia_contactos_por_nombre_normalizado(client, db, admin):
    cid = insertar_contacto(db, admin["userId"], "  colegio SAN jose ")
    insertar_contacto(db, admin["userId"], "Colegio Diferente")

    res = _crear(client, admin)
    assert res.get_json()["contactosAsociados"] == 1

    contacto = db.contactos.find_one({"_id": cid})
    assert contacto["nombreColegio"] == "Colegio San José"
    assert str(contacto["colegioId"]) == res.get_json()["universidad"]["_id"]
    assert db.audit_logs.count_documents({"entidad": "UNIVERSIDAD", "accion": "CREATE"}) == 1


def test_listar_con_titulaciones_y_filtros(client, db, admin):
    uid = ObjectId(_crear(client, admin).get_json()["universidad"]["_id"])
    _crear(client, admin, codigo="CN", nombre="Colegio Norte")
    db.titulaciones.insert_many([
        {"universidadId": uid, "nombre": "Bachillerato", "estado": "activa"},
        {"universidadId": uid, "nombre": "Antigua", "estado": "inactiva"},
    ])

    body = client.get('/api/universidades?search=san', headers=admin["headers"]).get_json()
    assert body["pagination"]["total"] == 1
    assert [t["nombre"] for t in body["universidades"][0]["titulaciones"]] == ["Bachillerato"]

    body = client.get('/api/universidades?limit=1', headers=admin["headers"]).get_json()
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}


def test_obtener_y_buscar_por_codigo(client, admin):
    uid = _crear(client, admin).get_json()["universidad"]["_id"]
    assert client.get(f'/api/universidades/{uid}', headers=admin["headers"]).get_json()["data"]["nombre"] == "Colegio San José"
    assert client.get('/api/universidades/no-valido', headers=admin["headers"]).status_code == 400
    assert client.get(f'/api/universidades/{ObjectId()}', headers=admin["headers"]).status_code == 404

    body = client.get('/api/universidades/codigo/csj', headers=admin["headers"]).get_json()
    assert body["data"]["_id"] == uid
    assert client.get('/api/universidades/codigo/NOPE', headers=admin["headers"]).status_code == 404


def test_renombrar_propaga_a_contactos_y_graduaciones(client, db, admin):
    uid = _crear(client, admin).get_json()["universidad"]["_id"]
    cid = insertar_contacto(db, admin["userId"], "Colegio San José", colegioId=ObjectId(uid))
    db.graduaciones.insert_one({"nombreColegio": "Colegio San José", "anioNacimiento": 2007, "contactos": []})

    res = client.put(f'/api/universidades/{uid}', json={"nombre": "Colegio San José de Calasanz"}, headers=admin["headers"])
    assert res.status_code == 200
    assert db.contactos.find_one({"_id": cid})["nombreColegio"] == "Colegio San José de Calasanz"
    assert db.graduaciones.find_one({"anioNacimiento": 2007})["nombreColegio"] == "Colegio San José de Calasanz"

    audit = db.audit_logs.find_one({"entidad": "UNIVERSIDAD", "accion": "UPDATE"})
    assert audit["antes"]["nombre"] == "Colegio San José"


def test_actualizar_codigo_duplicado(client, admin):
    _crear(client, admin, codigo="OTRO", nombre="Otro colegio")
    uid = _crear(client, admin).get_json()["universidad"]["_id"]
    res = client.put(f'/api/universidades/{uid}', json={"codigo": "otro"}, headers=admin["headers"])
    assert res.status_code == 400


def test_eliminar_borra_titulaciones(client, db, admin, comercial):
    uid = _crear(client, admin).get_json()["universidad"]["_id"]
    db.titulaciones.insert_one({"universidadId": ObjectId(uid), "nombre": "ESO", "estado": "activa"})

    assert client.delete(f'/api/universidades/{uid}', headers=comercial["headers"]).status_code == 403
    assert client.delete(f'/api/universidades/{uid}', headers=admin["headers"]).status_code == 200
    assert db.universidades.count_documents({}) == 0
    assert db.titulaciones.count_documents({}) == 0
    assert db.audit_logs.count_documents({"entidad": "UNIVERSIDAD", "accion": "DELETE"}) == 1


def test_normalizar_localidades(client, db, admin):
    _crear(client, admin, ciudad="  MÁLAGA ")
    _crear(client, admin, codigo="B", nombre="Colegio B", ciudad="Sevilla")

    body = client.post('/api/universidades/normalizar-localidades', headers=admin["headers"]).get_json()
    assert body["universidadesActualizadas"] == 1
    assert body["errores"] == 0
    assert body["totalUniversidades"] == 2
    assert {u["ciudad"] for u in db.universidades.find({})} == {"Malaga", "Sevilla"}


def test_estadisticas_por_curso(client, db, admin, comercial):
    uid = ObjectId(_crear(client, admin).get_json()["universidad"]["_id"])
    tid = db.titulaciones.insert_one({"universidadId": uid, "nombre": "Bachillerato", "estado": "activa"}).inserted_id
    insertar_contacto(db, comercial["userId"], universidadId=uid, titulacionId=tid, curso=1)
    insertar_contacto(db, comercial["userId"], universidadId=uid, titulacionId=tid, curso=1)
    insertar_contacto(db, admin["userId"], universidadId=uid, titulacionId=tid, curso=3)

    body = client.get('/api/universidades/estadisticas', headers=admin["headers"]).get_json()
    assert body["estadisticasGenerales"] == {"totalUniversidades": 1, "totalTitulaciones": 1, "totalAlumnos": 3}
    titulacion = body["universidades"][0]["titulaciones"][0]
    assert [c["totalAlumnos"] for c in titulacion["cursos"]] == [2, 0, 1, 0, 0, 0]
    assert titulacion["estadisticasPorComercial"] == {comercial["userId"]: 2, admin["userId"]: 1}
    assert titulacion["comercialesInfo"][comercial["userId"]] == "Lucia"

    body = client.get('/api/universidades/estadisticas', headers=comercial["headers"]).get_json()
    assert body["estadisticasGenerales"]["totalAlumnos"] == 2


def test_vistas_de_colegios_requieren_ver_contactos(client, db, permisos, admin, comercial):
    _crear(client, admin)
    _crear(client, admin, codigo="N", nombre="Colegio Norte", ciudad="Bilbao")

    assert client.get('/api/colegios', headers=comercial["headers"]).status_code == 403
    PermissionService.asignar(comercial["userId"], 'VER_CONTACTOS')

    body = client.get('/api/colegios?search=bilbao', headers=comercial["headers"]).get_json()
    assert [c["nombre"] for c in body["data"]] == ["Colegio Norte"]
    assert body["pagination"]["total"] == 1

    body = client.get('/api/colegios/todos', headers=comercial["headers"]).get_json()
    assert len(body["data"]) == 2

    body = client.get('/api/colegios/nombres?search=norte', headers=comercial["headers"]).get_json()
    assert body["data"]["colegios"] == ["Colegio Norte"]

    body = client.get('/api/colegios/nombres?activo=false', headers=comercial["headers"]).get_json()
    assert body["data"]["colegios"] == []


def test_crear_conserva_la_graduacion_escrita_con_otro_nombre(client, db, admin):
    insertar_contacto(db, admin["userId"], "colegio san jose")
    db.graduaciones.insert_one({"nombreColegio": "colegio san jose", "anioNacimiento": 2007, "responsable": "Ana", "contactos": []})

    _crear(client, admin)

    filas = client.get('/api/graduaciones/colegios/2007', headers=admin["headers"]).get_json()["graduaciones"]
    assert [(f["nombreColegio"], f["responsable"], f["totalContactos"]) for f in filas] == [("Colegio San José", "Ana", 1)]
    assert db.graduaciones.count_documents({}) == 1


def test_crear_fusiona_graduaciones_del_mismo_anio(client, db, admin):
    c1, c2 = ObjectId(), ObjectId()
    db.graduaciones.insert_many([
        {"nombreColegio": "Colegio San José", "anioNacimiento": 2007, "responsable": "", "estado": "Cerrado", "contactos": [c1]},
        {"nombreColegio": "colegio san jose", "anioNacimiento": 2007, "responsable": "Ana", "estado": "Pendiente", "contactos": [c1, c2]},
    ])

    assert _crear(client, admin).status_code == 201

    graduaciones = list(db.graduaciones.find({}))
    assert len(graduaciones) == 1
    assert graduaciones[0]["nombreColegio"] == "Colegio San José"
    assert graduaciones[0]["responsable"] == "Ana"
    assert graduaciones[0]["estado"] == "Cerrado"
    assert graduaciones[0]["contactos"] == [c1, c2]


def test_renombrar_con_graduaciones_en_conflicto_no_escribe_nada(client, db, admin):
    uid = _crear(client, admin, codigo="A", nombre="Colegio A").get_json()["universidad"]["_id"]
    cid = insertar_contacto(db, admin["userId"], "Colegio A", colegioId=ObjectId(uid))
    db.graduaciones.insert_many([
        {"nombreColegio": "Colegio A", "anioNacimiento": 2007, "contactos": []},
        {"nombreColegio": "Colegio Z", "anioNacimiento": 2007, "contactos": []},
    ])

    res = client.put(f'/api/universidades/{uid}', json={"nombre": "Colegio Z"}, headers=admin["headers"])
    assert res.status_code == 400
    assert "2007" in res.get_json()["message"]

    assert db.universidades.find_one({"_id": ObjectId(uid)})["nombre"] == "Colegio A"
    assert db.contactos.find_one({"_id": cid})["nombreColegio"] == "Colegio A"
    assert sorted(g["nombreColegio"] for g in db.graduaciones.find({})) == ["Colegio A", "Colegio Z"]
    assert db.audit_logs.count_documents({"entidad": "UNIVERSIDAD", "accion": "UPDATE"}) == 0
