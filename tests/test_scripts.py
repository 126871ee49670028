from datetime import datetime, timedelta
from unittest import mock
from conftest import insertar_contacto
from crm_colegios.services.audit_service import AuditService
from scripts.limpiar_duplicados import buscar_duplicados, main as limpiar_duplicados
from scripts.migrar_colegio_id import migrar
from scripts.verificar_graduaciones import resumen


def test_buscar_duplicados_conserva_el_mas_antiguo(db, admin):
    original = insertar_contacto(db, admin["userId"], nombreCompleto="Laura Gómez")
    insertar_contacto(db, admin["userId"], nombreCompleto="  laura gomez ")
    insertar_contacto(db, admin["userId"], nombreCompleto="Laura Gómez", telefono="699999999")

    duplicados = buscar_duplicados(db)
    assert len(duplicados) == 1
    assert duplicados[0]["_id"] != original


def test_limpiar_duplicados_dry_run_no_borra(db, admin):
    insertar_contacto(db, admin["userId"])
    insertar_contacto(db, admin["userId"])

    assert limpiar_duplicados(['--dry-run']) == 0
    assert db.contactos.count_documents({}) == 2

    assert limpiar_duplicados([]) == 0
    assert db.contactos.count_documents({}) == 1
    assert db.audit_logs.count_documents({"accion": "DELETE", "usuarioId": "system"}) == 1


def test_migrar_colegio_id(db, admin):
    colegio = db.universidades.insert_one({"codigo": "CSJ", "nombre": "Colegio San José", "activa": True}).inserted_id
    enlazable = insertar_contacto(db, admin["userId"], "colegio  san jose", colegioId=None)
    insertar_contacto(db, admin["userId"], "Colegio Desconocido", colegioId=None)
    db.graduaciones.insert_many([
        {"nombreColegio": "colegio  san jose", "anioNacimiento": 2007, "responsable": "Ana", "contactos": [enlazable]},
        {"nombreColegio": "COLEGIO SAN JOSE", "anioNacimiento": 2008, "estado": "Cerrado", "contactos": []},
    ])

    assert migrar(db) == {"enlazados": 1, "sinColegio": 1, "graduaciones": 2, "errores": 0}
    contacto = db.contactos.find_one({"_id": enlazable})
    assert contacto["colegioId"] == colegio
    assert contacto["nombreColegio"] == "Colegio San José"
    assert sorted(g["anioNacimiento"] for g in db.graduaciones.find({"nombreColegio": "Colegio San José"})) == [2007, 2008]
    assert db.graduaciones.find_one({"anioNacimiento": 2007})["responsable"] == "Ana"

    assert migrar(db)["enlazados"] == 0


def test_resumen_de_graduaciones(db):
    db.graduaciones.insert_many([
        {"nombreColegio": "A", "anioNacimiento": 2007, "contactos": ["x", "y"]},
        {"nombreColegio": "B", "anioNacimiento": 2007, "contactos": []},
        {"nombreColegio": "A", "anioNacimiento": 2008, "contactos": ["z"]},
    ])
    assert resumen(db) == {
        2008: {"graduaciones": 1, "contactos": 1},
        2007: {"graduaciones": 2, "contactos": 2},
    }


def test_limpiar_auditoria_respeta_retencion(db):
    ahora = datetime.utcnow()
    db.audit_logs.insert_many([
        {"entidad": "CONTACTO", "accion": "CREATE", "timestamp": ahora - timedelta(days=120)},
        {"entidad": "CONTACTO", "accion": "UPDATE", "timestamp": ahora - timedelta(days=10)},
    ])
    assert AuditService.limpiar_antiguos(90) == 1
    assert [a["accion"] for a in db.audit_logs.find({})] == ["UPDATE"]


def test_auditoria_no_interrumpe_si_falla(db):
    with mock.patch('crm_colegios.services.audit_service.get_mongo', side_effect=RuntimeError("sin conexión")):
        assert AuditService.registrar('system', 'CONTACTO', 'x', 'DELETE') is False
