from unittest import mock
from bson import ObjectId
from crm_colegios.services.permission_service import PermissionService, PERMISOS_SISTEMA


def test_inicializar_es_idempotente(db):
    primero = PermissionService.inicializar()
    assert primero["permisosCreados"] == len(PERMISOS_SISTEMA)
    assert set(primero["configuracionesCreadas"]) == {"graduaciones_mostrar_contactos", "graduaciones_anio_seleccionado"}

    segundo = PermissionService.inicializar()
    assert segundo["permisosCreados"] == 0
    assert segundo["permisosExistentes"] == len(PERMISOS_SISTEMA)
    assert segundo["configuracionesCreadas"] == []
    assert db.permisos.count_documents({}) == len(PERMISOS_SISTEMA)


def test_asignar_y_revocar(permisos):
    usuario = str(ObjectId())
    assert not PermissionService.tiene_permiso(usuario, 'ELIMINAR_CONTACTOS')

    PermissionService.asignar(usuario, 'ELIMINAR_CONTACTOS')
    PermissionService.asignar(usuario, 'ELIMINAR_CONTACTOS')
    assert PermissionService.tiene_permiso(usuario, 'ELIMINAR_CONTACTOS')
    assert PermissionService.get_permisos_usuario(usuario) == ['ELIMINAR_CONTACTOS']

    assert PermissionService.revocar(usuario, 'ELIMINAR_CONTACTOS')
    assert not PermissionService.tiene_permiso(usuario, 'ELIMINAR_CONTACTOS')


def test_permiso_inexistente(permisos):
    assert not PermissionService.tiene_permiso(str(ObjectId()), 'NO_EXISTE')


def test_error_de_base_de_datos_deniega(permisos):
    with mock.patch('crm_colegios.services.permission_service.get_mongo', side_effect=RuntimeError("sin conexión")):
        assert PermissionService.tiene_permiso(str(ObjectId()), 'VER_CONTACTOS') is False
