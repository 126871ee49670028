import logging
from datetime import datetime
from bson import ObjectId
from crm_colegios.config import settings
from crm_colegios.config.database import get_mongo
from crm_colegios.utils.serializacion import es_object_id

logger = logging.getLogger(__name__)

PERMISOS_SISTEMA = [
    {"clave": "CREAR_CONTACTOS", "descripcion": "Permite crear nuevos contactos"},
    {"clave": "CREAR_USUARIOS", "descripcion": "Permite crear nuevos usuarios"},
    {"clave": "EDITAR_CONTACTOS", "descripcion": "Permite editar y reasignar contactos"},
    {"clave": "EDITAR_USUARIOS", "descripcion": "Permite editar usuarios existentes"},
    {"clave": "ELIMINAR_CONTACTOS", "descripcion": "Permite eliminar contactos"},
    {"clave": "ELIMINAR_USUARIOS", "descripcion": "Permite eliminar usuarios"},
    {"clave": "GESTIONAR_PERMISOS", "descripcion": "Permite asignar y quitar permisos"},
    {"clave": "VER_CONTACTOS", "descripcion": "Permite ver la lista de contactos"},
    {"clave": "VER_GRADUACIONES", "descripcion": "Permite ver la página de graduaciones"},
    {"clave": "VER_USUARIOS", "descripcion": "Permite ver la lista de usuarios"},
    {"clave": "VER_CONTACTOS_GRADUACIONES", "descripcion": "Permite ver los contactos filtrados en graduaciones"},
]

CONFIGURACIONES_POR_DEFECTO = [
    {
        "clave": "graduaciones_mostrar_contactos",
        "valor": False,
        "descripcion": "Controla si los comerciales pueden ver contactos en graduaciones"
    },
    {
        "clave": "graduaciones_anio_seleccionado",
        "valor": settings.GRADUACIONES_ANIO_POR_DEFECTO,
        "descripcion": "Año seleccionado por el admin para filtrar graduaciones"
    },
]


def _usuario_oid(usuario_id):
    return ObjectId(usuario_id) if es_object_id(usuario_id) else usuario_id


class PermissionService:
    @staticmethod
    def tiene_permiso(usuario_id, clave):
        """Sin caché y fail-closed: cualquier error de consulta equivale a no tener el permiso."""
        try:
            db = get_mongo()
            permiso = db.permisos.find_one({"clave": clave})
            if not permiso:
                logger.info("Permiso %s no existe en el catálogo", clave)
                return False
            asignacion = db.usuario_permisos.find_one({
                "usuarioId": _usuario_oid(usuario_id),
                "permisoId": permiso["_id"]
            })
            return asignacion is not None
        except Exception as e:
            logger.error("Error verificando permiso %s para %s: %s", clave, usuario_id, e)
            return False

    @staticmethod
    def asignar(usuario_id, clave):
        db = get_mongo()
        permiso = db.permisos.find_one({"clave": clave})
        if not permiso:
            raise ValueError(f"Permiso {clave} no existe")
        db.usuario_permisos.update_one(
            {"usuarioId": _usuario_oid(usuario_id), "permisoId": permiso["_id"]},
            {"$setOnInsert": {"fechaAsignacion": datetime.utcnow()}},
            upsert=True
        )
        return True

    @staticmethod
    def revocar(usuario_id, clave):
        db = get_mongo()
        permiso = db.permisos.find_one({"clave": clave})
        if not permiso:
            return False
        res = db.usuario_permisos.delete_one({"usuarioId": _usuario_oid(usuario_id), "permisoId": permiso["_id"]})
        return res.deleted_count > 0

    @staticmethod
    def get_permisos_usuario(usuario_id):
        db = get_mongo()
        ids = [a["permisoId"] for a in db.usuario_permisos.find({"usuarioId": _usuario_oid(usuario_id)})]
        return sorted(p["clave"] for p in db.permisos.find({"_id": {"$in": ids}}))

    @staticmethod
    def inicializar(usuario_id='system'):
        """Crea los permisos y configuraciones que falten. Se puede ejecutar varias veces."""
        db = get_mongo()
        creados, existentes = [], []

        for data in PERMISOS_SISTEMA:
            existente = db.permisos.find_one({"clave": data["clave"]})
            if existente:
                existentes.append({"clave": existente["clave"], "id": str(existente["_id"])})
                continue
            res = db.permisos.insert_one(dict(data, createdAt=datetime.utcnow()))
            creados.append({"clave": data["clave"], "id": str(res.inserted_id)})
            logger.info("Permiso %s creado", data["clave"])

        configuraciones_creadas = []
        for config in CONFIGURACIONES_POR_DEFECTO:
            res = db.configuracion_sistema.update_one(
                {"clave": config["clave"]},
                {"$setOnInsert": {
                    "valor": config["valor"],
                    "descripcion": config["descripcion"],
                    "version": 1,
                    "actualizadoPor": str(usuario_id),
                    "actualizadoEn": datetime.utcnow()
                }},
                upsert=True
            )
            if res.upserted_id is not None:
                configuraciones_creadas.append(config["clave"])

        return {
            "permisosCreados": len(creados),
            "permisosExistentes": len(existentes),
            "configuracionesCreadas": configuraciones_creadas,
            "detalles": {"creados": creados, "existentes": existentes}
        }
