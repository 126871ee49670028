import logging
from bson import ObjectId
from crm_colegios.config.database import get_mongo
from crm_colegios.middleware.auth import ROL_ADMIN

logger = logging.getLogger(__name__)


def variantes_id(ids):
    """Los ids de usuario pueden estar guardados como ObjectId o como string."""
    valores = []
    for i in ids:
        valores.append(str(i))
        if ObjectId.is_valid(str(i)):
            valores.append(ObjectId(str(i)))
    return valores


class VisibilityService:
    @staticmethod
    def get_subordinados(jefe_id):
        """
        Cierre transitivo de jerarquia_usuarios desde jefe_id. Se recorre por
        niveles (una consulta $in por nivel) con un conjunto de visitados, así
        que un ciclo en la jerarquía termina igual. El propio jefe nunca forma
        parte del resultado.
        """
        db = get_mongo()
        raiz = str(jefe_id)
        visitados = {raiz}
        frontera = [raiz]

        while frontera:
            relaciones = db.jerarquia_usuarios.find(
                {"jefeId": {"$in": variantes_id(frontera)}},
                {"subordinadoId": 1}
            )
            siguiente = []
            for rel in relaciones:
                sub_id = str(rel["subordinadoId"])
                if sub_id not in visitados:
                    visitados.add(sub_id)
                    siguiente.append(sub_id)
            frontera = siguiente

        visitados.discard(raiz)
        return visitados

    @staticmethod
    def get_comerciales_visibles(usuario_id):
        return {str(usuario_id)} | VisibilityService.get_subordinados(usuario_id)

    @staticmethod
    def get_contactos_visibles(usuario_id, rol):
        """
        None para ADMIN (sin filtro). Para el resto, los ids de contactos cuyo
        comercialId o createdBy está en {usuario} ∪ subordinados. Ante un error
        se devuelve el conjunto vacío: un fallo niega acceso.
        """
        if rol == ROL_ADMIN:
            return None
        try:
            comerciales = variantes_id(VisibilityService.get_comerciales_visibles(usuario_id))
            cursor = get_mongo().contactos.find(
                {"$or": [
                    {"comercialId": {"$in": comerciales}},
                    {"createdBy": {"$in": comerciales}}
                ]},
                {"_id": 1}
            )
            return {str(c["_id"]) for c in cursor}
        except Exception as e:
            logger.error("Error resolviendo contactos visibles para %s: %s", usuario_id, e)
            return set()

    @staticmethod
    def filtro_visibilidad(usuario_id, rol):
        visibles = VisibilityService.get_contactos_visibles(usuario_id, rol)
        if visibles is None:
            return {}
        return {"_id": {"$in": variantes_id(visibles)}}

    @staticmethod
    def tiene_acceso(usuario_id, rol, contacto_id):
        visibles = VisibilityService.get_contactos_visibles(usuario_id, rol)
        if visibles is None:
            return True
        return str(contacto_id) in visibles
