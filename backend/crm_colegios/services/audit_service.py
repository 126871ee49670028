import logging
from datetime import datetime, timedelta
from flask import has_request_context, request
from crm_colegios.config import settings
from crm_colegios.config.database import get_mongo
from crm_colegios.utils.serializacion import es_object_id
from bson import ObjectId

logger = logging.getLogger(__name__)

ENTIDAD_CONTACTO = 'CONTACTO'
ENTIDAD_UNIVERSIDAD = 'UNIVERSIDAD'
ENTIDAD_GRADUACION = 'GRADUACION'
ENTIDAD_CONFIGURACION = 'CONFIGURACION'

ACCION_CREATE = 'CREATE'
ACCION_UPDATE = 'UPDATE'
ACCION_DELETE = 'DELETE'


class AuditService:
    @staticmethod
    def registrar(usuario_id, entidad, entidad_id, accion, antes=None, despues=None):
        """
        Deja una entrada en audit_logs. Nunca lanza: si la escritura falla se
        registra en el log y la operación que la disparó sigue adelante.
        """
        try:
            doc = {
                "usuarioId": ObjectId(usuario_id) if es_object_id(usuario_id) else usuario_id,
                "entidad": entidad,
                "entidadId": str(entidad_id),
                "accion": accion,
                "antes": antes,
                "despues": despues,
                "timestamp": datetime.utcnow()
            }
            if has_request_context():
                doc["ip"] = request.remote_addr
                doc["userAgent"] = request.headers.get('User-Agent')
            get_mongo().audit_logs.insert_one(doc)
            return True
        except Exception as e:
            logger.error("No se pudo registrar auditoría %s %s %s: %s", accion, entidad, entidad_id, e)
            return False

    @staticmethod
    def limpiar_antiguos(dias=None):
        dias = settings.AUDIT_RETENTION_DAYS if dias is None else dias
        corte = datetime.utcnow() - timedelta(days=dias)
        res = get_mongo().audit_logs.delete_many({"timestamp": {"$lt": corte}})
        logger.info("Auditoría: %s entradas anteriores a %s eliminadas", res.deleted_count, corte.date())
        return res.deleted_count
