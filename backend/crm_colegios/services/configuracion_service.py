import logging
from datetime import datetime
from pymongo import ReturnDocument
from crm_colegios.config import settings
from crm_colegios.config.database import get_mongo
from crm_colegios.errors import ConflictError, ValidationError
from crm_colegios.services.audit_service import AuditService, ENTIDAD_CONFIGURACION, ACCION_UPDATE

logger = logging.getLogger(__name__)

CLAVE_MOSTRAR_CONTACTOS = 'graduaciones_mostrar_contactos'
CLAVE_ANIO_SELECCIONADO = 'graduaciones_anio_seleccionado'


class ConfiguracionService:
    """
    Almacén clave/valor compartido por todas las instancias del servidor.
    Cada escritura incrementa `version` y devuelve el documento ya escrito,
    de modo que quien escribe lee su propio valor. Si el cliente envía la
    versión que leyó, la escritura solo se aplica sobre esa versión.
    """

    @staticmethod
    def formatear(config):
        if not config:
            return None
        actualizado_en = config.get("actualizadoEn")
        return {
            "clave": config["clave"],
            "valor": config.get("valor"),
            "descripcion": config.get("descripcion", ""),
            "version": config.get("version", 0),
            "actualizadoPor": config.get("actualizadoPor"),
            "actualizadoEn": actualizado_en.isoformat() if isinstance(actualizado_en, datetime) else actualizado_en
        }

    @staticmethod
    def obtener(clave):
        return get_mongo().configuracion_sistema.find_one({"clave": clave})

    @staticmethod
    def obtener_valor(clave, default=None):
        config = ConfiguracionService.obtener(clave)
        if not config or config.get("valor") is None:
            return default
        return config["valor"]

    @staticmethod
    def listar():
        return list(get_mongo().configuracion_sistema.find({}).sort("actualizadoEn", -1))

    @staticmethod
    def actualizar(clave, valor, usuario_id, descripcion=None, version_esperada=None):
        db = get_mongo()
        ahora = datetime.utcnow()
        anterior = db.configuracion_sistema.find_one({"clave": clave})

        cambios = {"valor": valor, "actualizadoPor": str(usuario_id), "actualizadoEn": ahora}
        update = {"$set": cambios, "$inc": {"version": 1}}
        if descripcion:
            cambios["descripcion"] = descripcion
        else:
            update["$setOnInsert"] = {"descripcion": "Configuración actualizada"}

        if version_esperada is None:
            config = db.configuracion_sistema.find_one_and_update(
                {"clave": clave}, update, upsert=True, return_document=ReturnDocument.AFTER
            )
        else:
            try:
                version_esperada = int(version_esperada)
            except (TypeError, ValueError):
                raise ValidationError('La versión debe ser un número entero')
            if anterior is None:
                if version_esperada != 0:
                    raise ConflictError(f"La configuración {clave} no existe (versión esperada {version_esperada})")
                config = db.configuracion_sistema.find_one_and_update(
                    {"clave": clave}, update, upsert=True, return_document=ReturnDocument.AFTER
                )
            else:
                config = db.configuracion_sistema.find_one_and_update(
                    {"clave": clave, "version": version_esperada}, update,
                    return_document=ReturnDocument.AFTER
                )
                if config is None:
                    actual = db.configuracion_sistema.find_one({"clave": clave}) or {}
                    raise ConflictError(
                        f"La configuración {clave} fue modificada (versión actual {actual.get('version', 0)})"
                    )

        logger.info("Configuración %s = %r (v%s) por %s", clave, valor, config.get("version"), usuario_id)
        AuditService.registrar(
            usuario_id, ENTIDAD_CONFIGURACION, clave, ACCION_UPDATE,
            antes=ConfiguracionService.formatear(anterior),
            despues=ConfiguracionService.formatear(config)
        )
        return config

    @staticmethod
    def anio_seleccionado(default=settings.GRADUACIONES_ANIO_POR_DEFECTO):
        valor = ConfiguracionService.obtener_valor(CLAVE_ANIO_SELECCIONADO)
        try:
            return int(valor) if valor is not None else default
        except (TypeError, ValueError):
            logger.warning("Valor de %s no numérico: %r", CLAVE_ANIO_SELECCIONADO, valor)
            return default

    @staticmethod
    def mostrar_contactos_graduaciones():
        valor = ConfiguracionService.obtener_valor(CLAVE_MOSTRAR_CONTACTOS, False)
        if isinstance(valor, str):
            return valor.strip().lower() == 'true'
        return valor is True
