import logging
from pymongo import MongoClient, ASCENDING, DESCENDING
from crm_colegios.config import settings

logger = logging.getLogger(__name__)

mongo_client = None
mongo_db = None


def init_mongo(uri=None, db_name=None):
    """
    Abre la conexión a MongoDB. Si la URI configurada falla (por ejemplo por
    credenciales en desarrollo) se intenta una vez sin autenticación.
    """
    global mongo_client, mongo_db
    uri = uri or settings.MONGO_URI
    db_name = db_name or settings.MONGO_DB

    try:
        mongo_client = MongoClient(uri, serverSelectionTimeoutMS=5000)
        mongo_client.admin.command('ping')
        mongo_db = mongo_client[db_name]
        logger.info("MongoDB conectado (%s)", db_name)
    except Exception as e:
        logger.warning("Fallo de conexión con MongoDB: %s", e)
        logger.info("Intentando conexión sin autenticación (solo para desarrollo)...")
        try:
            mongo_client = MongoClient('mongodb://localhost:27017/', serverSelectionTimeoutMS=5000)
            mongo_client.admin.command('ping')
            mongo_db = mongo_client[db_name]
            logger.warning("MongoDB conectado sin autenticación (modo desarrollo)")
        except Exception as e2:
            logger.error("No se pudo conectar a MongoDB: %s", e2)
            mongo_client = None
            mongo_db = None
            raise ConnectionError("MongoDB no está disponible. Verifica MONGO_URI.")

    ensure_indexes(mongo_db)
    return mongo_db


def set_mongo(db):
    """Inyecta una base ya abierta (tests con mongomock, scripts con otra URI)."""
    global mongo_db
    mongo_db = db
    if db is not None:
        ensure_indexes(db)


def get_mongo():
    if mongo_db is None:
        init_mongo()
    return mongo_db


def ensure_indexes(db):
    db.contactos.create_index([("nombreColegio", ASCENDING)])
    db.contactos.create_index([("comercialId", ASCENDING)])
    db.contactos.create_index([("createdBy", ASCENDING)])
    db.contactos.create_index([("anioNacimiento", ASCENDING)])
    db.contactos.create_index([("fechaAlta", DESCENDING)])
    db.contactos.create_index([("colegioId", ASCENDING)])

    db.universidades.create_index([("codigo", ASCENDING)], unique=True)
    db.universidades.create_index([("nombre", ASCENDING)], unique=True)
    db.universidades.create_index([("activa", ASCENDING)])
    db.titulaciones.create_index([("universidadId", ASCENDING)])

    db.graduaciones.create_index(
        [("nombreColegio", ASCENDING), ("anioNacimiento", ASCENDING)], unique=True
    )
    db.graduaciones.create_index([("anioNacimiento", ASCENDING)])

    db.configuracion_sistema.create_index([("clave", ASCENDING)], unique=True)
    db.permisos.create_index([("clave", ASCENDING)], unique=True)
    db.usuario_permisos.create_index(
        [("usuarioId", ASCENDING), ("permisoId", ASCENDING)], unique=True
    )
    db.jerarquia_usuarios.create_index(
        [("jefeId", ASCENDING), ("subordinadoId", ASCENDING)], unique=True
    )
    db.audit_logs.create_index([("timestamp", ASCENDING)])
    db.productos.create_index([("nombre", ASCENDING)])


def check_health():
    """Estado de la conexión para /health."""
    try:
        get_mongo().command('ping')
        return {"status": "healthy"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
