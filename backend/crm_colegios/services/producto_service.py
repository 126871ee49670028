import logging
from datetime import datetime
from crm_colegios.config.database import get_mongo
from crm_colegios.errors import ValidationError, NotFoundError
from crm_colegios.utils.serializacion import to_object_id, serializar

logger = logging.getLogger(__name__)


def _nombre(data):
    nombre = str((data or {}).get('nombre') or '').strip()
    if not nombre:
        raise ValidationError('El nombre del producto es requerido')
    return nombre


class ProductoService:
    @staticmethod
    def listar():
        return serializar(list(get_mongo().productos.find({"activo": True}).sort("nombre", 1)))

    @staticmethod
    def crear(user, data):
        db = get_mongo()
        nombre = _nombre(data)
        if db.productos.find_one({"nombre": nombre, "activo": True}):
            raise ValidationError('Ya existe un producto con ese nombre')

        ahora = datetime.utcnow()
        producto = {
            "nombre": nombre,
            "descripcion": str(data.get('descripcion') or '').strip(),
            "activo": True,
            "creadoPor": user['userId'],
            "createdAt": ahora,
            "updatedAt": ahora
        }
        db.productos.insert_one(producto)
        logger.info("Producto %s creado", nombre)
        return serializar(producto)

    @staticmethod
    def actualizar(user, producto_id, data):
        db = get_mongo()
        nombre = _nombre(data)
        oid = to_object_id(producto_id, 'ID de producto')
        if not db.productos.find_one({"_id": oid}):
            raise NotFoundError('Producto no encontrado')
        if db.productos.find_one({"nombre": nombre, "activo": True, "_id": {"$ne": oid}}):
            raise ValidationError('Ya existe otro producto con ese nombre')

        db.productos.update_one({"_id": oid}, {"$set": {
            "nombre": nombre,
            "descripcion": str(data.get('descripcion') or '').strip(),
            "actualizadoPor": user['userId'],
            "updatedAt": datetime.utcnow()
        }})
        return serializar(db.productos.find_one({"_id": oid}))

    @staticmethod
    def eliminar(user, producto_id):
        """Baja lógica: el producto sigue referenciado por graduaciones antiguas."""
        db = get_mongo()
        oid = to_object_id(producto_id, 'ID de producto')
        res = db.productos.update_one(
            {"_id": oid},
            {"$set": {"activo": False, "actualizadoPor": user['userId'], "updatedAt": datetime.utcnow()}}
        )
        if res.matched_count == 0:
            raise NotFoundError('Producto no encontrado')
        logger.info("Producto %s desactivado", oid)
        return True
