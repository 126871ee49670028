import math
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from crm_colegios.errors import ValidationError


def to_object_id(value, campo='id'):
    """Convierte un id recibido por la API; un valor mal formado es un 400, no un 500."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value).strip())
    except (InvalidId, TypeError):
        raise ValidationError(f"{campo} inválido: {value}")


def es_object_id(value):
    return isinstance(value, ObjectId) or ObjectId.is_valid(str(value))


def serializar(data):
    """ObjectId -> str y datetime -> ISO, recorriendo dicts y listas."""
    if isinstance(data, list):
        return [serializar(d) for d in data]
    if isinstance(data, dict):
        return {k: serializar(v) for k, v in data.items()}
    if isinstance(data, ObjectId):
        return str(data)
    if isinstance(data, datetime):
        return data.isoformat()
    return data


def leer_paginacion(args, limit_por_defecto=999999):
    try:
        page = max(int(args.get('page', 1)), 1)
        limit = max(int(args.get('limit', limit_por_defecto)), 1)
    except (TypeError, ValueError):
        raise ValidationError("page y limit deben ser números enteros")
    return page, limit


def paginacion(page, limit, total):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0
    }
