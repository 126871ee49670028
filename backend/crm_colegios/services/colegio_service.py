import re
from crm_colegios.config.database import get_mongo
from crm_colegios.utils.serializacion import serializar, leer_paginacion

CAMPOS_COLEGIO = {"codigo": 1, "nombre": 1, "tipo": 1, "ciudad": 1, "activa": 1}


def _filtro(args, solo_nombre=False):
    filtro = {"activa": args.get('activo', 'true') == 'true'}
    if args.get('search'):
        patron = {"$regex": re.escape(args['search']), "$options": "i"}
        filtro["$or"] = [{"nombre": patron}] if solo_nombre else [{"nombre": patron}, {"ciudad": patron}]
    return filtro


class ColegioService:
    """Vistas de solo lectura sobre la colección de colegios (universidades)."""

    @staticmethod
    def listar(args):
        db = get_mongo()
        page, limit = leer_paginacion(args, limit_por_defecto=50)
        filtro = _filtro(args)
        cursor = db.universidades.find(filtro, CAMPOS_COLEGIO).sort("nombre", 1).skip((page - 1) * limit).limit(limit)
        return serializar(list(cursor)), db.universidades.count_documents(filtro), page, limit

    @staticmethod
    def todos(args):
        cursor = get_mongo().universidades.find(_filtro(args), CAMPOS_COLEGIO).sort("nombre", 1)
        return serializar(list(cursor))

    @staticmethod
    def nombres(args):
        cursor = get_mongo().universidades.find(_filtro(args, solo_nombre=True), {"nombre": 1}).sort("nombre", 1)
        return [c["nombre"] for c in cursor]
