import logging
import re
from datetime import datetime
from bson import ObjectId
from crm_colegios.config.database import get_mongo
from crm_colegios.errors import ValidationError, NotFoundError, ForbiddenError
from crm_colegios.middleware.auth import es_admin
from crm_colegios.services.audit_service import (
    AuditService, ENTIDAD_CONTACTO, ACCION_CREATE, ACCION_UPDATE, ACCION_DELETE
)
from crm_colegios.services.visibility_service import VisibilityService, variantes_id
from crm_colegios.utils.normalizacion import normalizar_nombre
from crm_colegios.utils.serializacion import to_object_id, es_object_id, serializar, leer_paginacion

logger = logging.getLogger(__name__)

DIAS_LIBRES = ['Lunes', 'Martes', 'Miércoles', 'Jueves', 'Viernes', 'Sábado', 'Domingo']
TELEFONO_RE = re.compile(r'^[+]?[0-9\s\-\(\)\.]{7,20}$')
INSTAGRAM_RE = re.compile(r'^[a-zA-Z0-9_\-\.]+$')
ANIO_MINIMO = 1950

CAMPOS_EDITABLES = [
    'nombreCompleto', 'telefono', 'instagram', 'nombreColegio', 'anioNacimiento',
    'comercialId', 'diaLibre', 'universidadId', 'titulacionId', 'curso'
]


def _texto(valor):
    if valor is None:
        return None
    valor = str(valor).strip()
    return valor or None


def _id_o_texto(valor):
    valor = _texto(valor)
    if valor is None:
        return None
    return ObjectId(valor) if es_object_id(valor) else valor


def limpiar_contacto(data):
    """Normaliza los campos recibidos; solo se devuelven los presentes en data."""
    limpio = {}
    for campo in CAMPOS_EDITABLES:
        if campo not in data:
            continue
        valor = data[campo]
        if campo in ('comercialId', 'universidadId', 'titulacionId'):
            limpio[campo] = _id_o_texto(valor)
        elif campo == 'instagram':
            valor = _texto(valor)
            if valor:
                valor = valor.lstrip('@') or None
            limpio[campo] = valor
        elif campo in ('anioNacimiento', 'curso'):
            if valor is None or str(valor).strip() == '':
                limpio[campo] = None
            else:
                try:
                    limpio[campo] = int(str(valor).strip())
                except ValueError:
                    raise ValidationError(f"{campo} debe ser un número entero")
        else:
            limpio[campo] = _texto(valor)
    return limpio


def validar_contacto(contacto):
    errores = []
    anio_actual = datetime.utcnow().year

    nombre = contacto.get('nombreCompleto')
    if not nombre:
        errores.append('Nombre completo es requerido')
    elif len(nombre) > 200:
        errores.append('El nombre no puede exceder 200 caracteres')

    colegio = contacto.get('nombreColegio')
    if not colegio:
        errores.append('Nombre del colegio es requerido')
    elif len(colegio) > 200:
        errores.append('El nombre del colegio no puede exceder 200 caracteres')

    anio = contacto.get('anioNacimiento')
    if anio is None:
        errores.append('Año de nacimiento es requerido')
    elif not ANIO_MINIMO <= anio <= anio_actual:
        errores.append(f'El año de nacimiento debe estar entre {ANIO_MINIMO} y {anio_actual}')

    telefono = contacto.get('telefono')
    instagram = contacto.get('instagram')
    if not telefono and not instagram:
        errores.append('Debe proporcionar al menos un teléfono o un Instagram')
    if telefono and not TELEFONO_RE.match(telefono):
        errores.append('Formato de teléfono inválido')
    if instagram:
        if len(instagram) > 30:
            errores.append('El Instagram no puede exceder 30 caracteres')
        elif not INSTAGRAM_RE.match(instagram):
            errores.append('Formato de Instagram inválido')

    dia = contacto.get('diaLibre')
    if dia and dia not in DIAS_LIBRES:
        errores.append(f'Día libre inválido: {dia}')

    curso = contacto.get('curso')
    if curso is not None and not 1 <= curso <= 6:
        errores.append('El curso debe estar entre 1 y 6')

    if errores:
        raise ValidationError(', '.join(errores))


def indice_colegios(db=None):
    """{nombre normalizado: colegio} de la tabla de colegios."""
    if db is None:
        db = get_mongo()
    return {
        normalizar_nombre(u["nombre"]): u
        for u in db.universidades.find({}, {"nombre": 1})
    }


def aplicar_colegio(contacto, indice):
    """Enlaza el contacto con su colegio y deja el nombre canónico."""
    colegio = indice.get(normalizar_nombre(contacto.get('nombreColegio')))
    if colegio:
        contacto['colegioId'] = colegio['_id']
        contacto['nombreColegio'] = colegio['nombre']
    else:
        contacto['colegioId'] = None
    return contacto


def _filtro_texto(q):
    patron = {"$regex": re.escape(q), "$options": "i"}
    return {"$or": [
        {"nombreCompleto": patron},
        {"telefono": patron},
        {"instagram": patron},
        {"nombreColegio": patron}
    ]}


def _orden(args):
    sort_by = args.get('sortBy') or 'fechaAlta'
    return sort_by, 1 if args.get('sortOrder') == 'asc' else -1


def _con_comerciales(contactos):
    """Añade `comercial: {_id, nombre, email}` con una única consulta a usuarios."""
    ids = {str(c["comercialId"]) for c in contactos if c.get("comercialId")}
    usuarios = {}
    if ids:
        for u in get_mongo().usuarios.find({"_id": {"$in": variantes_id(ids)}}, {"nombre": 1, "email": 1}):
            usuarios[str(u["_id"])] = {"_id": str(u["_id"]), "nombre": u.get("nombre"), "email": u.get("email")}

    resultado = []
    for c in contactos:
        data = serializar(c)
        comercial = usuarios.get(str(c.get("comercialId")))
        if comercial:
            data["comercial"] = comercial
        resultado.append(data)
    return resultado


class ContactoService:
    @staticmethod
    def _buscar(filtros, args):
        db = get_mongo()
        page, limit = leer_paginacion(args)
        sort_by, orden = _orden(args)
        cursor = db.contactos.find(filtros).sort(sort_by, orden).skip((page - 1) * limit).limit(limit)
        contactos = _con_comerciales(list(cursor))
        return contactos, db.contactos.count_documents(filtros), page, limit

    @staticmethod
    def listar(user, args):
        condiciones = []
        if args.get('nombreColegio'):
            condiciones.append({"nombreColegio": {"$regex": re.escape(args['nombreColegio']), "$options": "i"}})
        if args.get('q'):
            condiciones.append(_filtro_texto(args['q']))
        visibilidad = VisibilityService.filtro_visibilidad(user['userId'], user['rol'])
        if visibilidad:
            condiciones.append(visibilidad)

        filtros = {"$and": condiciones} if condiciones else {}
        return ContactoService._buscar(filtros, args)

    @staticmethod
    def todos():
        contactos = list(get_mongo().contactos.find({}).sort("fechaAlta", -1))
        return _con_comerciales(contactos)

    @staticmethod
    def nombres_colegios():
        return [u["nombre"] for u in get_mongo().universidades.find({"activa": True}, {"nombre": 1}).sort("nombre", 1)]

    @staticmethod
    def por_comercial(user, comercial_id, args):
        if not es_admin(user) and user['userId'] != str(comercial_id):
            raise ForbiddenError('No tienes permisos para ver los contactos de este comercial')

        subordinados = sorted(VisibilityService.get_subordinados(comercial_id))
        incluidos = [str(comercial_id)] + subordinados
        condiciones = [{"$or": [
            {"comercialId": {"$in": variantes_id(incluidos)}},
            {"createdBy": {"$in": variantes_id([comercial_id])}}
        ]}]
        if args.get('nombreColegio'):
            condiciones.append({"nombreColegio": {"$regex": re.escape(args['nombreColegio']), "$options": "i"}})
        if args.get('q'):
            condiciones.append(_filtro_texto(args['q']))

        contactos, total, page, limit = ContactoService._buscar({"$and": condiciones}, args)
        metadata = {"comercialId": str(comercial_id), "subordinados": subordinados, "comercialesIncluidos": incluidos}
        return contactos, total, page, limit, metadata

    @staticmethod
    def _obtener_visible(user, contacto_id):
        oid = to_object_id(contacto_id, 'ID de contacto')
        contacto = get_mongo().contactos.find_one({"_id": oid})
        if not contacto:
            raise NotFoundError('Contacto no encontrado')
        if not VisibilityService.tiene_acceso(user['userId'], user['rol'], oid):
            raise ForbiddenError('No tienes permisos para ver este contacto')
        return contacto

    @staticmethod
    def obtener(user, contacto_id):
        contacto = ContactoService._obtener_visible(user, contacto_id)
        return _con_comerciales([contacto])[0]

    @staticmethod
    def _nuevo_documento(user, data, indice):
        contacto = limpiar_contacto(data)
        validar_contacto(contacto)
        ahora = datetime.utcnow()
        contacto['comercialId'] = contacto.get('comercialId') or _id_o_texto(user['userId'])
        contacto['createdBy'] = _id_o_texto(user['userId'])
        contacto['fechaAlta'] = ahora
        contacto['createdAt'] = ahora
        contacto['updatedAt'] = ahora
        return aplicar_colegio(contacto, indice)

    @staticmethod
    def crear(user, data):
        db = get_mongo()
        contacto = ContactoService._nuevo_documento(user, data or {}, indice_colegios(db))
        res = db.contactos.insert_one(contacto)
        logger.info("Contacto %s creado por %s", res.inserted_id, user['userId'])
        AuditService.registrar(user['userId'], ENTIDAD_CONTACTO, res.inserted_id, ACCION_CREATE, despues=contacto)
        return _con_comerciales([contacto])[0]

    @staticmethod
    def actualizar(user, contacto_id, data):
        db = get_mongo()
        anterior = ContactoService._obtener_visible(user, contacto_id)

        cambios = limpiar_contacto(data or {})
        fusionado = dict(anterior, **cambios)
        validar_contacto(fusionado)
        if 'nombreColegio' in cambios:
            aplicar_colegio(fusionado, indice_colegios(db))
            cambios['nombreColegio'] = fusionado['nombreColegio']
            cambios['colegioId'] = fusionado['colegioId']
        cambios['updatedAt'] = datetime.utcnow()

        db.contactos.update_one({"_id": anterior["_id"]}, {"$set": cambios})
        actualizado = db.contactos.find_one({"_id": anterior["_id"]})
        AuditService.registrar(
            user['userId'], ENTIDAD_CONTACTO, anterior["_id"], ACCION_UPDATE,
            antes=anterior, despues=actualizado
        )
        return _con_comerciales([actualizado])[0]

    @staticmethod
    def eliminar(user, contacto_id):
        db = get_mongo()
        oid = to_object_id(contacto_id, 'ID de contacto')
        contacto = db.contactos.find_one({"_id": oid})
        if not contacto:
            raise NotFoundError('Contacto no encontrado')

        db.contactos.delete_one({"_id": oid})
        logger.info("Contacto %s eliminado por %s", oid, user['userId'])
        AuditService.registrar(user['userId'], ENTIDAD_CONTACTO, oid, ACCION_DELETE, antes=contacto)
        return True

    @staticmethod
    def asignar_comercial(user, contacto_id, comercial_id):
        if not comercial_id or not es_object_id(comercial_id):
            raise ValidationError('Se requiere un comercialId válido')
        db = get_mongo()
        oid = to_object_id(contacto_id, 'ID de contacto')
        anterior = db.contactos.find_one({"_id": oid})
        if not anterior:
            raise NotFoundError('Contacto no encontrado')

        db.contactos.update_one(
            {"_id": oid},
            {"$set": {"comercialId": ObjectId(str(comercial_id)), "updatedAt": datetime.utcnow()}}
        )
        actualizado = db.contactos.find_one({"_id": oid})
        AuditService.registrar(user['userId'], ENTIDAD_CONTACTO, oid, ACCION_UPDATE, antes=anterior, despues=actualizado)
        return _con_comerciales([actualizado])[0]

    @staticmethod
    def importar(user, filas):
        """
        Inserta fila a fila. Una fila inválida no detiene la importación ni
        deshace las anteriores; cada una queda reflejada en `detalles`.
        """
        if not isinstance(filas, list):
            raise ValidationError('Se requiere un array de contactos en el campo "contactos"')

        db = get_mongo()
        indice = indice_colegios(db)
        creados, errores, detalles = 0, 0, []

        for fila, data in enumerate(filas, start=1):
            try:
                if not isinstance(data, dict):
                    raise ValidationError('La fila no es un objeto')
                contacto = ContactoService._nuevo_documento(user, data, indice)
                res = db.contactos.insert_one(contacto)
                AuditService.registrar(user['userId'], ENTIDAD_CONTACTO, res.inserted_id, ACCION_CREATE, despues=contacto)
                creados += 1
                detalles.append({"fila": fila, "contacto": {"id": str(res.inserted_id), "nombre": contacto['nombreCompleto']}})
            except ValidationError as e:
                errores += 1
                detalles.append({"fila": fila, "error": e.message})
            except Exception as e:
                logger.error("Importación: error en la fila %s: %s", fila, e)
                errores += 1
                detalles.append({"fila": fila, "error": str(e) or 'Error desconocido al crear contacto'})

        logger.info("Importación completada: %s creados, %s errores", creados, errores)
        return {"contactosCreados": creados, "errores": errores, "detalles": detalles}
