import logging
import re
from datetime import datetime
from crm_colegios.config.database import get_mongo
from crm_colegios.errors import ValidationError, NotFoundError
from crm_colegios.middleware.auth import es_admin
from crm_colegios.services.audit_service import (
    AuditService, ENTIDAD_UNIVERSIDAD, ACCION_CREATE, ACCION_UPDATE, ACCION_DELETE
)
from crm_colegios.services.graduacion_service import unificar_graduaciones
from crm_colegios.services.visibility_service import variantes_id
from crm_colegios.utils.normalizacion import normalizar_nombre, normalizar_capitalizado
from crm_colegios.utils.serializacion import to_object_id, serializar, leer_paginacion

logger = logging.getLogger(__name__)

TIPOS = ['publica', 'privada']
CURSOS = range(1, 7)
CAMPOS_TITULACION = {"nombre": 1, "codigo": 1, "tipo": 1, "duracion": 1, "creditos": 1, "modalidad": 1, "descripcion": 1}


def _datos_auditoria(u):
    return {k: u.get(k) for k in ("codigo", "nombre", "tipo", "ciudad", "activa")}


def _validar_codigo(codigo):
    codigo = str(codigo).strip().upper()
    if len(codigo) > 10:
        raise ValidationError('El código no puede exceder 10 caracteres')
    return codigo


def _validar_renombrado(db, nombre_anterior, nombre_nuevo):
    """Un renombrado no puede dejar dos graduaciones del mismo colegio y año."""
    anios = set(db.graduaciones.distinct("anioNacimiento", {"nombreColegio": nombre_anterior}))
    choques = sorted(a for a in db.graduaciones.distinct("anioNacimiento", {"nombreColegio": nombre_nuevo}) if a in anios)
    if choques:
        raise ValidationError(
            f"Ya existen graduaciones de '{nombre_nuevo}' para los años {', '.join(map(str, choques))}"
        )


def _validar_tipo(tipo):
    tipo = str(tipo).strip().lower()
    if tipo not in TIPOS:
        raise ValidationError(f"Tipo inválido: {tipo}. Debe ser 'publica' o 'privada'")
    return tipo


class UniversidadService:
    @staticmethod
    def _titulaciones_activas(universidad_id):
        return list(get_mongo().titulaciones.find(
            {"universidadId": universidad_id, "estado": "activa"}, CAMPOS_TITULACION
        ))

    @staticmethod
    def listar(args):
        db = get_mongo()
        page, limit = leer_paginacion(args, limit_por_defecto=10)
        filtro = {}
        if args.get('search'):
            patron = {"$regex": re.escape(args['search']), "$options": "i"}
            filtro["$or"] = [{"nombre": patron}, {"codigo": patron}]
        if args.get('activa') is not None:
            filtro["activa"] = args.get('activa') == 'true'

        cursor = db.universidades.find(filtro).sort("nombre", 1).skip((page - 1) * limit).limit(limit)
        universidades = []
        for u in cursor:
            u["titulaciones"] = UniversidadService._titulaciones_activas(u["_id"])
            universidades.append(serializar(u))
        return universidades, db.universidades.count_documents(filtro), page, limit

    @staticmethod
    def obtener(universidad_id):
        oid = to_object_id(universidad_id, 'ID de universidad')
        universidad = get_mongo().universidades.find_one({"_id": oid})
        if not universidad:
            raise NotFoundError('Universidad no encontrada')
        universidad["titulaciones"] = UniversidadService._titulaciones_activas(oid)
        return serializar(universidad)

    @staticmethod
    def buscar_por_codigo(codigo):
        universidad = get_mongo().universidades.find_one({"codigo": str(codigo).upper(), "activa": True})
        if not universidad:
            raise NotFoundError('Universidad no encontrada')
        return serializar({"_id": universidad["_id"], "codigo": universidad["codigo"], "nombre": universidad["nombre"]})

    @staticmethod
    def estadisticas(user, activa=True):
        """
        Alumnos por colegio, titulación y curso (1..6). ADMIN ve los contactos
        de todos los comerciales; el resto solo los suyos.
        """
        db = get_mongo()
        filtro_contactos = {}
        if not es_admin(user):
            filtro_contactos["comercialId"] = {"$in": variantes_id([user['userId']])}

        universidades = list(db.universidades.find({"activa": activa}).sort("nombre", 1))
        contactos_por_universidad = {}
        comerciales = set()
        for c in db.contactos.find(dict(filtro_contactos, universidadId={"$in": [u["_id"] for u in universidades]})):
            contactos_por_universidad.setdefault(str(c["universidadId"]), []).append(c)
            if c.get("comercialId"):
                comerciales.add(str(c["comercialId"]))
        nombres = {
            str(u["_id"]): u.get("nombre")
            for u in db.usuarios.find({"_id": {"$in": variantes_id(comerciales)}}, {"nombre": 1})
        } if comerciales else {}

        resultado = []
        for u in universidades:
            contactos = contactos_por_universidad.get(str(u["_id"]), [])
            titulaciones = []
            for t in UniversidadService._titulaciones_activas(u["_id"]):
                propios = [c for c in contactos if str(c.get("titulacionId")) == str(t["_id"])]
                titulaciones.append(UniversidadService._estadisticas_titulacion(t, propios, nombres))

            data = serializar(u)
            data["totalAlumnos"] = sum(t["totalAlumnos"] for t in titulaciones)
            data["totalTitulaciones"] = len(titulaciones)
            data["titulaciones"] = titulaciones
            resultado.append(data)

        generales = {
            "totalUniversidades": len(resultado),
            "totalTitulaciones": sum(u["totalTitulaciones"] for u in resultado),
            "totalAlumnos": sum(u["totalAlumnos"] for u in resultado)
        }
        return generales, resultado

    @staticmethod
    def _estadisticas_titulacion(titulacion, contactos, nombres):
        cursos = []
        por_comercial, info = {}, {}
        for curso in CURSOS:
            alumnos, stats, info_curso = [], {}, {}
            for c in contactos:
                if c.get("curso") != curso:
                    continue
                comercial_id = str(c.get("comercialId"))
                alumnos.append(serializar({
                    "_id": c["_id"],
                    "nombreCompleto": c.get("nombreCompleto"),
                    "telefono": c.get("telefono"),
                    "instagram": c.get("instagram"),
                    "anioNacimiento": c.get("anioNacimiento"),
                    "fechaAlta": c.get("fechaAlta"),
                    "comercialId": c.get("comercialId"),
                    "comercialNombre": nombres.get(comercial_id)
                }))
                stats[comercial_id] = stats.get(comercial_id, 0) + 1
                por_comercial[comercial_id] = por_comercial.get(comercial_id, 0) + 1
                if comercial_id in nombres:
                    info_curso[comercial_id] = nombres[comercial_id]
                    info[comercial_id] = nombres[comercial_id]
            cursos.append({
                "curso": curso,
                "totalAlumnos": len(alumnos),
                "alumnos": alumnos,
                "estadisticasPorComercial": stats,
                "comercialesInfo": info_curso
            })

        data = serializar(titulacion)
        data.update({
            "totalAlumnos": sum(c["totalAlumnos"] for c in cursos),
            "cursos": cursos,
            "estadisticasPorComercial": por_comercial,
            "comercialesInfo": info
        })
        return data

    @staticmethod
    def crear(user, data):
        data = data or {}
        if not all(data.get(k) for k in ('codigo', 'nombre', 'tipo', 'ciudad')):
            raise ValidationError('Código, nombre, tipo y ciudad son obligatorios')

        db = get_mongo()
        codigo = _validar_codigo(data['codigo'])
        nombre = str(data['nombre']).strip()
        if db.universidades.find_one({"codigo": codigo}):
            raise ValidationError('Ya existe una universidad con este código')
        if db.universidades.find_one({"nombre": nombre}):
            raise ValidationError('Ya existe una universidad con este nombre')

        ahora = datetime.utcnow()
        universidad = {
            "codigo": codigo,
            "nombre": nombre,
            "tipo": _validar_tipo(data['tipo']),
            "ciudad": str(data['ciudad']).strip(),
            "activa": True,
            "creadoPor": user['userId'],
            "createdAt": ahora,
            "updatedAt": ahora
        }
        db.universidades.insert_one(universidad)
        logger.info("Colegio %s (%s) creado", nombre, codigo)

        asociados = UniversidadService._asociar_contactos(universidad)
        AuditService.registrar(
            user['userId'], ENTIDAD_UNIVERSIDAD, universidad["_id"], ACCION_CREATE,
            despues=dict(_datos_auditoria(universidad), contactosAsociados=asociados)
        )
        return serializar(universidad), asociados

    @staticmethod
    def _asociar_contactos(universidad):
        """
        Enlaza los contactos cuyo nombre de colegio coincide al normalizar y
        lleva al nombre canónico sus graduaciones.
        """
        db = get_mongo()
        clave = normalizar_nombre(universidad["nombre"])
        ids = [
            c["_id"] for c in db.contactos.find({}, {"nombreColegio": 1})
            if normalizar_nombre(c.get("nombreColegio")) == clave
        ]
        unificar_graduaciones(db, universidad["nombre"])
        if not ids:
            return 0
        db.contactos.update_many(
            {"_id": {"$in": ids}},
            {"$set": {"colegioId": universidad["_id"], "nombreColegio": universidad["nombre"]}}
        )
        logger.info("%s contactos asociados a %s", len(ids), universidad["nombre"])
        return len(ids)

    @staticmethod
    def actualizar(user, universidad_id, data):
        db = get_mongo()
        data = data or {}
        oid = to_object_id(universidad_id, 'ID de universidad')
        anterior = db.universidades.find_one({"_id": oid})
        if not anterior:
            raise NotFoundError('Universidad no encontrada')

        cambios = {}
        if data.get('codigo'):
            codigo = _validar_codigo(data['codigo'])
            if codigo != anterior["codigo"] and db.universidades.find_one({"codigo": codigo, "_id": {"$ne": oid}}):
                raise ValidationError('Ya existe una universidad con este código')
            cambios["codigo"] = codigo
        if data.get('nombre'):
            nombre = str(data['nombre']).strip()
            if nombre != anterior["nombre"] and db.universidades.find_one({"nombre": nombre, "_id": {"$ne": oid}}):
                raise ValidationError('Ya existe una universidad con este nombre')
            if nombre != anterior["nombre"]:
                _validar_renombrado(db, anterior["nombre"], nombre)
            cambios["nombre"] = nombre
        if data.get('tipo'):
            cambios["tipo"] = _validar_tipo(data['tipo'])
        if data.get('ciudad'):
            cambios["ciudad"] = str(data['ciudad']).strip()
        if isinstance(data.get('activa'), bool):
            cambios["activa"] = data['activa']
        cambios["updatedAt"] = datetime.utcnow()

        db.universidades.update_one({"_id": oid}, {"$set": cambios})
        actualizada = db.universidades.find_one({"_id": oid})

        if actualizada["nombre"] != anterior["nombre"]:
            UniversidadService._renombrar(oid, anterior["nombre"], actualizada["nombre"])

        AuditService.registrar(
            user['userId'], ENTIDAD_UNIVERSIDAD, oid, ACCION_UPDATE,
            antes=_datos_auditoria(anterior), despues=_datos_auditoria(actualizada)
        )
        return serializar(actualizada)

    @staticmethod
    def _renombrar(oid, nombre_anterior, nombre_nuevo):
        db = get_mongo()
        contactos = db.contactos.update_many(
            {"$or": [{"colegioId": oid}, {"nombreColegio": nombre_anterior}]},
            {"$set": {"nombreColegio": nombre_nuevo, "colegioId": oid}}
        )
        graduaciones = db.graduaciones.update_many(
            {"nombreColegio": nombre_anterior}, {"$set": {"nombreColegio": nombre_nuevo}}
        )
        unificar_graduaciones(db, nombre_nuevo)
        logger.info("Colegio renombrado '%s' -> '%s': %s contactos, %s graduaciones",
                    nombre_anterior, nombre_nuevo, contactos.modified_count, graduaciones.modified_count)

    @staticmethod
    def eliminar(user, universidad_id):
        db = get_mongo()
        oid = to_object_id(universidad_id, 'ID de universidad')
        universidad = db.universidades.find_one({"_id": oid})
        if not universidad:
            raise NotFoundError('Universidad no encontrada')

        titulaciones = db.titulaciones.delete_many({"universidadId": oid})
        db.universidades.delete_one({"_id": oid})
        db.contactos.update_many({"colegioId": oid}, {"$set": {"colegioId": None}})
        logger.info("Colegio %s eliminado junto a %s titulaciones", universidad["nombre"], titulaciones.deleted_count)

        AuditService.registrar(user['userId'], ENTIDAD_UNIVERSIDAD, oid, ACCION_DELETE, antes=_datos_auditoria(universidad))
        return True

    @staticmethod
    def normalizar_localidades(user):
        db = get_mongo()
        universidades = list(db.universidades.find({}, {"ciudad": 1}))
        actualizadas, errores, cambios = 0, 0, []

        for u in universidades:
            try:
                anterior = u.get("ciudad") or ''
                nueva = normalizar_capitalizado(anterior)
                if nueva and nueva != anterior:
                    db.universidades.update_one({"_id": u["_id"]}, {"$set": {"ciudad": nueva}})
                    actualizadas += 1
                    cambios.append({"universidadId": str(u["_id"]), "localidadAnterior": anterior, "localidadNueva": nueva})
            except Exception as e:
                logger.error("Error normalizando la localidad de %s: %s", u["_id"], e)
                errores += 1

        AuditService.registrar(
            user['userId'], ENTIDAD_UNIVERSIDAD, 'BULK_LOCALIDAD_NORMALIZATION', ACCION_UPDATE,
            despues={"universidadesActualizadas": actualizadas, "errores": errores, "cambios": cambios[:10]}
        )
        return {"universidadesActualizadas": actualizadas, "errores": errores, "totalUniversidades": len(universidades)}
