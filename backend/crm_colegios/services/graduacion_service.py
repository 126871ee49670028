import logging
from datetime import datetime
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError
from crm_colegios.config.database import get_mongo
from crm_colegios.middleware.auth import es_admin
from crm_colegios.services.audit_service import AuditService, ENTIDAD_GRADUACION, ACCION_CREATE, ACCION_UPDATE
from crm_colegios.services.configuracion_service import ConfiguracionService
from crm_colegios.services.contacto_service import indice_colegios
from crm_colegios.services.visibility_service import variantes_id
from crm_colegios.utils.normalizacion import normalizar_nombre
from crm_colegios.utils.serializacion import to_object_id, serializar

logger = logging.getLogger(__name__)

CAMPOS_EDITABLES = ['responsable', 'tipoProducto', 'producto', 'prevision', 'estado', 'observaciones', 'fechaGraduacion']


def _anio(valor):
    try:
        anio = int(valor)
    except (TypeError, ValueError):
        return None
    return anio or None


def _registro_base(db, nombre_colegio, anio):
    """Registro del que hereda un año nuevo: el año anterior más cercano o, si no hay, el último creado."""
    previo = db.graduaciones.find_one(
        {"nombreColegio": nombre_colegio, "anioNacimiento": {"$lt": anio}},
        sort=[("anioNacimiento", DESCENDING)]
    )
    if previo:
        return previo
    return db.graduaciones.find_one({"nombreColegio": nombre_colegio}, sort=[("createdAt", DESCENDING)])


def unificar_graduaciones(db, nombre_colegio):
    """
    Reasigna al nombre canónico del colegio las graduaciones guardadas con otra
    escritura del mismo nombre (mayúsculas, acentos, espacios). Si el nombre
    canónico ya tiene registro para ese año se fusionan: se conservan sus
    campos con valor, se completan los vacíos y se unen los contactos.
    """
    clave = normalizar_nombre(nombre_colegio)
    variantes = [
        n for n in db.graduaciones.distinct("nombreColegio")
        if n != nombre_colegio and normalizar_nombre(n) == clave
    ]
    movidas, fusionadas = 0, 0
    if not variantes:
        return {"movidas": movidas, "fusionadas": fusionadas}

    ahora = datetime.utcnow()
    for g in db.graduaciones.find({"nombreColegio": {"$in": variantes}}).sort("createdAt", 1):
        destino = db.graduaciones.find_one({"nombreColegio": nombre_colegio, "anioNacimiento": g["anioNacimiento"]})
        if destino is None:
            db.graduaciones.update_one(
                {"_id": g["_id"]}, {"$set": {"nombreColegio": nombre_colegio, "updatedAt": ahora}}
            )
            movidas += 1
            continue

        cambios = {k: g[k] for k in CAMPOS_EDITABLES if g.get(k) and not destino.get(k)}
        contactos = list(destino.get("contactos") or [])
        contactos += [c for c in g.get("contactos") or [] if c not in contactos]
        cambios.update({"contactos": contactos, "updatedAt": ahora})
        db.graduaciones.update_one({"_id": destino["_id"]}, {"$set": cambios})
        db.graduaciones.delete_one({"_id": g["_id"]})
        fusionadas += 1

    logger.info("Graduaciones de '%s' unificadas: %s movidas, %s fusionadas", nombre_colegio, movidas, fusionadas)
    return {"movidas": movidas, "fusionadas": fusionadas}


def _formatear(graduacion):
    return {
        "id": str(graduacion["_id"]),
        "nombreColegio": graduacion["nombreColegio"],
        "anioNacimiento": graduacion["anioNacimiento"],
        "responsable": graduacion.get("responsable", ""),
        "tipoProducto": graduacion.get("tipoProducto", ""),
        "producto": str(graduacion["producto"]) if graduacion.get("producto") else None,
        "prevision": graduacion.get("prevision", ""),
        "estado": graduacion.get("estado", ""),
        "observaciones": graduacion.get("observaciones", ""),
        "fechaGraduacion": graduacion.get("fechaGraduacion", "")
    }


class GraduacionService:
    @staticmethod
    def anios_disponibles():
        anios = [a for a in get_mongo().contactos.distinct("anioNacimiento") if a is not None]
        return sorted(anios, reverse=True)

    @staticmethod
    def _contactos_por_colegio(db, anio):
        grupos = list(db.contactos.aggregate([
            {"$match": {"anioNacimiento": anio}},
            {"$group": {
                "_id": "$nombreColegio",
                "totalContactos": {"$sum": 1},
                "contactos": {"$push": "$_id"}
            }}
        ]))

        ids = [cid for g in grupos for cid in g["contactos"]]
        detalles = {c["_id"]: c for c in db.contactos.find({"_id": {"$in": ids}})}
        comerciales = {str(c.get("comercialId")) for c in detalles.values() if c.get("comercialId")}
        nombres = {
            str(u["_id"]): u.get("nombre")
            for u in db.usuarios.find({"_id": {"$in": variantes_id(comerciales)}}, {"nombre": 1})
        } if comerciales else {}

        resultado = {}
        for g in grupos:
            contactos = []
            for cid in g["contactos"]:
                c = detalles.get(cid)
                if not c:
                    continue
                contactos.append(serializar({
                    "id": c["_id"],
                    "nombreCompleto": c.get("nombreCompleto"),
                    "telefono": c.get("telefono"),
                    "instagram": c.get("instagram"),
                    "anioNacimiento": c.get("anioNacimiento"),
                    "fechaAlta": c.get("fechaAlta"),
                    "comercialId": c.get("comercialId"),
                    "comercialNombre": nombres.get(str(c.get("comercialId")))
                }))
            resultado[g["_id"]] = {"totalContactos": g["totalContactos"], "contactos": contactos}
        return resultado

    @staticmethod
    def colegios_por_anio(anio, user):
        """
        Tabla de graduaciones del año: un registro por colegio activo (aunque no
        tenga contactos) más los colegios que solo aparecen en contactos. Solo lee.
        """
        db = get_mongo()
        anio_num = _anio(anio)
        if anio_num is None:
            anio_num = ConfiguracionService.anio_seleccionado(default=None)
            if anio_num is None:
                return {"anio": None, "graduaciones": [], "totalContactos": 0, "message": "No hay año seleccionado"}

        admin = es_admin(user)
        mostrar_contactos = admin or ConfiguracionService.mostrar_contactos_graduaciones()

        por_colegio = GraduacionService._contactos_por_colegio(db, anio_num)
        nombres = {u["nombre"] for u in db.universidades.find({"activa": True}, {"nombre": 1})}
        nombres.update(n for n in por_colegio if n)

        # El registro del año pedido gana; si no existe, el creado más recientemente
        guardadas = {}
        cursor = db.graduaciones.find({"nombreColegio": {"$in": list(nombres)}}).sort("createdAt", 1)
        for g in cursor:
            actual = guardadas.get(g["nombreColegio"])
            if actual is None or actual.get("anioNacimiento") != anio_num:
                guardadas[g["nombreColegio"]] = g

        filas = []
        for nombre in nombres:
            grupo = por_colegio.get(nombre, {"totalContactos": 0, "contactos": []})
            guardada = guardadas.get(nombre, {})
            filas.append({
                "id": nombre,
                "nombreColegio": nombre,
                "anioNacimiento": anio_num,
                "responsable": guardada.get("responsable") or "",
                "tipoProducto": guardada.get("tipoProducto") or "",
                "producto": str(guardada["producto"]) if guardada.get("producto") else None,
                "prevision": guardada.get("prevision") or "",
                "estado": guardada.get("estado") or "",
                "observaciones": guardada.get("observaciones") or "",
                "fechaGraduacion": guardada.get("fechaGraduacion") or "",
                "totalContactos": grupo["totalContactos"],
                "contactos": grupo["contactos"] if mostrar_contactos else []
            })

        filas.sort(key=lambda f: (-f["totalContactos"], f["nombreColegio"]))
        total = sum(f["totalContactos"] for f in filas)
        logger.info("Graduaciones %s: %s colegios, %s contactos (contactos visibles: %s)",
                    anio_num, len(filas), total, mostrar_contactos)
        return {
            "anio": anio_num,
            "graduaciones": filas,
            "totalContactos": total,
            "mostrarContactos": mostrar_contactos
        }

    @staticmethod
    def actualizar(nombre_colegio, campos, user):
        db = get_mongo()
        campos = campos or {}
        nombre_colegio = nombre_colegio.strip()
        colegio = indice_colegios(db).get(normalizar_nombre(nombre_colegio))
        if colegio:
            nombre_colegio = colegio["nombre"]
        anio = _anio(campos.get('anioNacimiento')) or ConfiguracionService.anio_seleccionado()

        cambios = {k: campos[k] for k in CAMPOS_EDITABLES if k in campos}
        if 'producto' in cambios:
            producto = cambios['producto']
            cambios['producto'] = to_object_id(producto, 'producto') if producto else None

        ahora = datetime.utcnow()
        existente = db.graduaciones.find_one({"nombreColegio": nombre_colegio, "anioNacimiento": anio})

        if existente is None:
            base = _registro_base(db, nombre_colegio, anio) or {}
            nueva = {k: base.get(k, None if k == 'producto' else '') for k in CAMPOS_EDITABLES}
            nueva.update(cambios)
            nueva.update({
                "nombreColegio": nombre_colegio,
                "anioNacimiento": anio,
                "contactos": [],
                "creadoPor": user['userId'],
                "createdAt": ahora,
                "updatedAt": ahora
            })
            try:
                db.graduaciones.insert_one(nueva)
                logger.info("Graduación creada: %s (%s)", nombre_colegio, anio)
                AuditService.registrar(user['userId'], ENTIDAD_GRADUACION, nueva["_id"], ACCION_CREATE, despues=nueva)
                return _formatear(nueva)
            except DuplicateKeyError:
                # Otra petición la creó entre la lectura y la inserción
                existente = db.graduaciones.find_one({"nombreColegio": nombre_colegio, "anioNacimiento": anio})

        cambios.update({"actualizadoPor": user['userId'], "updatedAt": ahora})
        db.graduaciones.update_one({"_id": existente["_id"]}, {"$set": cambios})
        actualizada = db.graduaciones.find_one({"_id": existente["_id"]})
        AuditService.registrar(
            user['userId'], ENTIDAD_GRADUACION, existente["_id"], ACCION_UPDATE,
            antes=existente, despues=actualizada
        )
        return _formatear(actualizada)

    @staticmethod
    def sincronizar(user):
        db = get_mongo()
        grupos = db.contactos.aggregate([
            {"$group": {
                "_id": {"nombreColegio": "$nombreColegio", "anioNacimiento": "$anioNacimiento"},
                "contactos": {"$push": "$_id"}
            }}
        ])

        creadas, actualizadas = 0, 0
        for grupo in grupos:
            nombre = grupo["_id"].get("nombreColegio")
            anio = grupo["_id"].get("anioNacimiento")
            if not nombre or anio is None:
                continue
            ahora = datetime.utcnow()

            existente = db.graduaciones.find_one({"nombreColegio": nombre, "anioNacimiento": anio})
            if existente:
                db.graduaciones.update_one(
                    {"_id": existente["_id"]},
                    {"$set": {"contactos": grupo["contactos"], "actualizadoPor": user['userId'], "updatedAt": ahora}}
                )
                actualizadas += 1
                continue

            base = _registro_base(db, nombre, anio) or {}
            nueva = {k: base.get(k, None if k == 'producto' else '') for k in CAMPOS_EDITABLES}
            nueva.update({
                "nombreColegio": nombre,
                "anioNacimiento": anio,
                "contactos": grupo["contactos"],
                "creadoPor": user['userId'],
                "createdAt": ahora,
                "updatedAt": ahora
            })
            db.graduaciones.insert_one(nueva)
            creadas += 1

        logger.info("Sincronización de graduaciones: %s creadas, %s actualizadas", creadas, actualizadas)
        return {
            "graduacionesCreadas": creadas,
            "graduacionesActualizadas": actualizadas,
            "totalProcesadas": creadas + actualizadas
        }
