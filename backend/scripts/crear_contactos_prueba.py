"""
Genera datos de prueba locales: colegios, titulaciones, comerciales con
jerarquía y contactos.

Uso:
    python scripts/crear_contactos_prueba.py [--contactos 200] [--colegios 8]
"""
import argparse
import random
import sys
from datetime import datetime
from faker import Faker
from crm_colegios.config.database import get_mongo
from crm_colegios.services.permission_service import PermissionService

fake = Faker('es_ES')
ANIOS = [2005, 2006, 2007, 2008]
DIAS = ['Lunes', 'Martes', 'Miércoles', 'Jueves', 'Viernes', 'Sábado', 'Domingo']


def crear_colegios(db, cantidad):
    ids = []
    inicio = db.universidades.count_documents({})
    for i in range(cantidad):
        nombre = f"Colegio {fake.unique.last_name()}"
        res = db.universidades.update_one(
            {"nombre": nombre},
            {"$setOnInsert": {
                "codigo": f"COL{inicio + i + 1:03d}",
                "nombre": nombre,
                "tipo": random.choice(['publica', 'privada']),
                "ciudad": fake.city(),
                "activa": True,
                "creadoPor": "system",
                "createdAt": datetime.utcnow()
            }},
            upsert=True
        )
        colegio = db.universidades.find_one({"nombre": nombre})
        ids.append(colegio)
        if res.upserted_id is not None:
            for titulo in ('Bachillerato', 'ESO'):
                db.titulaciones.insert_one({
                    "universidadId": colegio["_id"],
                    "nombre": titulo,
                    "codigo": f"{colegio['codigo']}-{titulo[:3].upper()}",
                    "tipo": 'grado',
                    "duracion": 4,
                    "creditos": 240,
                    "modalidad": 'presencial',
                    "estado": 'activa'
                })
    return ids


def crear_comerciales(db):
    """Un jefe con dos subordinados y uno de ellos con otro a cargo."""
    comerciales = []
    for _ in range(4):
        res = db.usuarios.insert_one({
            "nombre": fake.name(),
            "email": fake.unique.email(),
            "rol": "COMERCIAL",
            "estado": "ACTIVO"
        })
        comerciales.append(res.inserted_id)

    jefe, sub1, sub2, sub3 = comerciales
    for jefe_id, sub_id in ((jefe, sub1), (jefe, sub2), (sub1, sub3)):
        db.jerarquia_usuarios.update_one(
            {"jefeId": jefe_id, "subordinadoId": sub_id},
            {"$setOnInsert": {"createdAt": datetime.utcnow()}},
            upsert=True
        )
    return comerciales


def crear_contactos(db, colegios, comerciales, cantidad):
    creados = 0
    for _ in range(cantidad):
        colegio = random.choice(colegios)
        comercial = random.choice(comerciales)
        titulacion = db.titulaciones.find_one({"universidadId": colegio["_id"]})
        ahora = datetime.utcnow()
        db.contactos.insert_one({
            "nombreCompleto": fake.name(),
            "telefono": fake.numerify('6## ### ###'),
            "instagram": fake.user_name()[:30],
            "nombreColegio": colegio["nombre"],
            "colegioId": colegio["_id"],
            "anioNacimiento": random.choice(ANIOS),
            "comercialId": comercial,
            "createdBy": comercial,
            "diaLibre": random.choice(DIAS),
            "universidadId": colegio["_id"],
            "titulacionId": titulacion["_id"] if titulacion else None,
            "curso": random.randint(1, 6),
            "fechaAlta": ahora,
            "createdAt": ahora,
            "updatedAt": ahora
        })
        creados += 1
    return creados


def main(argv=None):
    parser = argparse.ArgumentParser(description="Crear datos de prueba")
    parser.add_argument('--contactos', type=int, default=200)
    parser.add_argument('--colegios', type=int, default=8)
    args = parser.parse_args(argv)

    db = get_mongo()
    print("🔐 Inicializando permisos...")
    PermissionService.inicializar()

    print(f"🏫 Creando {args.colegios} colegios...")
    colegios = crear_colegios(db, args.colegios)

    print("👥 Creando comerciales y jerarquía...")
    comerciales = crear_comerciales(db)
    for c in comerciales:
        PermissionService.asignar(c, 'VER_CONTACTOS')

    print(f"📇 Creando {args.contactos} contactos...")
    creados = crear_contactos(db, colegios, comerciales, args.contactos)
    print(f"✅ {creados} contactos creados")
    print(f"   Comercial jefe: {comerciales[0]}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
