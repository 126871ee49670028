"""
Copia las colecciones de una base MongoDB a otra (por ejemplo de local a Atlas).

Uso:
    MIGRACION_ORIGEN_URI=mongodb://localhost:27017/ MONGO_URI=mongodb+srv://... python scripts/migrar_a_cloud.py
"""
import os
import sys
from pymongo import MongoClient
from crm_colegios.config import settings

ORIGEN_URI = os.getenv('MIGRACION_ORIGEN_URI', 'mongodb://localhost:27017/')
DESTINO_URI = os.getenv('MIGRACION_DESTINO_URI', settings.MONGO_URI)
BATCH_SIZE = 1000

COLECCIONES = [
    'usuarios',
    'contactos',
    'universidades',
    'titulaciones',
    'graduaciones',
    'productos',
    'configuracion_sistema',
    'permisos',
    'usuario_permisos',
    'jerarquia_usuarios',
    'audit_logs',
]


def migrar_coleccion(origen, destino, nombre):
    print(f"\n📦 Migrando colección: {nombre}")
    if nombre not in origen.list_collection_names():
        print(f"   ⚠️ {nombre} no existe en el origen, saltando...")
        return 0

    total = origen[nombre].count_documents({})
    print(f"   📊 Documentos en origen: {total}")
    destino[nombre].delete_many({})

    copiados = 0
    lote = []
    for doc in origen[nombre].find({}):
        lote.append(doc)
        if len(lote) >= BATCH_SIZE:
            destino[nombre].insert_many(lote)
            copiados += len(lote)
            lote = []
    if lote:
        destino[nombre].insert_many(lote)
        copiados += len(lote)

    print(f"   ✅ {copiados}/{total} documentos copiados")
    return copiados


def main():
    if ORIGEN_URI == DESTINO_URI:
        print("❌ El origen y el destino son la misma URI")
        return 1

    origen = MongoClient(ORIGEN_URI, serverSelectionTimeoutMS=5000)[settings.MONGO_DB]
    destino = MongoClient(DESTINO_URI, serverSelectionTimeoutMS=5000)[settings.MONGO_DB]

    exitosas, errores = 0, 0
    for nombre in COLECCIONES:
        try:
            migrar_coleccion(origen, destino, nombre)
            exitosas += 1
        except Exception as e:
            print(f"   ❌ Error migrando {nombre}: {e}")
            errores += 1

    print(f"\n🏁 Migración terminada: {exitosas} colecciones, {errores} errores")
    return 1 if errores else 0


if __name__ == '__main__':
    sys.exit(main())
