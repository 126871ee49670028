"""
Elimina contactos duplicados: mismo nombre normalizado, colegio, año y
teléfono/instagram. Se conserva el más antiguo.

Uso:
    python scripts/limpiar_duplicados.py [--dry-run]
"""
import argparse
import sys
from crm_colegios.config.database import get_mongo
from crm_colegios.services.audit_service import AuditService, ENTIDAD_CONTACTO, ACCION_DELETE
from crm_colegios.utils.normalizacion import normalizar_nombre


def clave_contacto(c):
    return (
        normalizar_nombre(c.get("nombreCompleto")),
        normalizar_nombre(c.get("nombreColegio")),
        c.get("anioNacimiento"),
        (c.get("telefono") or "").replace(" ", ""),
        (c.get("instagram") or "").lower(),
    )


def buscar_duplicados(db):
    """Ids a borrar; el primero de cada grupo (más antiguo) se conserva."""
    vistos = {}
    duplicados = []
    for c in db.contactos.find({}).sort([("fechaAlta", 1), ("_id", 1)]):
        clave = clave_contacto(c)
        if clave in vistos:
            duplicados.append(c)
        else:
            vistos[clave] = c["_id"]
    return duplicados


def main(argv=None):
    parser = argparse.ArgumentParser(description="Eliminar contactos duplicados")
    parser.add_argument('--dry-run', action='store_true', help="Solo listar, sin borrar")
    args = parser.parse_args(argv)

    db = get_mongo()
    duplicados = buscar_duplicados(db)
    print(f"🔍 {len(duplicados)} contactos duplicados encontrados")

    eliminados, errores = 0, 0
    for c in duplicados:
        print(f"   - {c.get('nombreCompleto')} ({c.get('nombreColegio')}, {c.get('anioNacimiento')})")
        if args.dry_run:
            continue
        try:
            db.contactos.delete_one({"_id": c["_id"]})
            AuditService.registrar('system', ENTIDAD_CONTACTO, c["_id"], ACCION_DELETE, antes=c)
            eliminados += 1
        except Exception as e:
            print(f"   ❌ Error eliminando {c['_id']}: {e}")
            errores += 1

    if args.dry_run:
        print("ℹ️ Modo --dry-run: no se eliminó nada")
    else:
        print(f"✅ {eliminados} eliminados, {errores} errores")
    return 1 if errores else 0


if __name__ == '__main__':
    sys.exit(main())
