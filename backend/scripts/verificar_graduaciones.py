import sys
from crm_colegios.config.database import get_mongo


def resumen(db):
    """{anio: {"graduaciones": n, "contactos": n}} ordenado por año descendente."""
    por_anio = {}
    for g in db.graduaciones.find({}, {"anioNacimiento": 1, "contactos": 1}):
        fila = por_anio.setdefault(g.get("anioNacimiento"), {"graduaciones": 0, "contactos": 0})
        fila["graduaciones"] += 1
        fila["contactos"] += len(g.get("contactos") or [])
    return dict(sorted(por_anio.items(), key=lambda kv: kv[0] or 0, reverse=True))


def main():
    db = get_mongo()
    print("🔍 Verificando graduaciones...")
    print(f"📊 Total graduaciones: {db.graduaciones.count_documents({})}")
    for anio, fila in resumen(db).items():
        en_contactos = db.contactos.count_documents({"anioNacimiento": anio})
        aviso = "" if en_contactos == fila["contactos"] else f"  ⚠️ contactos actuales: {en_contactos}"
        print(f"- Año {anio}: {fila['graduaciones']} colegios, {fila['contactos']} contactos{aviso}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
