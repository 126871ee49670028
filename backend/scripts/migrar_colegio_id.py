"""
Migración única: enlaza cada contacto con su colegio (colegioId) comparando
nombres normalizados, y deja el nombre canónico del colegio en el contacto
y en sus graduaciones.
Se puede repetir sin efectos: los contactos ya enlazados se saltan.
"""
import sys
from crm_colegios.config.database import get_mongo
from crm_colegios.services.contacto_service import indice_colegios
from crm_colegios.services.graduacion_service import unificar_graduaciones
from crm_colegios.utils.normalizacion import normalizar_nombre


def migrar(db):
    indice = indice_colegios(db)
    enlazados, sin_colegio, errores = 0, 0, 0

    for contacto in db.contactos.find({"colegioId": None}, {"nombreColegio": 1}):
        try:
            colegio = indice.get(normalizar_nombre(contacto.get("nombreColegio")))
            if not colegio:
                sin_colegio += 1
                continue
            db.contactos.update_one(
                {"_id": contacto["_id"]},
                {"$set": {"colegioId": colegio["_id"], "nombreColegio": colegio["nombre"]}}
            )
            enlazados += 1
        except Exception as e:
            print(f"   ❌ Error en contacto {contacto['_id']}: {e}")
            errores += 1

    graduaciones = 0
    for colegio in indice.values():
        try:
            resultado = unificar_graduaciones(db, colegio["nombre"])
            graduaciones += resultado["movidas"] + resultado["fusionadas"]
        except Exception as e:
            print(f"   ❌ Error unificando graduaciones de {colegio['nombre']}: {e}")
            errores += 1

    return {"enlazados": enlazados, "sinColegio": sin_colegio, "graduaciones": graduaciones, "errores": errores}


def main():
    print("🔗 Enlazando contactos con su colegio...")
    resultado = migrar(get_mongo())
    print(f"✅ {resultado['enlazados']} contactos enlazados")
    print(f"⚠️ {resultado['sinColegio']} contactos sin colegio en la tabla")
    print(f"🎓 {resultado['graduaciones']} graduaciones llevadas al nombre canónico")
    print(f"❌ {resultado['errores']} errores")
    return 1 if resultado['errores'] else 0


if __name__ == '__main__':
    sys.exit(main())
