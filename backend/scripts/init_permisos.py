"""Crea el catálogo de permisos y las configuraciones por defecto. Idempotente."""
import sys
from crm_colegios.services.permission_service import PermissionService


def main():
    print("🔐 Inicializando permisos del sistema...")
    resultado = PermissionService.inicializar()
    for p in resultado["detalles"]["creados"]:
        print(f"   ✅ Creado: {p['clave']}")
    for p in resultado["detalles"]["existentes"]:
        print(f"   ⏭️  Ya existía: {p['clave']}")
    for clave in resultado["configuracionesCreadas"]:
        print(f"   ⚙️  Configuración creada: {clave}")
    print(f"\n📊 {resultado['permisosCreados']} creados, {resultado['permisosExistentes']} existentes")
    return 0


if __name__ == '__main__':
    sys.exit(main())
