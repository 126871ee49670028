import sys
from crm_colegios.config.logging_config import setup_logging
from crm_colegios.services.graduacion_service import GraduacionService


def main():
    setup_logging()
    print("🔄 Sincronizando graduaciones con los contactos...")
    resultado = GraduacionService.sincronizar({"userId": "system", "rol": "ADMIN"})
    print(f"✅ Creadas: {resultado['graduacionesCreadas']}")
    print(f"✅ Actualizadas: {resultado['graduacionesActualizadas']}")
    print(f"📊 Total procesadas: {resultado['totalProcesadas']}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
