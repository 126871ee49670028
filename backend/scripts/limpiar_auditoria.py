import argparse
import sys
from crm_colegios.config import settings
from crm_colegios.config.logging_config import setup_logging
from crm_colegios.services.audit_service import AuditService


def main(argv=None):
    parser = argparse.ArgumentParser(description="Borrar entradas de auditoría antiguas")
    parser.add_argument('--dias', type=int, default=settings.AUDIT_RETENTION_DAYS,
                        help=f"Días a conservar (por defecto {settings.AUDIT_RETENTION_DAYS})")
    args = parser.parse_args(argv)

    setup_logging()
    eliminadas = AuditService.limpiar_antiguos(args.dias)
    print(f"🧹 {eliminadas} entradas de auditoría con más de {args.dias} días eliminadas")
    return 0


if __name__ == '__main__':
    sys.exit(main())
