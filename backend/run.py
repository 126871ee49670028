from crm_colegios.app import create_app
from crm_colegios.config import settings
from crm_colegios.config.logging_config import setup_logging

setup_logging()
app = create_app()

if __name__ == '__main__':
    print(f"CRM Colegios iniciado en puerto {settings.PORT}")
    print(f"Documentación Swagger: http://localhost:{settings.PORT}/apidocs")
    app.run(host='0.0.0.0', port=settings.PORT, debug=True)
