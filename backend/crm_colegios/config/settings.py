import os
from dotenv import load_dotenv

# El .env es opcional; en producción las variables vienen del entorno
load_dotenv()

MONGO_URI = os.getenv('MONGO_URI', 'mongodb://localhost:27017/')
MONGO_DB = os.getenv('MONGO_DB', 'colegios_db')

JWT_SECRET = os.getenv('JWT_SECRET', 'colegios-dev-secret-change-me')
JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')

CORS_ORIGIN = [o.strip() for o in os.getenv('CORS_ORIGIN', 'http://localhost:5173,http://localhost:3000').split(',') if o.strip()]
PORT = int(os.getenv('PORT', 5000))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR', '')

AUDIT_RETENTION_DAYS = int(os.getenv('AUDIT_RETENTION_DAYS', 90))
GRADUACIONES_ANIO_POR_DEFECTO = int(os.getenv('GRADUACIONES_ANIO_POR_DEFECTO', 2007))
