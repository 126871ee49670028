import logging
from datetime import datetime
from flask import Flask, jsonify, request
from flask_cors import CORS
from flasgger import Swagger
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import HTTPException
from crm_colegios.config import settings
from crm_colegios.config.database import check_health
from crm_colegios.errors import ApiError
from crm_colegios.routes.contacto_routes import contacto_bp
from crm_colegios.routes.graduacion_routes import graduacion_bp
from crm_colegios.routes.universidad_routes import universidad_bp
from crm_colegios.routes.colegio_routes import colegio_bp
from crm_colegios.routes.producto_routes import producto_bp
from crm_colegios.routes.configuracion_routes import configuracion_bp
from crm_colegios.swagger_template import SWAGGER_TEMPLATE

logger = logging.getLogger(__name__)


def create_app():
    app = Flask(__name__)
    # Evitar redirecciones por trailing slash (causan "Redirect not allowed for preflight" en CORS)
    app.url_map.strict_slashes = False
    CORS(
        app,
        origins=settings.CORS_ORIGIN,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        supports_credentials=True,
    )

    app.register_blueprint(contacto_bp, url_prefix='/api/contactos')
    app.register_blueprint(graduacion_bp, url_prefix='/api/graduaciones')
    app.register_blueprint(universidad_bp, url_prefix='/api/universidades')
    app.register_blueprint(colegio_bp, url_prefix='/api/colegios')
    app.register_blueprint(producto_bp, url_prefix='/api/productos')
    app.register_blueprint(configuracion_bp, url_prefix='/api/configuracion')

    # Documentación en http://localhost:5000/apidocs
    Swagger(app, template=SWAGGER_TEMPLATE)

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    @app.route('/health', methods=['GET'])
    @app.route('/api/health', methods=['GET'])
    def health():
        database = check_health()
        status = 200 if database["status"] == "healthy" else 503
        return jsonify({
            "status": "OK" if status == 200 else "ERROR",
            "timestamp": datetime.utcnow().isoformat(),
            "database": database
        }), status

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            logger.error("%s %s: %s", request.method, request.path, e.message)
        return jsonify({"success": False, "message": e.message}), e.status_code

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate(e):
        logger.warning("Clave duplicada en %s %s: %s", request.method, request.path, e)
        return jsonify({"success": False, "message": "Ya existe un registro con esos datos"}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        logger.exception("Error no controlado en %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Error interno del servidor"}), 500

    return app
