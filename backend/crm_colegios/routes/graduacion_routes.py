from flask import Blueprint, request, jsonify
from crm_colegios.middleware.auth import autenticar_request, usuario_actual, require_admin
from crm_colegios.services.graduacion_service import GraduacionService

graduacion_bp = Blueprint('graduaciones', __name__)
graduacion_bp.before_request(autenticar_request)


@graduacion_bp.route('/anios', methods=['GET'])
@require_admin('Solo los administradores pueden acceder a esta información')
def get_anios():
    return jsonify({"success": True, "anios": GraduacionService.anios_disponibles()})


@graduacion_bp.route('/colegios/<anio>', methods=['GET'])
def get_colegios_por_anio(anio):
    """Con anio 0 se usa el año seleccionado por el administrador."""
    resultado = GraduacionService.colegios_por_anio(anio, usuario_actual())
    return jsonify(dict(resultado, success=True))


@graduacion_bp.route('/sync', methods=['POST'])
@require_admin('Solo los administradores pueden sincronizar graduaciones')
def sincronizar():
    resumen = GraduacionService.sincronizar(usuario_actual())
    return jsonify(dict(resumen, success=True, message='Sincronización completada'))


@graduacion_bp.route('/<path:nombre_colegio>', methods=['PUT'])
def update_graduacion(nombre_colegio):
    graduacion = GraduacionService.actualizar(nombre_colegio, request.get_json(silent=True), usuario_actual())
    return jsonify({"success": True, "message": "Graduación actualizada correctamente", "graduacion": graduacion})
