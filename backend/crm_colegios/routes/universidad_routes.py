from flask import Blueprint, request, jsonify
from crm_colegios.middleware.auth import autenticar_request, usuario_actual, require_admin
from crm_colegios.services.universidad_service import UniversidadService
from crm_colegios.utils.serializacion import paginacion

universidad_bp = Blueprint('universidades', __name__)
universidad_bp.before_request(autenticar_request)


@universidad_bp.route('', methods=['GET'])
def get_universidades():
    universidades, total, page, limit = UniversidadService.listar(request.args)
    return jsonify({"success": True, "universidades": universidades, "pagination": paginacion(page, limit, total)})


@universidad_bp.route('/estadisticas', methods=['GET'])
def get_estadisticas():
    activa = request.args.get('activa', 'true') == 'true'
    generales, universidades = UniversidadService.estadisticas(usuario_actual(), activa)
    return jsonify({"success": True, "estadisticasGenerales": generales, "universidades": universidades})


@universidad_bp.route('/codigo/<codigo>', methods=['GET'])
def get_por_codigo(codigo):
    return jsonify({"success": True, "data": UniversidadService.buscar_por_codigo(codigo)})


@universidad_bp.route('/normalizar-localidades', methods=['POST'])
@require_admin('No tienes permisos para normalizar localidades de universidades')
def normalizar_localidades():
    resumen = UniversidadService.normalizar_localidades(usuario_actual())
    return jsonify(dict(resumen, success=True, message='Normalización de localidades completada'))


@universidad_bp.route('/<universidad_id>', methods=['GET'])
def get_universidad(universidad_id):
    return jsonify({"success": True, "data": UniversidadService.obtener(universidad_id)})


@universidad_bp.route('', methods=['POST'])
@require_admin('No tienes permisos para crear universidades')
def create_universidad():
    universidad, asociados = UniversidadService.crear(usuario_actual(), request.get_json(silent=True))
    return jsonify({
        "success": True,
        "message": "Colegio creado exitosamente",
        "universidad": universidad,
        "contactosAsociados": asociados
    }), 201


@universidad_bp.route('/<universidad_id>', methods=['PUT'])
@require_admin('No tienes permisos para actualizar universidades')
def update_universidad(universidad_id):
    universidad = UniversidadService.actualizar(usuario_actual(), universidad_id, request.get_json(silent=True))
    return jsonify({"success": True, "message": "Colegio actualizado exitosamente", "universidad": universidad})


@universidad_bp.route('/<universidad_id>', methods=['DELETE'])
@require_admin('No tienes permisos para eliminar universidades')
def delete_universidad(universidad_id):
    UniversidadService.eliminar(usuario_actual(), universidad_id)
    return jsonify({"success": True, "message": "Colegio eliminado exitosamente"})
