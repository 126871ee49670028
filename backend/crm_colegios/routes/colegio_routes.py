from flask import Blueprint, request, jsonify
from crm_colegios.middleware.auth import autenticar_request, require_permission
from crm_colegios.services.colegio_service import ColegioService
from crm_colegios.utils.serializacion import paginacion

colegio_bp = Blueprint('colegios', __name__)
colegio_bp.before_request(autenticar_request)


@colegio_bp.route('', methods=['GET'])
@require_permission('VER_CONTACTOS')
def get_colegios():
    colegios, total, page, limit = ColegioService.listar(request.args)
    return jsonify({"success": True, "data": colegios, "pagination": paginacion(page, limit, total)})


@colegio_bp.route('/todos', methods=['GET'])
@require_permission('VER_CONTACTOS')
def get_todos():
    return jsonify({"success": True, "data": ColegioService.todos(request.args)})


@colegio_bp.route('/nombres', methods=['GET'])
@require_permission('VER_CONTACTOS')
def get_nombres():
    return jsonify({"success": True, "data": {"colegios": ColegioService.nombres(request.args)}})
