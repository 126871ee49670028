from flask import Blueprint, request, jsonify
from crm_colegios.middleware.auth import autenticar_request, usuario_actual, require_permission
from crm_colegios.services.contacto_service import ContactoService
from crm_colegios.utils.serializacion import paginacion

contacto_bp = Blueprint('contactos', __name__)
contacto_bp.before_request(autenticar_request)


@contacto_bp.route('', methods=['GET'])
def get_contactos():
    contactos, total, page, limit = ContactoService.listar(usuario_actual(), request.args)
    return jsonify({"success": True, "data": contactos, "pagination": paginacion(page, limit, total)})


@contacto_bp.route('/todos', methods=['GET'])
@require_permission('VER_CONTACTOS')
def get_todos():
    contactos = ContactoService.todos()
    return jsonify({
        "success": True,
        "data": contactos,
        "total": len(contactos),
        "message": f"Se encontraron {len(contactos)} contactos"
    })


@contacto_bp.route('/colegios', methods=['GET'])
def get_colegios():
    return jsonify({"success": True, "data": {"colegios": ContactoService.nombres_colegios()}})


@contacto_bp.route('/comercial/<comercial_id>', methods=['GET'])
def get_por_comercial(comercial_id):
    contactos, total, page, limit, metadata = ContactoService.por_comercial(usuario_actual(), comercial_id, request.args)
    return jsonify({
        "success": True,
        "data": contactos,
        "pagination": paginacion(page, limit, total),
        "metadata": metadata
    })


# Importación masiva (JSON ya parseado del Excel en el cliente)
@contacto_bp.route('/importar', methods=['POST'])
def importar():
    body = request.get_json(silent=True) or {}
    resumen = ContactoService.importar(usuario_actual(), body.get('contactos'))
    return jsonify({
        "success": True,
        "message": f"Importación completada: {resumen['contactosCreados']} contactos creados, {resumen['errores']} errores",
        "data": resumen
    })


@contacto_bp.route('/<contacto_id>', methods=['GET'])
def get_contacto(contacto_id):
    return jsonify({"success": True, "data": ContactoService.obtener(usuario_actual(), contacto_id)})


@contacto_bp.route('', methods=['POST'])
def create_contacto():
    contacto = ContactoService.crear(usuario_actual(), request.get_json(silent=True))
    return jsonify({"success": True, "message": "Contacto creado exitosamente", "data": contacto}), 201


@contacto_bp.route('/<contacto_id>', methods=['PUT'])
def update_contacto(contacto_id):
    contacto = ContactoService.actualizar(usuario_actual(), contacto_id, request.get_json(silent=True))
    return jsonify({"success": True, "message": "Contacto actualizado exitosamente", "data": contacto})


@contacto_bp.route('/<contacto_id>', methods=['DELETE'])
@require_permission('ELIMINAR_CONTACTOS')
def delete_contacto(contacto_id):
    ContactoService.eliminar(usuario_actual(), contacto_id)
    return jsonify({"success": True, "message": "Contacto eliminado exitosamente"})


@contacto_bp.route('/<contacto_id>/asignar-comercial', methods=['PUT'])
@contacto_bp.route('/<contacto_id>/asignar', methods=['PUT'])
@require_permission('EDITAR_CONTACTOS')
def asignar_comercial(contacto_id):
    body = request.get_json(silent=True) or {}
    contacto = ContactoService.asignar_comercial(usuario_actual(), contacto_id, body.get('comercialId'))
    return jsonify({"success": True, "message": "Comercial asignado exitosamente", "data": contacto})
