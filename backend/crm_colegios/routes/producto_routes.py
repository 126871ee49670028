from flask import Blueprint, request, jsonify
from crm_colegios.middleware.auth import autenticar_request, usuario_actual
from crm_colegios.services.producto_service import ProductoService

producto_bp = Blueprint('productos', __name__)
producto_bp.before_request(autenticar_request)


@producto_bp.route('', methods=['GET'])
def get_productos():
    return jsonify({"success": True, "productos": ProductoService.listar()})


@producto_bp.route('', methods=['POST'])
def create_producto():
    producto = ProductoService.crear(usuario_actual(), request.get_json(silent=True))
    return jsonify({"success": True, "message": "Producto creado correctamente", "producto": producto}), 201


@producto_bp.route('/<producto_id>', methods=['PUT'])
def update_producto(producto_id):
    producto = ProductoService.actualizar(usuario_actual(), producto_id, request.get_json(silent=True))
    return jsonify({"success": True, "message": "Producto actualizado correctamente", "producto": producto})


@producto_bp.route('/<producto_id>', methods=['DELETE'])
def delete_producto(producto_id):
    ProductoService.eliminar(usuario_actual(), producto_id)
    return jsonify({"success": True, "message": "Producto eliminado correctamente"})
