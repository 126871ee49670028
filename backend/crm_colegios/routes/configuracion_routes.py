from flask import Blueprint, request, jsonify
from crm_colegios.errors import ValidationError, NotFoundError
from crm_colegios.middleware.auth import autenticar_request, usuario_actual, require_admin
from crm_colegios.services.configuracion_service import ConfiguracionService, CLAVE_ANIO_SELECCIONADO
from crm_colegios.services.permission_service import PermissionService

configuracion_bp = Blueprint('configuracion', __name__)
configuracion_bp.before_request(autenticar_request)


@configuracion_bp.route('', methods=['GET'])
def get_configuraciones():
    configuraciones = [ConfiguracionService.formatear(c) for c in ConfiguracionService.listar()]
    return jsonify({"success": True, "configuraciones": configuraciones})


@configuracion_bp.route('/init-permissions', methods=['POST'])
@require_admin('Solo los administradores pueden inicializar permisos')
def init_permissions():
    resultado = PermissionService.inicializar(usuario_actual()['userId'])
    return jsonify({"success": True, "message": "Permisos inicializados correctamente", "data": resultado})


@configuracion_bp.route('/graduaciones_anio_seleccionado', methods=['PUT'])
@require_admin('Solo los administradores pueden cambiar el año seleccionado')
def update_anio_seleccionado():
    body = request.get_json(silent=True) or {}
    try:
        anio = int(body.get('anio'))
    except (TypeError, ValueError):
        raise ValidationError('El año debe ser un número válido')
    if not 1900 <= anio <= 2100:
        raise ValidationError('El año debe ser un número válido entre 1900 y 2100')

    config = ConfiguracionService.actualizar(
        CLAVE_ANIO_SELECCIONADO, anio, usuario_actual()['userId'],
        descripcion='Año seleccionado por el admin para filtrar graduaciones',
        version_esperada=body.get('version')
    )
    return jsonify({
        "success": True,
        "message": f"Año {anio} guardado correctamente",
        "configuracion": ConfiguracionService.formatear(config)
    })


@configuracion_bp.route('/<clave>', methods=['GET'])
def get_configuracion(clave):
    config = ConfiguracionService.obtener(clave)
    if not config:
        raise NotFoundError('Configuración no encontrada')
    return jsonify({"success": True, "configuracion": ConfiguracionService.formatear(config)})


@configuracion_bp.route('/<clave>', methods=['PUT'])
@require_admin('Solo los administradores pueden modificar la configuración del sistema')
def update_configuracion(clave):
    body = request.get_json(silent=True) or {}
    if 'valor' not in body or body['valor'] is None:
        raise ValidationError('El valor es requerido')

    config = ConfiguracionService.actualizar(
        clave, body['valor'], usuario_actual()['userId'],
        descripcion=body.get('descripcion'),
        version_esperada=body.get('version')
    )
    return jsonify({
        "success": True,
        "message": "Configuración actualizada correctamente",
        "configuracion": ConfiguracionService.formatear(config)
    })
