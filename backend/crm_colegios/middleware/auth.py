from functools import wraps
import jwt
from flask import request, g
from crm_colegios.config import settings
from crm_colegios.errors import AuthError, ForbiddenError
from crm_colegios.services.permission_service import PermissionService

ROL_ADMIN = 'ADMIN'
ROL_COMERCIAL = 'COMERCIAL'


def autenticar_request():
    """
    Hook before_request de los blueprints protegidos. Solo verifica el bearer
    token (la emisión vive en el servicio de autenticación) y deja el usuario
    en g.user = {userId, rol, nombre, email}.
    """
    if request.method == 'OPTIONS':
        return None

    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        raise AuthError('Token de acceso requerido')

    token = header[len('Bearer '):].strip()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError('Token expirado')
    except jwt.InvalidTokenError:
        raise AuthError('Token inválido')

    user_id = payload.get('userId') or payload.get('sub')
    if not user_id:
        raise AuthError('Token inválido: falta el usuario')

    g.user = {
        "userId": str(user_id),
        "rol": payload.get('rol', ROL_COMERCIAL),
        "nombre": payload.get('nombre'),
        "email": payload.get('email'),
    }
    return None


def usuario_actual():
    user = getattr(g, 'user', None)
    if user is None:
        raise AuthError('Usuario no autenticado')
    return user


def es_admin(user):
    return user is not None and user.get('rol') == ROL_ADMIN


def require_admin(mensaje='Solo los administradores pueden realizar esta acción'):
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not es_admin(usuario_actual()):
                raise ForbiddenError(mensaje)
            return f(*args, **kwargs)
        return wrapper
    return decorator


def require_permission(clave):
    """ADMIN pasa siempre; el resto necesita el permiso asignado."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            user = usuario_actual()
            if not es_admin(user) and not PermissionService.tiene_permiso(user['userId'], clave):
                raise ForbiddenError(f'Se requiere el permiso {clave}')
            return f(*args, **kwargs)
        return wrapper
    return decorator
