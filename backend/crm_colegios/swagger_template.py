"""
Especificación OpenAPI/Swagger para la API CRM Colegios.
Usado por Flasgger para documentación interactiva en /apidocs
"""

_ID = {"in": "path", "name": "id", "required": True, "type": "string"}
_BODY = {"in": "body", "name": "body", "schema": {"type": "object"}}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "CRM Colegios API",
        "description": "API de contactos, colegios y graduaciones. Todas las rutas requieren un token Bearer.",
        "version": "1.0.0",
        "contact": {
            "name": "CRM Colegios"
        }
    },
    "basePath": "/api",
    "schemes": ["http", "https"],
    "consumes": ["application/json"],
    "produces": ["application/json"],
    "securityDefinitions": {
        "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"}
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Contactos", "description": "Contactos de alumnos y su asignación a comerciales"},
        {"name": "Graduaciones", "description": "Tabla de graduaciones por colegio y año"},
        {"name": "Universidades", "description": "Gestión de colegios (colección universidades)"},
        {"name": "Colegios", "description": "Vistas de solo lectura de colegios"},
        {"name": "Productos", "description": "Catálogo de productos de graduación"},
        {"name": "Configuracion", "description": "Configuración del sistema y permisos"}
    ],
    "paths": {
        # --- CONTACTOS ---
        "/contactos": {
            "get": {
                "tags": ["Contactos"],
                "summary": "Listar contactos visibles para el usuario",
                "parameters": [
                    {"in": "query", "name": "nombreColegio", "type": "string"},
                    {"in": "query", "name": "q", "type": "string"},
                    {"in": "query", "name": "page", "type": "integer", "default": 1},
                    {"in": "query", "name": "limit", "type": "integer"},
                    {"in": "query", "name": "sortBy", "type": "string", "default": "fechaAlta"},
                    {"in": "query", "name": "sortOrder", "type": "string", "enum": ["asc", "desc"]}
                ],
                "responses": {"200": {"description": "Lista paginada"}}
            },
            "post": {
                "tags": ["Contactos"],
                "summary": "Crear contacto",
                "parameters": [{
                    "in": "body",
                    "name": "body",
                    "required": True,
                    "schema": {
                        "type": "object",
                        "required": ["nombreCompleto", "nombreColegio", "anioNacimiento"],
                        "properties": {
                            "nombreCompleto": {"type": "string"},
                            "telefono": {"type": "string", "example": "+34 600 123 456"},
                            "instagram": {"type": "string", "example": "@alumno"},
                            "nombreColegio": {"type": "string"},
                            "anioNacimiento": {"type": "integer", "example": 2007},
                            "comercialId": {"type": "string"},
                            "diaLibre": {"type": "string", "example": "Lunes"},
                            "curso": {"type": "integer"}
                        }
                    }
                }],
                "responses": {"201": {"description": "Contacto creado"}, "400": {"description": "Datos inválidos"}}
            }
        },
        "/contactos/todos": {
            "get": {"tags": ["Contactos"], "summary": "Todos los contactos (VER_CONTACTOS)", "responses": {"200": {"description": "Lista"}, "403": {"description": "Sin permiso"}}}
        },
        "/contactos/colegios": {
            "get": {"tags": ["Contactos"], "summary": "Nombres de colegios activos", "responses": {"200": {"description": "Lista"}}}
        },
        "/contactos/comercial/{comercialId}": {
            "get": {
                "tags": ["Contactos"],
                "summary": "Contactos de un comercial y sus subordinados",
                "parameters": [{"in": "path", "name": "comercialId", "required": True, "type": "string"}],
                "responses": {"200": {"description": "Lista con metadata"}, "403": {"description": "Sin permiso"}}
            }
        },
        "/contactos/importar": {
            "post": {
                "tags": ["Contactos"],
                "summary": "Importar contactos",
                "parameters": [{
                    "in": "body",
                    "name": "body",
                    "schema": {"type": "object", "properties": {"contactos": {"type": "array", "items": {"type": "object"}}}}
                }],
                "responses": {"200": {"description": "Resumen por fila"}, "400": {"description": "contactos no es una lista"}}
            }
        },
        "/contactos/{id}": {
            "get": {"tags": ["Contactos"], "summary": "Obtener contacto", "parameters": [_ID], "responses": {"200": {"description": "OK"}, "403": {"description": "No visible"}, "404": {"description": "No encontrado"}}},
            "put": {"tags": ["Contactos"], "summary": "Actualizar contacto", "parameters": [_ID, _BODY], "responses": {"200": {"description": "OK"}, "400": {"description": "Datos inválidos"}}},
            "delete": {"tags": ["Contactos"], "summary": "Eliminar contacto (ELIMINAR_CONTACTOS)", "parameters": [_ID], "responses": {"200": {"description": "Eliminado"}, "404": {"description": "No encontrado"}}}
        },
        "/contactos/{id}/asignar-comercial": {
            "put": {
                "tags": ["Contactos"],
                "summary": "Reasignar comercial (EDITAR_CONTACTOS)",
                "parameters": [_ID, {"in": "body", "name": "body", "schema": {"type": "object", "properties": {"comercialId": {"type": "string"}}}}],
                "responses": {"200": {"description": "Asignado"}, "400": {"description": "comercialId inválido"}}
            }
        },
        # --- GRADUACIONES ---
        "/graduaciones/anios": {
            "get": {"tags": ["Graduaciones"], "summary": "Años de nacimiento con contactos (ADMIN)", "responses": {"200": {"description": "Lista"}}}
        },
        "/graduaciones/colegios/{anio}": {
            "get": {
                "tags": ["Graduaciones"],
                "summary": "Tabla de graduaciones de un año (0 = año seleccionado)",
                "parameters": [{"in": "path", "name": "anio", "required": True, "type": "integer"}],
                "responses": {"200": {"description": "Filas por colegio"}}
            }
        },
        "/graduaciones/{nombreColegio}": {
            "put": {
                "tags": ["Graduaciones"],
                "summary": "Actualizar campos editables de la graduación",
                "parameters": [
                    {"in": "path", "name": "nombreColegio", "required": True, "type": "string"},
                    {"in": "body", "name": "body", "schema": {
                        "type": "object",
                        "properties": {
                            "anioNacimiento": {"type": "integer"},
                            "responsable": {"type": "string"},
                            "tipoProducto": {"type": "string"},
                            "producto": {"type": "string"},
                            "prevision": {"type": "string"},
                            "estado": {"type": "string"},
                            "observaciones": {"type": "string"},
                            "fechaGraduacion": {"type": "string"}
                        }
                    }}
                ],
                "responses": {"200": {"description": "Guardada"}, "400": {"description": "producto inválido"}}
            }
        },
        "/graduaciones/sync": {
            "post": {"tags": ["Graduaciones"], "summary": "Sincronizar graduaciones con contactos (ADMIN)", "responses": {"200": {"description": "Resumen"}}}
        },
        # --- UNIVERSIDADES ---
        "/universidades": {
            "get": {
                "tags": ["Universidades"],
                "summary": "Listar colegios con sus titulaciones",
                "parameters": [
                    {"in": "query", "name": "page", "type": "integer", "default": 1},
                    {"in": "query", "name": "limit", "type": "integer", "default": 10},
                    {"in": "query", "name": "search", "type": "string"},
                    {"in": "query", "name": "activa", "type": "string", "enum": ["true", "false"]}
                ],
                "responses": {"200": {"description": "Lista paginada"}}
            },
            "post": {
                "tags": ["Universidades"],
                "summary": "Crear colegio (ADMIN)",
                "parameters": [{
                    "in": "body",
                    "name": "body",
                    "schema": {
                        "type": "object",
                        "required": ["codigo", "nombre", "tipo", "ciudad"],
                        "properties": {
                            "codigo": {"type": "string", "example": "SJM"},
                            "nombre": {"type": "string"},
                            "tipo": {"type": "string", "enum": ["publica", "privada"]},
                            "ciudad": {"type": "string"}
                        }
                    }
                }],
                "responses": {"201": {"description": "Creado"}, "400": {"description": "Duplicado o datos inválidos"}}
            }
        },
        "/universidades/estadisticas": {
            "get": {"tags": ["Universidades"], "summary": "Alumnos por titulación y curso", "parameters": [{"in": "query", "name": "activa", "type": "string"}], "responses": {"200": {"description": "Estadísticas"}}}
        },
        "/universidades/codigo/{codigo}": {
            "get": {"tags": ["Universidades"], "summary": "Buscar colegio activo por código", "parameters": [{"in": "path", "name": "codigo", "required": True, "type": "string"}], "responses": {"200": {"description": "OK"}, "404": {"description": "No encontrado"}}}
        },
        "/universidades/normalizar-localidades": {
            "post": {"tags": ["Universidades"], "summary": "Normalizar localidades (ADMIN)", "responses": {"200": {"description": "Resumen"}}}
        },
        "/universidades/{id}": {
            "get": {"tags": ["Universidades"], "summary": "Obtener colegio", "parameters": [_ID], "responses": {"200": {"description": "OK"}, "400": {"description": "ID inválido"}, "404": {"description": "No encontrado"}}},
            "put": {"tags": ["Universidades"], "summary": "Actualizar colegio (ADMIN)", "parameters": [_ID, _BODY], "responses": {"200": {"description": "OK"}}},
            "delete": {"tags": ["Universidades"], "summary": "Eliminar colegio y sus titulaciones (ADMIN)", "parameters": [_ID], "responses": {"200": {"description": "OK"}}}
        },
        # --- COLEGIOS ---
        "/colegios": {
            "get": {"tags": ["Colegios"], "summary": "Listar colegios (VER_CONTACTOS)", "parameters": [{"in": "query", "name": "search", "type": "string"}, {"in": "query", "name": "activo", "type": "string"}], "responses": {"200": {"description": "Lista paginada"}}}
        },
        "/colegios/todos": {
            "get": {"tags": ["Colegios"], "summary": "Todos los colegios", "responses": {"200": {"description": "Lista"}}}
        },
        "/colegios/nombres": {
            "get": {"tags": ["Colegios"], "summary": "Nombres de colegios", "responses": {"200": {"description": "Lista"}}}
        },
        # --- PRODUCTOS ---
        "/productos": {
            "get": {"tags": ["Productos"], "summary": "Productos activos", "responses": {"200": {"description": "Lista"}}},
            "post": {
                "tags": ["Productos"],
                "summary": "Crear producto",
                "parameters": [{"in": "body", "name": "body", "schema": {"type": "object", "required": ["nombre"], "properties": {"nombre": {"type": "string"}, "descripcion": {"type": "string"}}}}],
                "responses": {"201": {"description": "Creado"}, "400": {"description": "Nombre vacío o duplicado"}}
            }
        },
        "/productos/{id}": {
            "put": {"tags": ["Productos"], "summary": "Actualizar producto", "parameters": [_ID, _BODY], "responses": {"200": {"description": "OK"}, "404": {"description": "No encontrado"}}},
            "delete": {"tags": ["Productos"], "summary": "Baja lógica de producto", "parameters": [_ID], "responses": {"200": {"description": "OK"}}}
        },
        # --- CONFIGURACION ---
        "/configuracion": {
            "get": {"tags": ["Configuracion"], "summary": "Listar configuraciones", "responses": {"200": {"description": "Lista"}}}
        },
        "/configuracion/init-permissions": {
            "post": {"tags": ["Configuracion"], "summary": "Crear permisos y configuraciones por defecto (ADMIN)", "responses": {"200": {"description": "Resumen"}}}
        },
        "/configuracion/graduaciones_anio_seleccionado": {
            "put": {
                "tags": ["Configuracion"],
                "summary": "Guardar el año seleccionado de graduaciones (ADMIN)",
                "parameters": [{"in": "body", "name": "body", "schema": {"type": "object", "properties": {"anio": {"type": "integer", "example": 2007}, "version": {"type": "integer"}}}}],
                "responses": {"200": {"description": "Guardado"}, "400": {"description": "Año fuera de rango"}, "409": {"description": "Versión desactualizada"}}
            }
        },
        "/configuracion/{clave}": {
            "get": {"tags": ["Configuracion"], "summary": "Obtener configuración", "parameters": [{"in": "path", "name": "clave", "required": True, "type": "string"}], "responses": {"200": {"description": "OK"}, "404": {"description": "No encontrada"}}},
            "put": {
                "tags": ["Configuracion"],
                "summary": "Actualizar configuración (ADMIN)",
                "parameters": [
                    {"in": "path", "name": "clave", "required": True, "type": "string"},
                    {"in": "body", "name": "body", "schema": {"type": "object", "required": ["valor"], "properties": {"valor": {}, "descripcion": {"type": "string"}, "version": {"type": "integer"}}}}
                ],
                "responses": {"200": {"description": "OK"}, "409": {"description": "Versión desactualizada"}}
            }
        }
    }
}
