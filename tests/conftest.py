from datetime import datetime, timedelta
import jwt
import mongomock
import pytest
from bson import ObjectId
from crm_colegios.app import create_app
from crm_colegios.config import settings
from crm_colegios.config import database
from crm_colegios.services.permission_service import PermissionService


def crear_token(user_id, rol='COMERCIAL', expira_en=timedelta(hours=1)):
    payload = {
        "userId": str(user_id),
        "rol": rol,
        "nombre": "Usuario de prueba",
        "exp": datetime.utcnow() + expira_en
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def cabeceras(user_id, rol='COMERCIAL'):
    return {"Authorization": f"Bearer {crear_token(user_id, rol)}"}


@pytest.fixture
def db():
    mongo = mongomock.MongoClient()['colegios_test']
    database.set_mongo(mongo)
    yield mongo
    database.set_mongo(None)


@pytest.fixture
def permisos(db):
    PermissionService.inicializar()
    return db


@pytest.fixture
def app(db):
    app = create_app()
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _usuario(db, nombre, rol):
    res = db.usuarios.insert_one({"nombre": nombre, "email": f"{nombre.lower()}@colegios.test", "rol": rol, "estado": "ACTIVO"})
    return {"userId": str(res.inserted_id), "rol": rol, "nombre": nombre}


@pytest.fixture
def admin(db):
    user = _usuario(db, "Admin", "ADMIN")
    user["headers"] = cabeceras(user["userId"], "ADMIN")
    return user


@pytest.fixture
def comercial(db):
    user = _usuario(db, "Lucia", "COMERCIAL")
    user["headers"] = cabeceras(user["userId"])
    return user


@pytest.fixture
def otro_comercial(db):
    user = _usuario(db, "Mario", "COMERCIAL")
    user["headers"] = cabeceras(user["userId"])
    return user


def insertar_contacto(db, comercial_id, nombre_colegio='Colegio San José', anio=2007, **extra):
    ahora = datetime.utcnow()
    doc = {
        "nombreCompleto": extra.pop("nombreCompleto", "Alumno de prueba"),
        "telefono": extra.pop("telefono", "612345678"),
        "nombreColegio": nombre_colegio,
        "anioNacimiento": anio,
        "comercialId": ObjectId(comercial_id),
        "createdBy": ObjectId(comercial_id),
        "fechaAlta": ahora,
        "createdAt": ahora,
        "updatedAt": ahora,
    }
    doc.update(extra)
    return db.contactos.insert_one(doc).inserted_id
