from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_cors import CORS

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
cors = CORS()


def create_app(config_object='hotel_admin.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Inicializar extensiones
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(app)

    from hotel_admin.security import TokenService
    app.extensions['token_service'] = TokenService(
        expires_delta=app.config['JWT_ACCESS_TOKEN_EXPIRES'])

    from hotel_admin.errors import register_error_handlers
    register_error_handlers(app)

    with app.app_context():
        from hotel_admin import models  # noqa: F401
        from hotel_admin import routes  # Importar rutas
        app.register_blueprint(routes.api)  # Registrar el blueprint de rutas

        db.create_all()  # Crear tablas si no existen

    return app
