from trustnest.routes.admin import admin_bp
from trustnest.routes.documents import documents_bp
from trustnest.routes.messaging import messaging_bp
from trustnest.routes.profile import profile_bp
from trustnest.routes.properties import properties_bp
from trustnest.routes.verification import verification_bp

BLUEPRINTS = (profile_bp, verification_bp, documents_bp, properties_bp, messaging_bp, admin_bp)


def register_blueprints(app, url_prefix='/api'):
    for blueprint in BLUEPRINTS:
        bp_prefix = blueprint.url_prefix or ''
        app.register_blueprint(blueprint, url_prefix=url_prefix + bp_prefix)
