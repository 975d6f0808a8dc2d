from .admin import admin_bp
from .auth import auth_bp
from .subscriptions import subscriptions_bp
from .webhooks import webhooks_bp


def register_blueprints(app):
    for blueprint in (auth_bp, subscriptions_bp, admin_bp, webhooks_bp):
        app.register_blueprint(blueprint)
