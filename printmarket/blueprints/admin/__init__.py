from flask import Blueprint

from printmarket.blueprints import register_error_handlers

admin_bp = Blueprint("admin", __name__)
register_error_handlers(admin_bp)

from printmarket.blueprints.admin import views  # noqa: F401, E402
