import hmac
import logging
from flask import Blueprint, current_app, g, jsonify, request
from babyshop.models.admin_user import AdminUser

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)


@admin_bp.before_request
def require_admin():
    """Gate every admin route.

    - X-Admin-Token must match ADMIN_API_TOKEN
    - X-Admin-Email must belong to an admin_users row with is_admin set
    """
    expected_token = current_app.config["ADMIN_API_TOKEN"]
    token = request.headers.get("X-Admin-Token", "")
    if not expected_token or not hmac.compare_digest(token, expected_token):
        return jsonify(error="Forbidden"), 403

    email = (request.headers.get("X-Admin-Email") or "").strip().lower()
    if not AdminUser.is_admin_email(email):
        logger.info("Rejected non-admin user: %s", email or "<missing>")
        return jsonify(error="Forbidden"), 403
    g.admin_email = email


from babyshop.blueprints.admin import views  # noqa: F401, E402
