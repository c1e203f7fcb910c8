"""Admin JSON API for the product attributes form."""
import json
import logging
from flask import g, jsonify, request
from babyshop.blueprints.admin import admin_bp
from babyshop.errors import ValidationError
from babyshop.extensions import db
from babyshop.models.audit_log import AuditLog
from babyshop.models.product import Product
from babyshop.services import attribute_service
from babyshop.services.attributes_form import AttributesForm, FormState

logger = logging.getLogger(__name__)


def _get_product(product_id):
    return db.session.get(Product, product_id)


def _request_payload():
    """JSON body, or the ``payload`` field of a multipart upload."""
    if request.mimetype == "multipart/form-data":
        raw = request.form.get("payload", "")
        try:
            return json.loads(raw) if raw else None
        except json.JSONDecodeError:
            return None
    return request.get_json(silent=True)


@admin_bp.route("/products/<int:product_id>/attributes", methods=["GET"])
def get_attributes(product_id):
    product = _get_product(product_id)
    if not product:
        return jsonify(error="Product not found"), 404

    form = AttributesForm(product)
    if not form.load():
        return jsonify(error="Failed to load existing attributes. Please refresh and try again."), 502
    return jsonify(form.to_dict())


@admin_bp.route("/products/<int:product_id>/attributes", methods=["PUT"])
def save_attributes(product_id):
    product = _get_product(product_id)
    if not product:
        return jsonify(error="Product not found"), 404

    payload = _request_payload()
    if payload is None:
        return jsonify(error="Invalid request body"), 400

    try:
        form = AttributesForm.from_payload(
            product, payload, files=request.files, admin_email=g.admin_email
        )
    except ValidationError as e:
        return jsonify(error=str(e)), 422

    if form.save():
        return jsonify(form.to_dict())
    if form.saved:
        return jsonify(error=form.error), 502
    if form.state == FormState.ERROR:
        return jsonify(error="Failed to save product attributes. Please try again."), 502
    return jsonify(error=form.error), 422


@admin_bp.route("/products/<int:product_id>/attributes/generate", methods=["POST"])
def generate_variations(product_id):
    """Cross-product of the posted colors and sizes, not persisted."""
    product = _get_product(product_id)
    if not product:
        return jsonify(error="Product not found"), 404

    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    try:
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        form = AttributesForm.from_payload(
            product,
            {"colors": payload.get("colors"), "sizes": payload.get("sizes")},
            admin_email=g.admin_email,
        )
    except ValidationError as e:
        return jsonify(error=str(e)), 422
    form.generate_all_variations()

    db.session.add(
        AuditLog(
            admin_email=g.admin_email,
            action="GENERATE_VARIATIONS",
            product_id=product.id,
            payload={"variations": len(form.variations)},
        )
    )
    db.session.commit()
    return jsonify(form.to_dict())


@admin_bp.route("/products/<int:product_id>/attributes/stats", methods=["GET"])
def attribute_stats(product_id):
    product = _get_product(product_id)
    if not product:
        return jsonify(error="Product not found"), 404
    return jsonify(attribute_service.get_attribute_stats(product.id))
