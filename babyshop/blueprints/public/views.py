"""Storefront JSON API: product detail and variation selection."""
import logging
from flask import abort, current_app, jsonify, request
from babyshop.blueprints.public import public_bp
from babyshop.errors import PersistenceError
from babyshop.models.product import Product
from babyshop.services.variation_selector import VariationSelector

logger = logging.getLogger(__name__)


def _language():
    lang = request.args.get("lang") or request.cookies.get("lang")
    if lang in current_app.config["SUPPORTED_LANGUAGES"]:
        return lang
    return current_app.config["DEFAULT_LANGUAGE"]


def _visible_product(slug):
    product = Product.query.filter_by(slug=slug).first()
    if not product or not product.is_visible:
        abort(404)
    return product


def _selection_id(name):
    value = request.args.get(name, type=int)
    return value if value else None


@public_bp.route("/products/<slug>")
def product_detail(slug):
    """Product with its colors, sizes and variations."""
    product = _visible_product(slug)
    try:
        selector = VariationSelector.load(product.id)
    except PersistenceError:
        logger.exception("Failed to load options for product %s", product.id)
        return jsonify(error="Failed to load product options"), 502

    data = product.to_dict(language=_language())
    data["colors"] = [c.to_dict() for c in selector.colors]
    data["sizes"] = [s.to_dict() for s in selector.sizes]
    data["variations"] = [v.to_dict() for v in selector.variations]
    data["selection"] = selector.to_dict()
    return jsonify(data)


@public_bp.route("/products/<slug>/selection")
def product_selection(slug):
    """Resolve a color/size choice.

    Without query args the default variation is pre-selected. The resolved
    variation drives the price, stock and buy button on the product page.
    """
    product = _visible_product(slug)
    try:
        selector = VariationSelector.load(product.id)
    except PersistenceError:
        logger.exception("Failed to load options for product %s", product.id)
        return jsonify(error="Failed to load product options"), 502

    if "color_id" in request.args or "size_id" in request.args:
        selector.select(_selection_id("color_id"), _selection_id("size_id"))

    data = selector.to_dict()
    variation = selector.resolved_variation
    data["price"] = variation["effective_price"] if variation else product.price
    data["can_buy"] = bool(variation and variation["in_stock"])
    return jsonify(data)
