"""Store directory blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest

from services import stores
from utils.current_user import require_user
from utils.request_validation import parse_bool, parse_json_request

stores_bp = Blueprint("stores", __name__)


@stores_bp.route("/stores", methods=["GET"])
def list_stores():
    """Return stores with their reliability, optionally by category."""

    category = request.args.get("category") or None
    results = [store.to_dict() for store in stores.list_stores(category)]
    return jsonify(
        {
            "results": results,
            "count": len(results),
            "categories": stores.store_categories(),
        }
    )


@stores_bp.route("/stores/submit", methods=["POST"])
@jwt_required()
def submit_store():
    user = require_user()
    data = parse_json_request(request, required_keys=("name", "url"))
    store = stores.submit_store(
        user, data.get("name"), data.get("url"), data.get("category")
    )
    return jsonify(store.to_dict()), 201


@stores_bp.route("/store/<int:store_id>/vote", methods=["POST"])
@jwt_required()
def vote_store(store_id: int):
    user = require_user()
    store = stores.get_store(store_id)
    data = parse_json_request(request)
    positive = parse_bool(data.get("positive"))
    if positive is None:
        raise BadRequest("positive must be provided as a boolean value.")

    score = stores.rate_store(user, store, positive)
    return jsonify(store.to_dict() | {"reliability_score": score})
