from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("photos", __name__)


@bp.get("/photos")
def photo_count():
    service = current_app.extensions["guesswho"]
    return jsonify({"count": service.catalog_size()})
