"""elementor_abilities.server.app - Flask app factory and REST API routes.

A thin REST wrapper: every route delegates to ``AbilityRegistry``. No
ability logic is duplicated here.

State pattern matches the MCP server:
    _state = {"context": context, "registry": registry}
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from elementor_abilities.abilities import create_registry
from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.abilities.registry import Ability, AbilityRegistry

logger = logging.getLogger(__name__)


def _status_for(result: dict[str, Any], found: Ability | None, context: AbilityContext) -> int:
    if result.get("success"):
        return 200
    if found is None:
        return 404
    if not context.can(found.capability):
        return 403
    return 400


def create_app(
    context: AbilityContext,
    registry: AbilityRegistry | None = None,
) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        context: Context (store and capabilities) every ability runs with.
        registry: Ability registry; defaults to the Elementor abilities.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    CORS(app)

    _state: dict[str, Any] = {
        "context": context,
        "registry": registry if registry is not None else create_registry(),
    }

    # ─────────────────────────────────────────────────────────────────
    # Read-only GET endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/abilities")
    def api_abilities():
        """GET /api/abilities - Metadata of every registered ability."""
        abilities = _state["registry"].describe()
        return jsonify({"abilities": abilities, "total": len(abilities)})

    @app.route("/api/abilities/<namespace>/<ability>")
    def api_ability(namespace: str, ability: str):
        """GET /api/abilities/<namespace>/<ability> - One ability's metadata."""
        name = f"{namespace}/{ability}"
        found = _state["registry"].get(name)
        if found is None:
            return jsonify({"success": False, "message": f"Ability not found: {name}"}), 404
        return jsonify(found.describe())

    # ─────────────────────────────────────────────────────────────────
    # Execution endpoint
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/abilities/<namespace>/<ability>/run", methods=["POST"])
    def api_run_ability(namespace: str, ability: str):
        """POST /api/abilities/<namespace>/<ability>/run - Execute an ability.

        Body is ``{"input": {...}}``; a bare input object is accepted too.
        """
        name = f"{namespace}/{ability}"
        data = request.get_json(force=True, silent=True)
        if isinstance(data, dict) and isinstance(data.get("input"), dict):
            payload = data["input"]
        else:
            payload = data if isinstance(data, dict) else {}

        registry: AbilityRegistry = _state["registry"]
        result = registry.run(name, payload, _state["context"])
        status_code = _status_for(result, registry.get(name), _state["context"])
        if status_code != 200:
            logger.info("POST %s -> %d: %s", name, status_code, result.get("message"))
        return jsonify(result), status_code

    return app
