from __future__ import annotations

from flask import Blueprint, jsonify

from ..game.errors import UnknownScenario
from ..game.models import scenario_to_dict
from ..game.scenarios import get_scenario, list_scenarios
from ..utils.web import error_response

bp = Blueprint("scenarios", __name__)


@bp.get("/scenarios")
def get_scenarios():
    return jsonify([scenario_to_dict(s) for s in list_scenarios()])


@bp.get("/scenarios/<scenario_id>")
def get_one_scenario(scenario_id: str):
    scenario = get_scenario(scenario_id)
    if scenario is None:
        return error_response(UnknownScenario(scenario_id))
    return jsonify(scenario_to_dict(scenario))
