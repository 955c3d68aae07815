import os
from uuid import uuid4

import click
from flask import Flask, abort, jsonify, redirect, render_template, request, session, url_for

from emi_calc.engine import compute_schedule
from emi_calc.exceptions import InputError
from emi_calc.logging_config import configure_logging, get_logger
from emi_calc.main import build_scenario_from_options
from emi_calc.overview import build_overview
from emi_calc.serialization import scenario_from_dict, scenario_to_dict, schedule_to_dicts
from emi_calc_web.comparison_store import create_store_from_env

configure_logging()
logger = get_logger("emi_calc_web.app")

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
comparison_store = create_store_from_env(
    os.environ.get("EMI_CALC_DATABASE_URL"), os.environ.get("EMI_CALC_MAX_SCENARIOS")
)

PREVIEW_ROWS = 120


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def parse_form_list(value: str) -> list[str]:
    """Parse one entry per line from a form textarea.

    Commas are left alone so amounts such as "1,00,000" survive. Returns a
    list of trimmed strings, skipping any empty lines.
    """
    if not value:
        return []
    parts = [p.strip() for p in value.splitlines()]
    return [p for p in parts if p]


def _optional(form, name: str):
    return form.get(name, "").strip() or None


def _form_to_scenario(form):
    return build_scenario_from_options(
        form.get("home_value", "").strip(),
        _optional(form, "down_payment"),
        float(form.get("rate", 0.0)),
        int(form.get("tenure_years", 0)),
        form.get("start_date", ""),
        tuple(parse_form_list(form.get("rate_changes", ""))),
        tuple(parse_form_list(form.get("part_payments", ""))),
        tuple(parse_form_list(form.get("disbursements", ""))),
        _optional(form, "insurance"),
        _optional(form, "fees"),
        _optional(form, "one_time_expenses"),
        _optional(form, "property_tax"),
        _optional(form, "home_insurance"),
        _optional(form, "maintenance"),
    )


def _run_analysis(form, show_full_schedule: bool):
    scenario = _form_to_scenario(form)
    full_schedule, summary = compute_schedule(scenario)
    overview = build_overview(scenario, full_schedule, summary)
    schedule_view = full_schedule if show_full_schedule else full_schedule[:PREVIEW_ROWS]
    truncated = len(full_schedule) - len(schedule_view)
    return scenario, summary, overview, full_schedule, schedule_view, truncated


def _handle_save_action(user_token: str, form, scenario, summary, full_schedule) -> None:
    scenario_name = form.get("scenario_name", "").strip() or "Scenario"
    comparison_store.add_scenario(
        user_token,
        uuid4().hex,
        scenario_name,
        scenario_to_dict(scenario),
        summary.to_dict(),
        schedule_to_dicts(full_schedule),
    )


@app.route("/", methods=["GET", "POST"])
def index():
    summary = None
    overview = None
    schedule = None
    full_schedule = None
    truncated = 0
    error = None
    show_full_schedule = False
    action = "run"

    user_token = _ensure_user_token()

    if request.method == "POST":
        action = request.form.get("action", "run")
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        try:
            scenario, summary, overview, full_schedule, schedule, truncated = _run_analysis(
                request.form, show_full_schedule
            )
            if action == "add_to_comparison":
                _handle_save_action(user_token, request.form, scenario, summary, full_schedule)
        except (click.ClickException, ValueError) as exc:
            logger.info("Rejected form input: %s", exc)
            error = exc.format_message() if isinstance(exc, click.ClickException) else str(exc)

    comparison_scenarios = comparison_store.list_scenarios(user_token)

    return render_template(
        "index.html",
        form=request.form,
        summary=summary,
        overview=overview,
        schedule=schedule,
        truncated=truncated,
        show_full_schedule=show_full_schedule,
        error=error,
        asset_version=app.config["ASSET_VERSION"],
        comparison_scenarios=comparison_scenarios,
        last_action=action,
    )


@app.post("/api/schedule")
def api_schedule():
    """Simulate a scenario posted as JSON (dates as YYYY-MM strings)."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Expected a JSON object"}), 400
    try:
        scenario = scenario_from_dict(payload)
    except InputError as exc:
        return jsonify({"error": exc.message, "context": exc.context}), 400
    full_schedule, summary = compute_schedule(scenario)
    return jsonify(
        {
            "summary": summary.to_dict(),
            "overview": build_overview(scenario, full_schedule, summary),
            "schedule": schedule_to_dicts(full_schedule),
        }
    )


@app.get("/comparison/<scenario_id>")
def get_comparison(scenario_id: str):
    saved = comparison_store.get_scenario(session.get("user_token"), scenario_id)
    if saved is None:
        abort(404)
    return jsonify(saved)


@app.post("/comparison/remove")
def remove_comparison():
    scenario_id = request.form.get("scenario_id")
    user_token = session.get("user_token")
    comparison_store.remove_scenario(user_token, scenario_id)
    return redirect(url_for("index"))


@app.post("/comparison/clear")
def clear_comparisons():
    user_token = session.get("user_token")
    comparison_store.clear_scenarios(user_token)
    return redirect(url_for("index"))


if __name__ == "__main__":
    print("Starting EMI planner web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
