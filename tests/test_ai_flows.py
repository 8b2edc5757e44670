"""AI flows with the model call replaced by a stub."""

import pytest

from mokawalat.ai import flows, llm
from mokawalat.errors import FlowError

ERP_DESCRIPTION = (
    "We track projects, purchase orders and inventory in one system but collect no customer feedback."
)


@pytest.fixture
def model_reply(app, monkeypatch):
    """Pretend a key is configured and capture prompts; the reply is built from the requested schema."""
    app.config["GOOGLE_API_KEY"] = "test-key"
    prompts = []
    replies = {
        flows.SummaryOutput: {"summary": "Work is on track."},
        flows.ComplianceOutput: {"suggestions": ["Add a customer feedback form."]},
        flows.SuggestProjectTasksOutput: {"tasks": [{"name": "Mobilise site crew"}]},
    }

    def fake_generate(prompt, schema):
        prompts.append(prompt)
        return schema.model_validate(replies[schema])

    monkeypatch.setattr(llm, "generate_structured", fake_generate)
    return prompts


def test_daily_log_summary_without_logs_skips_the_model(user_client, make_project, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("model should not be called")

    monkeypatch.setattr(llm, "generate_structured", fail)
    project_id = make_project()

    response = user_client.post(f"/projects/{project_id}/ai/log-summary")
    assert response.status_code == 200
    assert response.get_json()["data"] == {"summary": flows.NO_DAILY_LOGS}


def test_daily_log_summary_includes_log_history(user_client, make_project, model_reply):
    project_id = make_project()
    user_client.post(f"/projects/{project_id}/logs", json={"notes": "Formwork for level 3 completed."})

    response = user_client.post(f"/projects/{project_id}/ai/log-summary")
    body = response.get_json()
    assert body["error"] is False
    assert body["data"] == {"summary": "Work is on track."}
    assert "Formwork for level 3 completed." in model_reply[0]
    assert "worker@mokawalat.com" in model_reply[0]


def test_client_summary_without_interactions(user_client, make_client_record):
    client_id = make_client_record()
    response = user_client.post(f"/clients/{client_id}/ai/summary")
    assert response.get_json()["data"] == {"summary": "This client has no recorded interactions yet."}


def test_supplier_summary_prompt_mentions_rating(user_client, make_supplier, model_reply):
    supplier_id = make_supplier()
    user_client.post(f"/suppliers/{supplier_id}/evaluation", json={"rating": 4, "evaluation_notes": "Always on time"})

    response = user_client.post(f"/suppliers/{supplier_id}/ai/summary")
    assert response.status_code == 200
    assert "Rating: 4 / 5" in model_reply[0]
    assert "Always on time" in model_reply[0]


def test_unconfigured_model_returns_flow_error(user_client, make_project):
    project_id = make_project()
    response = user_client.post(f"/projects/{project_id}/ai/tasks")
    assert response.status_code == 502
    body = response.get_json()
    assert body["error"] is True
    assert body["data"] is None


def test_generate_structured_requires_api_key(app):
    with app.app_context():
        with pytest.raises(FlowError):
            llm.generate_structured("prompt", flows.SummaryOutput)


def test_iso_suggestions_fall_back_without_model(user_client):
    response = user_client.post("/iso-compliance/suggestions", json={"erp_description": ERP_DESCRIPTION})
    assert response.status_code == 200
    assert response.get_json()["data"]["suggestions"] == flows.FALLBACK_ISO_SUGGESTIONS


def test_iso_suggestions_require_detailed_description(user_client):
    response = user_client.post("/iso-compliance/suggestions", json={"erp_description": "Too short"})
    assert response.status_code == 400
    assert response.get_json()["errors"]["erp_description"] == [
        "Please provide a more detailed description (at least 50 characters)."
    ]


def test_iso_suggestions_use_model_when_configured(user_client, model_reply):
    response = user_client.post("/iso-compliance/suggestions", json={"erp_description": ERP_DESCRIPTION})
    assert response.get_json()["data"] == {"suggestions": ["Add a customer feedback form."]}
    assert ERP_DESCRIPTION in model_reply[0]
