"""ISO 9001 improvement suggestions for a free-text description of the company's ERP usage."""

from __future__ import annotations

from flask import Blueprint
from flask_login import login_required

from ...ai import flows
from ...forms import ComplianceForm, bind_form
from ...utils import flow_response, invalid_form

compliance_bp = Blueprint("compliance", __name__, url_prefix="/iso-compliance")


@compliance_bp.route("/suggestions", methods=["POST"])
@login_required
def suggestions():
    form = bind_form(ComplianceForm)
    if not form.validate():
        return invalid_form(form, "Invalid data provided.")

    data = flows.ComplianceInput(erp_description=form.erp_description.data.strip())
    return flow_response(lambda: flows.suggest_iso_compliance_improvements(data), "Suggestions generated.")
