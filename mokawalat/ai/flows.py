"""
mokawalat/ai/flows.py

AI assist flows. Each flow:
- validates its input with a Pydantic model,
- gathers the related records where it works from an id,
- renders a fixed prompt,
- asks the model for output matching a Pydantic schema.

IMPORTANT:
- Model calls go through llm.generate_structured (module attribute lookup),
  so a single patch point covers every flow.
- When the model is not configured, the ISO 9001 flow returns a fixed list of
  suggestions; every other flow raises FlowError.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal

from pydantic import BaseModel, Field

from . import llm
from ..models import (
    Client,
    ClientInteraction,
    DailyLog,
    Employee,
    Project,
    PurchaseRequest,
    Supplier,
    SupplierContract,
)
from ..utils import get_or_raise


def _fmt_date(value: date | datetime | None) -> str:
    return value.strftime("%B %d, %Y") if value else "N/A"


# ---------------------------------------------------------------------
# Project risk analysis
# ---------------------------------------------------------------------
class ProjectRiskAnalysisInput(BaseModel):
    name: str = Field(description="The name of the construction project.")
    description: str = Field(default="", description="A detailed description of the project.")
    budget: float = Field(description="The total budget for the project in the local currency.")
    location: str = Field(default="", description="The physical location of the project.")


class Risk(BaseModel):
    risk: str = Field(description="A concise description of a single potential risk.")
    severity: Literal["Low", "Medium", "High"] = Field(description="The potential severity of the risk.")
    mitigation: str = Field(description="A practical, actionable suggestion to mitigate this specific risk.")


class ProjectRiskAnalysisOutput(BaseModel):
    risks: List[Risk] = Field(description="An array of potential risks identified for the project.")


def analyze_project_risks(data: ProjectRiskAnalysisInput) -> ProjectRiskAnalysisOutput:
    prompt = f"""You are an expert risk management consultant specializing in large-scale construction projects.

Based on the following project details, identify a list of potential risks. For each risk, provide a severity level (Low, Medium, or High) and a practical suggestion for mitigation. Focus on common construction risks such as budget overruns, schedule delays, safety hazards, supplier issues, and regulatory hurdles. Also consider location-specific risks (e.g., geological, weather, local regulations).

Project Name: {data.name}
Project Budget: {data.budget}
Project Location: {data.location}
Project Description: {data.description}
"""
    return llm.generate_structured(prompt, ProjectRiskAnalysisOutput)


# ---------------------------------------------------------------------
# Project task suggestions
# ---------------------------------------------------------------------
class SuggestProjectTasksInput(BaseModel):
    project_name: str = Field(description="The name of the construction project.")
    project_description: str = Field(default="", description="A detailed description of the project.")


class Task(BaseModel):
    name: str = Field(description="A concise name for a single project task.")


class SuggestProjectTasksOutput(BaseModel):
    tasks: List[Task] = Field(description="An array of suggested tasks for the project.")


def suggest_project_tasks(data: SuggestProjectTasksInput) -> SuggestProjectTasksOutput:
    prompt = f"""You are an expert construction project manager. Based on the following project details, generate a comprehensive list of common tasks required for such a project. The tasks should be logical and sequential where appropriate.

Project Name: {data.project_name}
Project Description: {data.project_description}
"""
    return llm.generate_structured(prompt, SuggestProjectTasksOutput)


# ---------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------
class SummaryOutput(BaseModel):
    summary: str = Field(description="A concise, plain-language summary.")


NO_DAILY_LOGS = "No daily logs have been recorded for this project yet. Cannot generate a summary."
NO_INTERACTIONS = "This client has no recorded interactions yet."


def summarize_daily_logs(project_id: int) -> SummaryOutput:
    project = get_or_raise(Project, project_id, "Project")
    logs = (
        DailyLog.query.filter_by(project_id=project.id)
        .order_by(DailyLog.created_at.desc())
        .all()
    )
    if not logs:
        return SummaryOutput(summary=NO_DAILY_LOGS)

    log_history = "\n\n".join(
        f"- Date: {_fmt_date(log.created_at)}, Author: {log.author_email}\n  Log: {log.notes}" for log in logs
    )
    prompt = f"""You are an expert construction project manager's assistant. Based on the following daily log history, provide a concise summary of the project's status.

The summary should highlight:
- Key progress and achievements.
- Any mentioned blockers, risks, or issues.
- The overall sentiment or momentum of the project (e.g., on track, delayed, facing challenges).

Daily Log History:
{log_history}
"""
    return llm.generate_structured(prompt, SummaryOutput)


def summarize_employee_performance(employee_id: int) -> SummaryOutput:
    employee = get_or_raise(Employee, employee_id, "Employee")
    projects_log = "\n".join(f"- {p.name} (Status: {p.status})" for p in employee.projects)

    performance_data = f"""
**Employee Details:**
Name: {employee.name}
Role: {employee.role}
Department: {employee.department}
Status: {employee.status}

**Assigned Projects:**
{projects_log or "No projects assigned."}
"""
    prompt = f"""You are an expert HR manager writing a performance review. Based on the following data for an employee, provide a concise summary.

The summary should highlight:
- Their primary role.
- The number and names of projects they are assigned to.
- A brief, positive sentiment summary of their involvement.

Employee Performance Data:
{performance_data}
"""
    return llm.generate_structured(prompt, SummaryOutput)


def summarize_supplier_performance(supplier_id: int) -> SummaryOutput:
    supplier = get_or_raise(Supplier, supplier_id, "Supplier")

    contracts = (
        SupplierContract.query.filter_by(supplier_id=supplier.id)
        .order_by(SupplierContract.effective_date.desc())
        .all()
    )
    contracts_log = "\n".join(f"- Contract: {c.title}, Effective: {_fmt_date(c.effective_date)}" for c in contracts)

    orders = (
        PurchaseRequest.query.filter_by(supplier_id=supplier.id)
        .order_by(PurchaseRequest.requested_at.desc())
        .all()
    )
    po_log = "\n".join(
        f"- PO: {po.quantity}x {po.item_name}, Status: {po.status}, Date: {_fmt_date(po.requested_at)}" for po in orders
    )

    performance_data = f"""
**Evaluation:**
Rating: {supplier.rating or "Not Rated"} / 5
Notes: {supplier.evaluation_notes or "No notes."}

**Contracts:**
{contracts_log or "No contracts on record."}

**Purchase Order History:**
{po_log or "No purchase orders on record."}
"""
    prompt = f"""You are an expert procurement analyst. Based on the following performance data for a supplier, provide a concise summary.

The summary should highlight:
- Reliability based on purchase order history (e.g., number of orders, statuses).
- Key contract information.
- Overall sentiment or performance based on internal ratings and notes.

Supplier Performance Data:
{performance_data}
"""
    return llm.generate_structured(prompt, SummaryOutput)


def summarize_client_interactions(client_id: int) -> SummaryOutput:
    client = get_or_raise(Client, client_id, "Client")
    interactions = (
        ClientInteraction.query.filter_by(client_id=client.id)
        .order_by(ClientInteraction.date.desc())
        .all()
    )
    if not interactions:
        return SummaryOutput(summary=NO_INTERACTIONS)

    interaction_log = "\n\n".join(
        f"- Date: {_fmt_date(i.date)}, Type: {i.type}\n  Notes: {i.notes}" for i in interactions
    )
    prompt = f"""You are an expert CRM assistant. Based on the following interaction log, provide a concise summary of the client relationship.

The summary should highlight:
- Key events or decisions made.
- The most recent topics of discussion.
- The overall sentiment or health of the client relationship (e.g., positive, neutral, needs attention).

Interaction Log:
{interaction_log}
"""
    return llm.generate_structured(prompt, SummaryOutput)


# ---------------------------------------------------------------------
# ISO 9001
# ---------------------------------------------------------------------
class ComplianceInput(BaseModel):
    erp_description: str = Field(min_length=50, description="A detailed description of the current ERP operations.")


class ComplianceOutput(BaseModel):
    suggestions: List[str] = Field(
        description=(
            "A list of actionable suggestions for improving ERP operations to better align with "
            "ISO 9001 standards, focusing on feedback collection and continuous improvement."
        )
    )


FALLBACK_ISO_SUGGESTIONS = [
    "Implement regular customer feedback collection processes",
    "Establish documented quality management procedures",
    "Create continuous improvement tracking mechanisms",
    "Develop employee training programs for quality standards",
    "Set up regular management review processes",
]


def suggest_iso_compliance_improvements(data: ComplianceInput) -> ComplianceOutput:
    if not llm.is_configured():
        return ComplianceOutput(suggestions=list(FALLBACK_ISO_SUGGESTIONS))

    prompt = f"""You are an expert in ISO 9001 compliance and ERP systems.

Based on the following description of current ERP operations, provide a list of actionable suggestions for improvement. Focus on changes that will facilitate the collection of feedback and continuous improvement, in line with ISO 9001 standards. Suggestions should be specific and practical.

ERP Operations Description: {data.erp_description}
"""
    return llm.generate_structured(prompt, ComplianceOutput)
