"""Thin wrappers around the SCM REST endpoints."""
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

from scm_frontend.api import ApiClient


class Resource:
    """Plain CRUD passthrough for one collection endpoint."""

    def __init__(self, client: ApiClient, path: str):
        self.client = client
        self.path = path.rstrip("/")

    def item_path(self, item_id) -> str:
        return f"{self.path}/{item_id}"

    def list(self, params: Optional[dict] = None) -> List[dict]:
        data = self.client.get(self.path, params=params or {})
        return data if isinstance(data, list) else []

    def get(self, item_id) -> Any:
        return self.client.get(self.item_path(item_id))

    def create(self, payload: dict) -> Any:
        return self.client.post(self.path, payload)

    def update(self, item_id, payload: dict) -> Any:
        return self.client.put(self.item_path(item_id), payload)

    def delete(self, item_id) -> None:
        self.client.delete(self.item_path(item_id))


def supplier_evaluations(client: ApiClient) -> Resource:
    return Resource(client, "/api/supplier-evaluations")


def users(client: ApiClient) -> Resource:
    return Resource(client, "/api/users")


def departments(client: ApiClient) -> Resource:
    return Resource(client, "/api/departments")


def approval_routes(client: ApiClient) -> Resource:
    return Resource(client, "/api/approval-routes")


def rfx_events(client: ApiClient) -> Resource:
    return Resource(client, "/api/rfx-events")


# ---- Users / departments ----


def deactivate_user(client: ApiClient, user_id) -> Any:
    return client.patch(f"/api/users/{user_id}/deactivate")


def assign_user(client: ApiClient, user_id, payload: dict) -> Any:
    """Assign a user to a department/section/role."""
    return client.patch(f"/api/users/{user_id}/assign", payload)


def add_section(client: ApiClient, department_id, payload: dict) -> Any:
    return client.post(f"/api/departments/{department_id}/sections", payload)


def list_roles(client: ApiClient) -> List[dict]:
    data = client.get("/api/roles")
    return data if isinstance(data, list) else []


# ---- Projects ----


def list_projects(client: ApiClient) -> List[dict]:
    """Every project, inactive ones included (management view)."""
    data = client.get("/api/projects/management")
    return data if isinstance(data, list) else []


def create_project(client: ApiClient, name: str) -> Any:
    name = (name or "").strip()
    if not name:
        raise ValueError("Project name is required")
    return client.post("/api/projects", {"name": name})


def deactivate_project(client: ApiClient, project: dict) -> dict:
    """The updated project; older servers answer with a message only."""
    data = client.patch(f"/api/projects/{project['id']}/deactivate") or {}
    return data.get("project") or {**project, "is_active": False}


# ---- Requested items ----


def update_item_cost(client: ApiClient, item_id, unit_cost) -> Any:
    return client.put(f"/api/requested-items/{item_id}/cost", {"unit_cost": unit_cost})


def update_purchased_quantity(client: ApiClient, item_id, purchased_quantity) -> Any:
    return client.put(
        f"/api/requested-items/{item_id}/purchased-quantity",
        {"purchased_quantity": purchased_quantity},
    )


def update_procurement_status(client: ApiClient, item_id, status: str, comment: str = "", **details) -> Any:
    """details: po_number, invoice_number, currency, committed_cost, paid_cost, ..."""
    payload = {"procurement_status": status, "procurement_comment": comment, **details}
    return client.put(f"/api/requested-items/{item_id}/procurement-status", payload)


def closed_requests(client: ApiClient) -> List[dict]:
    data = client.get("/api/requests/closed")
    return data if isinstance(data, list) else []


# ---- Attachments ----

_PATH_SEPARATORS = re.compile(r"[\\/]")


def _basename(stored_path: str) -> str:
    return _PATH_SEPARATORS.split(stored_path)[-1] if stored_path else ""


def attachment_filename(attachment: Optional[dict]) -> str:
    """Display name: explicit file_name, else the last segment of file_path."""
    attachment = attachment or {}
    if attachment.get("file_name"):
        return attachment["file_name"]
    return _basename(attachment.get("file_path") or "") or "Attachment"


def attachment_download_endpoint(attachment: Optional[dict]) -> Optional[str]:
    """Server-provided download_url, or the download route for the stored file. None if neither exists."""
    attachment = attachment or {}
    if attachment.get("download_url"):
        return attachment["download_url"]
    filename = _basename(attachment.get("file_path") or "")
    if not filename:
        return None
    return f"/api/attachments/download/{quote(filename, safe='')}"


def list_item_attachments(client: ApiClient, item_id) -> List[dict]:
    return client.get(f"/api/attachments/item/{item_id}") or []


def upload_item_attachment(
    client: ApiClient,
    item_id,
    filename: str,
    content: bytes,
    content_type: Optional[str] = None,
) -> Any:
    return client.upload(f"/api/attachments/item/{item_id}", filename, content, content_type)


def download_attachment(client: ApiClient, attachment: dict) -> Tuple[bytes, str]:
    endpoint = attachment_download_endpoint(attachment)
    if endpoint is None:
        raise ValueError("Attachment file is missing.")
    return client.download(endpoint)


# ---- Dashboard ----


def dashboard_summary(client: ApiClient) -> dict:
    return client.get("/api/dashboard/summary") or {}


def department_spending(client: ApiClient, year: int) -> List[dict]:
    data = client.get("/api/dashboard/department-spending", params={"year": year})
    return data if isinstance(data, list) else []


def workload(client: ApiClient) -> List[dict]:
    data = client.get("/api/dashboard/workload")
    return data if isinstance(data, list) else []


def pivot_department_spending(rows: Iterable[dict]) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Reshape ``{month, department, total_cost}`` rows for charting.

    Returns one dict per month (sorted) holding a float per department, and
    the department names in first-seen order. Missing costs count as 0.
    """
    rows = list(rows)
    months = sorted({row["month"] for row in rows if row.get("month") is not None})
    departments_seen: List[str] = []
    for row in rows:
        name = row.get("department")
        if name is not None and name not in departments_seen:
            departments_seen.append(name)

    chart = []
    for month in months:
        entry: Dict[str, Any] = {"month": month}
        for row in rows:
            if row.get("month") == month and row.get("department") is not None:
                entry[row.get("department")] = float(row.get("total_cost") or 0)
        chart.append(entry)
    return chart, departments_seen


# ---- Admin tools ----


def reassign_approvals(client: ApiClient) -> dict:
    return client.post("/api/admin-tools/reassign-approvals") or {}


def deactivate_user_by_email(client: ApiClient, email: str) -> dict:
    return client.post("/api/admin-tools/deactivate-user", {"email": email}) or {}


def admin_logs(client: ApiClient) -> List[dict]:
    data = client.get("/api/admin-tools/logs")
    return data if isinstance(data, list) else []


# ---- Account requests ----


def list_register_requests(client: ApiClient) -> List[dict]:
    data = client.get("/auth/register-requests") or {}
    return data.get("requests", []) if isinstance(data, dict) else []


def approve_register_request(client: ApiClient, request_id) -> Any:
    return client.post(f"/auth/register-requests/{request_id}/approve")


def reject_register_request(client: ApiClient, request_id, reason: str = "") -> Any:
    payload = {}
    if reason and reason.strip():
        payload["reason"] = reason.strip()
    return client.post(f"/auth/register-requests/{request_id}/reject", payload)


def submit_register_request(client: ApiClient, payload: dict) -> Any:
    return client.post("/auth/register-requests", payload)


# ---- Display helpers ----


def format_score(value) -> str:
    """Scores are computed server-side; show them as-is or a dash."""
    if value is None or value == "":
        return "-"
    return str(value)
