"""Render payloads returned by the page routes."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from registry.models.auth import UserInfo
from registry.models.worker import Department, EducationLevel, Gender, Worker


class Notification(BaseModel):
    type: Literal["success", "error"]
    text: str

    @classmethod
    def success(cls, text: str) -> Notification:
        return cls(type="success", text=text)

    @classmethod
    def error(cls, text: str) -> Notification:
        return cls(type="error", text=text)


class WorkerFormState(BaseModel):
    worker_id: str | None = None
    fields: dict[str, str]
    loading: bool = False
    message: Notification | None = None
    departments: list[str] = [d.value for d in Department]
    education_levels: list[str] = [e.value for e in EducationLevel]
    genders: list[str] = [g.value for g in Gender]


class WorkerRow(BaseModel):
    worker: Worker
    department_color: str
    education_color: str
    gender_color: str
    can_view: bool = True
    can_edit: bool
    can_delete: bool


class WorkerListPage(BaseModel):
    loading: bool
    user_email: str
    user_name: str
    user_initial: str
    is_logged_in: bool
    status_label: str
    total: int
    visible_count: int
    results_label: str
    department_filter: Department | None = None
    search_term: str = ""
    active_filters: list[str] = []
    rows: list[WorkerRow] = []
    empty_message: str | None = None
    notification: Notification | None = None
    editing: WorkerFormState | None = None
    viewing: Worker | None = None
    delete_confirm: str | None = None
    departments: list[str] = [d.value for d in Department]


class AuthPage(BaseModel):
    mode: Literal["login", "signup"]
    title: str
    subtitle: str
    email: str
    loading: bool = False
    message: Notification | None = None
    submit_label: str
    switch_prompt: str
    switch_label: str
    password_hint: str | None = None


class HomePage(BaseModel):
    user: UserInfo | None = None
    user_name: str
    user_initial: str
    add_worker_path: str
    worker_list_path: str
    message: Notification | None = None
