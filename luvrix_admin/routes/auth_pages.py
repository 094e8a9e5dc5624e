from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from starlette.datastructures import FormData

from luvrix_admin import ui
from luvrix_admin.db import get_db
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.security import auth
from luvrix_admin.security.guard import AdminContext, require_admin, safe_next
from luvrix_admin.services import platform_client
from luvrix_admin.services.audit import record_admin_action
from luvrix_admin.services.validation import validate_password_change, validate_setup

router = APIRouter(prefix="/admin", tags=["admin-auth"])

LOGIN_FORM_HTML = """
<form method="post" action="/admin/login" class="space-y-4">
  <input type="hidden" name="next" value="{next}">
  <input type="email" name="email" value="{email}" placeholder="admin@luvrix.com" required class="{input_class}">
  <input type="password" name="password" placeholder="Password" required class="{input_class}">
  <button class="w-full {button_class}">Sign in</button>
</form>
<p class="text-center text-xs text-slate-400">First time here? <a href="/admin/setup" class="text-pink-600 font-semibold">Set up an admin account</a></p>
"""

SETUP_FORM_HTML = """
<p class="text-sm text-slate-500 text-center">Create the first administrator for this site.</p>
<form method="post" action="/admin/setup" class="space-y-4">
  <input type="email" name="email" value="{email}" placeholder="admin@luvrix.com" required class="{input_class}">
  <input type="password" name="password" placeholder="Strong password" required class="{input_class}">
  <p class="text-xs text-slate-400">At least 8 characters with upper and lower case letters, a number and one of !@#$%^&amp;*</p>
  <button class="w-full {button_class}">Create admin</button>
</form>
"""

ADMIN_EXISTS_HTML = """
<p class="text-sm text-slate-600 text-center">An admin account already exists.</p>
<a href="/admin/login" class="block text-center {button_class}">Go to login</a>
"""

CHANGE_PASSWORD_HTML = """
<section class="bg-white rounded-2xl shadow-sm border border-slate-100 p-6 max-w-xl">
  <form method="post" action="/admin/change-password" class="space-y-4">
    <input type="password" name="currentPassword" placeholder="Current password" class="{input_class}">
    <input type="password" name="newPassword" placeholder="New password" class="{input_class}">
    <input type="password" name="confirmPassword" placeholder="Confirm new password" class="{input_class}">
    <ul class="text-xs text-slate-400 list-disc pl-5">
      <li>At least 8 characters</li>
      <li>An uppercase and a lowercase letter</li>
      <li>A number</li>
      <li>A special character (!@#$%^&amp;*)</li>
    </ul>
    <button class="{button_class}">Change Password</button>
  </form>
</section>
"""


def _login_form(next_url: str, email: str = "") -> str:
    return LOGIN_FORM_HTML.format(
        next=ui.esc(next_url),
        email=ui.esc(email),
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, next: str | None = None, msg: str | None = None, error: str | None = None, db: Session = Depends(get_db)):
    row = auth.current_session(request, db)
    if auth.is_admin(row):
        return ui.redirect(safe_next(next))
    return ui.bare_page("Admin Login", _login_form(next or ""), msg=msg, error=error)


@router.post("/login")
def login_submit(form: FormData = Depends(ui.form_data), db: Session = Depends(get_db)):
    email = form.get("email") or ""
    next_url = form.get("next") or ""
    try:
        raw, row = auth.login(db, email, form.get("password"))
    except ValidationError as e:
        return ui.bare_page("Admin Login", _login_form(next_url, email), error=e.message, status_code=400)

    response = ui.redirect(safe_next(next_url))
    auth.set_session_cookie(response, raw, row)
    return response


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    response = ui.redirect("/admin/login", msg="Logged out")
    auth.logout(request, response, db)
    return response


def _admin_exists() -> bool:
    # unauthenticated read; if the platform refuses, let the setup endpoint decide
    try:
        users = platform_client.client_for().get_all_users()
    except ApiError as e:
        log_event("setup_user_check_failed", level="warning", status_code=e.status_code, error=e.message)
        return False
    return any(u.get("role") == "ADMIN" for u in users or [])


def _setup_form(email: str = "") -> str:
    return SETUP_FORM_HTML.format(email=ui.esc(email), input_class=ui.INPUT_CLASS, button_class=ui.BUTTON_CLASS)


@router.get("/setup", response_class=HTMLResponse)
def setup_page(msg: str | None = None, error: str | None = None):
    if _admin_exists():
        return ui.bare_page("Admin Setup", ADMIN_EXISTS_HTML.format(button_class=ui.BUTTON_CLASS), msg=msg, error=error)
    return ui.bare_page("Admin Setup", _setup_form(), msg=msg, error=error)


@router.post("/setup")
def setup_submit(form: FormData = Depends(ui.form_data)):
    email = form.get("email") or ""
    try:
        email = validate_setup(email, form.get("password"))
        data = platform_client.client_for().setup_admin(email, form.get("password"))
    except (ValidationError, ApiError) as e:
        return ui.bare_page("Admin Setup", _setup_form(email), error=e.message, status_code=400)
    if not data.get("success"):
        error = data.get("error") or "Failed to create admin account"
        return ui.bare_page("Admin Setup", _setup_form(email), error=error, status_code=400)

    log_event("admin_setup_completed", email=email)
    return ui.redirect("/admin/login", msg=data.get("message") or "Admin account created successfully!")


@router.get("/change-password", response_class=HTMLResponse)
def change_password_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    content = CHANGE_PASSWORD_HTML.format(input_class=ui.INPUT_CLASS, button_class=ui.BUTTON_CLASS)
    return ui.page(ctx, "Change Password", content, msg=msg, error=error)


@router.post("/change-password")
def change_password_submit(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    current = form.get("currentPassword") or ""
    try:
        validate_password_change(current, form.get("newPassword") or "", form.get("confirmPassword") or "")
        data = ctx.client.change_password(current, form.get("newPassword"))
    except (ValidationError, ApiError) as e:
        return ui.redirect("/admin/change-password", error=e.message)
    if not data.get("success"):
        return ui.redirect("/admin/change-password", error=data.get("error") or "Failed to change password")

    record_admin_action(ctx.client, ctx.user.id, "Changed Password", data.get("userId") or ctx.user.id)
    return ui.redirect("/admin/change-password", msg="Password changed successfully!")
