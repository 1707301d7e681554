from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.auth import IdentityGateway, get_admin_session, get_identity_gateway, require_admin
from app.core.config import CLOUDINARY_FOLDER
from app.core.db import get_db
from app.core.templates import templates
from app.modules.catalog.actions import (
    create_bag_action,
    delete_bag_action,
    update_bag_action,
    update_settings_action,
)
from app.modules.catalog.service import get_owned_bag, get_whatsapp_number, list_all_bags, parse_bag_id
from app.schemas.session import AdminSession, AdminUser

router = APIRouter(prefix="/admin", tags=["admin"])


def _user_resolver(session: Optional[AdminSession], identity: IdentityGateway):
    return lambda: identity.resolve_user(session.access_token) if session else None


def _bag_form(request: Request, bag, user, error=None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "admin/bag_form.html",
        {
            "bag": bag,
            "initial_images": [img.to_store() for img in bag.images] if bag else [],
            "error": error,
            "folder": CLOUDINARY_FOLDER,
            "user": user,
        },
        status_code=status_code,
    )


def _parse_id(bag_id: str) -> int:
    bid = parse_bag_id(bag_id)
    if bid is None:
        raise HTTPException(status_code=404, detail="Bag not found")
    return bid


# ----------------------------
# LISTING
# ----------------------------
@router.get("/bags")
def admin_bags(
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_admin),
):
    return templates.TemplateResponse(
        request,
        "admin/bags.html",
        {"bags": list_all_bags(db), "user": user},
    )


# ----------------------------
# CREATE
# ----------------------------
@router.get("/add-bag")
def add_bag_page(request: Request, user: AdminUser = Depends(require_admin)):
    return _bag_form(request, None, user)


@router.post("/add-bag")
async def add_bag(
    request: Request,
    db: Session = Depends(get_db),
    session: Optional[AdminSession] = Depends(get_admin_session),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    form = await request.form()
    resolve_user = _user_resolver(session, identity)
    result = create_bag_action(db, form, resolve_user)
    if result.success:
        return RedirectResponse("/admin/bags", status_code=303)

    return _bag_form(request, None, resolve_user(), result.error, status_code=400)


# ----------------------------
# EDIT
# ----------------------------
@router.get("/bags/{bag_id}")
def edit_bag_page(
    bag_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_admin),
):
    bag = get_owned_bag(db, _parse_id(bag_id), user.id)
    if not bag:
        raise HTTPException(status_code=404, detail="Bag not found")

    return _bag_form(request, bag, user)


@router.post("/bags/{bag_id}")
async def edit_bag(
    bag_id: str,
    request: Request,
    db: Session = Depends(get_db),
    session: Optional[AdminSession] = Depends(get_admin_session),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    form = await request.form()
    resolve_user = _user_resolver(session, identity)
    result = update_bag_action(db, _parse_id(bag_id), form, resolve_user)
    if result.success:
        return RedirectResponse("/admin/bags", status_code=303)

    user = resolve_user()
    bag = get_owned_bag(db, _parse_id(bag_id), user.id) if user else None
    return _bag_form(request, bag, user, result.error, status_code=400)


@router.post("/bags/{bag_id}/delete")
def delete_bag(
    bag_id: str,
    request: Request,
    db: Session = Depends(get_db),
    session: Optional[AdminSession] = Depends(get_admin_session),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    resolve_user = _user_resolver(session, identity)
    result = delete_bag_action(db, _parse_id(bag_id), resolve_user)
    if result.success:
        return RedirectResponse("/admin/bags", status_code=303)

    return templates.TemplateResponse(
        request,
        "admin/bags.html",
        {"bags": list_all_bags(db), "error": result.error, "user": resolve_user()},
        status_code=400,
    )


# ----------------------------
# SETTINGS
# ----------------------------
@router.get("/settings")
def settings_page(
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_admin),
):
    return templates.TemplateResponse(
        request,
        "admin/settings.html",
        {"whatsapp_number": get_whatsapp_number(db), "error": None, "saved": False, "user": user},
    )


@router.post("/settings")
async def save_settings(
    request: Request,
    db: Session = Depends(get_db),
    session: Optional[AdminSession] = Depends(get_admin_session),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    form = await request.form()
    resolve_user = _user_resolver(session, identity)
    result = update_settings_action(db, form, resolve_user)
    return templates.TemplateResponse(
        request,
        "admin/settings.html",
        {
            "whatsapp_number": get_whatsapp_number(db) if result.success else form.get("whatsapp_number"),
            "error": result.error,
            "saved": bool(result.success),
            "user": resolve_user(),
        },
        status_code=200 if result.success else 400,
    )
