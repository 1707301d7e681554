"""
Admin form actions for the catalog.

Each action runs validate -> resolve-user -> normalize-images -> persist and
returns an `ActionResult`. Nothing raises past an action: validation, auth,
parse and store failures all come back as `ActionResult(error=...)`.

Every mutating query on `bags` is filtered by both the record id and the
owning user id, so a wrong owner matches zero rows.
"""
import json
import math
from typing import Callable, List, Mapping, Optional

from loguru import logger
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .images import normalize_images, with_default
from .models import Bag, Settings
from app.core.errors import NotFound, SonieError, Unauthorized, ValidationFailed
from app.schemas.bag import Image, UploadedImage
from app.schemas.base import ActionResult
from app.schemas.session import AdminUser

UserResolver = Callable[[], Optional[AdminUser]]

NO_IMAGES = "Please upload at least one image."


# ---------- FIELD PARSING ----------

def _text(form: Mapping[str, str], key: str) -> Optional[str]:
    value = form.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def to_boolean(value: Optional[str]) -> bool:
    return value in ("true", "on")


def parse_price(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        price = float(raw)
    except ValueError:
        raise ValidationFailed("Price must be a valid number.")
    if not math.isfinite(price):
        raise ValidationFailed("Price must be a valid number.")
    return price


def parse_default_index(raw: Optional[str]) -> int:
    try:
        index = float(raw) if raw not in (None, "") else 0.0
    except (TypeError, ValueError):
        return 0
    return int(index) if math.isfinite(index) else 0


def parse_images_payload(raw: Optional[str], message: str) -> Optional[List[Image]]:
    """None when no payload was sent, otherwise the submitted images in order."""
    if not raw:
        return None
    try:
        items = json.loads(raw)
        if not isinstance(items, list):
            raise ValidationFailed(message)
        uploaded = [UploadedImage.model_validate(item) for item in items]
    except (json.JSONDecodeError, ValidationError):
        raise ValidationFailed(message)
    return [Image(url=img.url, public_id=img.public_id) for img in uploaded]


def _bag_fields(form: Mapping[str, str]) -> dict:
    name = _text(form, "name")
    if not name:
        raise ValidationFailed("A bag name is required.")

    return {
        "name": name,
        "description": _text(form, "description"),
        "color": _text(form, "color"),
        "size": _text(form, "size"),
        "pricing": parse_price(_text(form, "pricing")),
        "available": to_boolean(form.get("available")),
    }


def _require_user(resolve_user: UserResolver) -> AdminUser:
    user = resolve_user()
    if not user:
        raise Unauthorized()
    return user


def _failure(db: Session, action: str, exc: Exception) -> ActionResult:
    db.rollback()
    if isinstance(exc, SonieError):
        logger.info(f"{action} rejected | {exc.message}")
        return ActionResult.fail(exc.message)
    logger.exception(f"Unexpected error in {action}")
    return ActionResult.fail(str(exc) or SonieError.default_message)


# ---------- BAGS ----------

def create_bag_action(
    db: Session,
    form: Mapping[str, str],
    resolve_user: UserResolver,
) -> ActionResult:
    try:
        fields = _bag_fields(form)
        submitted = parse_images_payload(
            form.get("imagesPayload"),
            "Images payload is invalid. Please re-upload your images.",
        )
        if not submitted:
            raise ValidationFailed(NO_IMAGES)

        user = _require_user(resolve_user)

        images = with_default(submitted, parse_default_index(form.get("defaultImageIndex")))

        bag = Bag(
            user_id=user.id,
            images=[img.to_store() for img in images],
            **fields,
        )
        db.add(bag)
        db.commit()
        db.refresh(bag)

        logger.info(f"Bag created | id={bag.id} user={user.id}")
        return ActionResult.ok()
    except Exception as exc:
        return _failure(db, "create_bag_action", exc)


def update_bag_action(
    db: Session,
    bag_id: int,
    form: Mapping[str, str],
    resolve_user: UserResolver,
) -> ActionResult:
    try:
        fields = _bag_fields(form)
        submitted = parse_images_payload(
            form.get("imagesPayload"),
            "Images payload is invalid. Please try again.",
        )

        user = _require_user(resolve_user)
        default_index = parse_default_index(form.get("defaultImageIndex"))

        if submitted is None:
            # no payload: keep the stored images, only move the default flag
            existing = (
                db.query(Bag.images)
                .filter(Bag.id == bag_id, Bag.user_id == user.id)
                .first()
            )
            if existing is None:
                raise NotFound()
            submitted = normalize_images(existing.images)

        images = with_default(submitted, default_index)
        if not images:
            raise ValidationFailed(NO_IMAGES)

        updated = (
            db.query(Bag)
            .filter(Bag.id == bag_id, Bag.user_id == user.id)
            .update(
                {**fields, "images": [img.to_store() for img in images]},
                synchronize_session=False,
            )
        )
        if not updated:
            raise NotFound()
        db.commit()

        logger.info(f"Bag updated | id={bag_id} user={user.id}")
        return ActionResult.ok()
    except Exception as exc:
        return _failure(db, "update_bag_action", exc)


def delete_bag_action(
    db: Session,
    bag_id: int,
    resolve_user: UserResolver,
) -> ActionResult:
    try:
        user = _require_user(resolve_user)

        deleted = (
            db.query(Bag)
            .filter(Bag.id == bag_id, Bag.user_id == user.id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise NotFound()
        db.commit()

        logger.info(f"Bag deleted | id={bag_id} user={user.id}")
        return ActionResult.ok()
    except Exception as exc:
        return _failure(db, "delete_bag_action", exc)


# ---------- SETTINGS ----------

def update_settings_action(
    db: Session,
    form: Mapping[str, str],
    resolve_user: UserResolver,
) -> ActionResult:
    try:
        user = _require_user(resolve_user)
        whatsapp_number = _text(form, "whatsapp_number")

        # at most one settings row; none yet is fine
        row = db.query(Settings).order_by(Settings.id.asc()).first()
        if row:
            row.whatsapp_number = whatsapp_number
        else:
            db.add(Settings(whatsapp_number=whatsapp_number))
        db.commit()

        logger.info(f"Settings saved | user={user.id}")
        return ActionResult.ok()
    except Exception as exc:
        return _failure(db, "update_settings_action", exc)
