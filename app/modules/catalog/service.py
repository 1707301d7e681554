from typing import List, Optional
from urllib.parse import quote

from sqlalchemy.orm import Session

from .images import normalize_images
from .models import Bag, Settings
from app.schemas.bag import BagView


# ---------- VIEW MODELS ----------

def to_bag_view(row: Bag) -> BagView:
    return BagView(
        id=row.id,
        name=row.name,
        description=row.description,
        color=row.color,
        size=row.size,
        pricing=row.pricing,
        available=bool(row.available),
        images=normalize_images(row.images),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def format_price(pricing: Optional[float]) -> str:
    if not pricing:
        return "—"
    return f"KES {pricing:,.0f}"


# ---------- READS ----------

# bags.id is a 4-byte integer on Postgres
MAX_BAG_ID = 2**31 - 1


def parse_bag_id(raw: str) -> Optional[int]:
    """Bag id from a URL segment; None for anything that cannot be a stored id."""
    try:
        bag_id = int(raw)
    except ValueError:
        return None
    return bag_id if 0 < bag_id <= MAX_BAG_ID else None


def _newest_first(query):
    return query.order_by(Bag.created_at.desc(), Bag.id.desc())


def list_available_bags(db: Session, limit: int = 8) -> List[BagView]:
    rows = _newest_first(db.query(Bag).filter(Bag.available.is_(True))).limit(limit).all()
    return [to_bag_view(r) for r in rows]


def list_all_bags(db: Session) -> List[BagView]:
    return [to_bag_view(r) for r in _newest_first(db.query(Bag)).all()]


def get_available_bag(db: Session, bag_id: int) -> Optional[BagView]:
    row = db.query(Bag).filter(Bag.id == bag_id, Bag.available.is_(True)).first()
    return to_bag_view(row) if row else None


def list_more_bags(db: Session, exclude_id: int, limit: int = 6) -> List[BagView]:
    rows = (
        _newest_first(
            db.query(Bag).filter(Bag.available.is_(True), Bag.id != exclude_id)
        )
        .limit(limit)
        .all()
    )
    return [to_bag_view(r) for r in rows]


def get_owned_bag(db: Session, bag_id: int, user_id: str) -> Optional[BagView]:
    row = db.query(Bag).filter(Bag.id == bag_id, Bag.user_id == user_id).first()
    return to_bag_view(row) if row else None


def get_whatsapp_number(db: Session) -> Optional[str]:
    row = db.query(Settings).order_by(Settings.id.asc()).first()
    return row.whatsapp_number if row else None


# ---------- ORDER LINK ----------

def build_whatsapp_url(number: Optional[str], bag: BagView, product_url: str) -> Optional[str]:
    """Pre-filled wa.me link for ordering `bag`; None when no number is configured."""
    digits = "".join(ch for ch in (number or "") if ch.isdigit())
    if not digits:
        return None

    price = format_price(bag.pricing)
    parts = [
        "Hello! I'm interested in:",
        f"\n*{bag.name or 'Untitled bag'}*",
        f"\n{bag.description}" if bag.description else "",
        f"\nColor: {bag.color}" if bag.color else "",
        f"\nSize: {bag.size}" if bag.size else "",
        f"\nPrice: {price}" if price != "—" else "",
        f"\n\nView product: {product_url}",
    ]
    message = "".join(parts)
    return f"https://wa.me/{digits}?text={quote(message, safe='')}"
