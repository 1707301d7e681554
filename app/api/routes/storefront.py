from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.config import SITE_URL
from app.core.db import get_db
from app.core.templates import templates
from app.modules.catalog.service import (
    build_whatsapp_url,
    get_available_bag,
    get_whatsapp_number,
    list_available_bags,
    list_more_bags,
    parse_bag_id,
)

router = APIRouter(tags=["storefront"])


@router.get("/")
def catalog(request: Request, db: Session = Depends(get_db)):
    return templates.TemplateResponse(
        request,
        "storefront/index.html",
        {"bags": list_available_bags(db)},
    )


@router.get("/bag/{bag_id}")
def bag_detail(bag_id: str, request: Request, db: Session = Depends(get_db)):
    bid = parse_bag_id(bag_id)
    if bid is None:
        raise HTTPException(status_code=404, detail="Bag not found")

    bag = get_available_bag(db, bid)
    if not bag:
        raise HTTPException(status_code=404, detail="Bag not found")

    product_url = f"{SITE_URL}/bag/{bid}"
    return templates.TemplateResponse(
        request,
        "storefront/bag.html",
        {
            "bag": bag,
            "more_bags": list_more_bags(db, bid),
            "whatsapp_url": build_whatsapp_url(get_whatsapp_number(db), bag, product_url),
            "product_url": product_url,
        },
    )
