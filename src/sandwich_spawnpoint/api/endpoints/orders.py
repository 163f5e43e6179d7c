# src/sandwich_spawnpoint/api/endpoints/orders.py
"""Order endpoints: placing, listing, moving through the kitchen and cancelling."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from sandwich_spawnpoint.api.dependencies import (
    AdminSessionDep,
    ConfigStoreDep,
    CurrentSessionDep,
    SessionDep,
)
from sandwich_spawnpoint.core.errors import (
    AuthorizationError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from sandwich_spawnpoint.models import (
    Ingredient,
    IngredientOnOrder,
    Order,
    OrderStatus,
    Role,
)
from sandwich_spawnpoint.schemas.order import (
    OrderDetailOut,
    OrderModifyRequest,
    OrderNewRequest,
    OrderOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/order", tags=["orders"])


def _count_ingredients(
    db: Session, ingredient_ids: Iterable[str], *, enabled_only: bool
) -> Counter[str]:
    """Collapse repeated ids into portion counts, rejecting unknown ingredients."""
    counts = Counter(ingredient_ids)
    stmt = select(Ingredient.id).where(Ingredient.id.in_(counts.keys()))
    if enabled_only:
        stmt = stmt.where(Ingredient.enabled.is_(True))
    known = set(db.execute(stmt).scalars())
    missing = sorted(set(counts) - known)
    if missing:
        raise ValidationError(f"Unknown or unavailable ingredients: {', '.join(missing)}")
    return counts


def _load_order(db: Session, order_id: str) -> Order:
    order = db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.ingredients).selectinload(IngredientOnOrder.ingredient))
    ).scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order does not exist")
    return order


@router.post(
    "/new",
    summary="Place an order",
    status_code=status.HTTP_201_CREATED,
    response_model=OrderOut,
)
def create_order(
    payload: OrderNewRequest,
    claim: CurrentSessionDep,
    db: SessionDep,
    config: ConfigStoreDep,
) -> OrderOut:
    app_config = config.get(strip_sensitive=True)
    if not app_config.get("enabled", True) or not app_config.get("allowOrders", False):
        raise AuthorizationError("Orders are currently disabled")

    counts = _count_ingredients(db, payload.ingredients, enabled_only=True)

    order = Order(user_id=claim.sub)
    order.ingredients = [
        IngredientOnOrder(ingredient_id=ingredient_id, ingredient_number=amount)
        for ingredient_id, amount in counts.items()
    ]
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Order %s placed by %s", order.id, claim.sub)
    return OrderOut.model_validate(order)


@router.get(
    "/list",
    summary="List orders",
    response_model=list[OrderDetailOut],
)
def list_orders(
    claim: CurrentSessionDep,
    db: SessionDep,
    order_status: Annotated[OrderStatus | None, Query(alias="status")] = None,
    uid: UUID | None = None,
) -> list[OrderDetailOut]:
    """Admins may list any orders; everyone else only their own."""
    if claim.role is not Role.ADMIN and (uid is None or str(uid) != claim.sub):
        raise AuthorizationError("You may only list your own orders")

    stmt = (
        select(Order)
        .options(selectinload(Order.ingredients).selectinload(IngredientOnOrder.ingredient))
        .order_by(Order.created_at)
    )
    if order_status is not None:
        stmt = stmt.where(Order.status == order_status)
    if uid is not None:
        stmt = stmt.where(Order.user_id == str(uid))

    return [OrderDetailOut.model_validate(order) for order in db.execute(stmt).scalars()]


@router.patch(
    "/modify/{order_id}",
    summary="Change an order's ingredients or status",
    response_model=OrderDetailOut,
)
def modify_order(
    order_id: UUID,
    payload: OrderModifyRequest,
    _: AdminSessionDep,
    db: SessionDep,
) -> OrderDetailOut:
    order = _load_order(db, str(order_id))

    if payload.ingredients:
        wanted = _count_ingredients(db, payload.ingredients, enabled_only=False)
        current = {link.ingredient_id: link for link in order.ingredients}

        for link in list(order.ingredients):
            if link.ingredient_id not in wanted:
                order.ingredients.remove(link)

        for ingredient_id, amount in wanted.items():
            link = current.get(ingredient_id)
            if link is None:
                order.ingredients.append(
                    IngredientOnOrder(ingredient_id=ingredient_id, ingredient_number=amount)
                )
            elif link.ingredient_number != amount:
                link.ingredient_number = amount

    if payload.status is not None:
        order.status = payload.status

    db.commit()
    return OrderDetailOut.model_validate(_load_order(db, str(order_id)))


@router.delete(
    "/delete/{order_id}",
    summary="Delete or cancel an order",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_order(order_id: UUID, claim: CurrentSessionDep, db: SessionDep) -> Response:
    """Admins delete any order. Owners may cancel their own while it is still queued."""
    order = db.get(Order, str(order_id))
    if order is None:
        raise NotFoundError("Order does not exist")

    if claim.role is not Role.ADMIN:
        if order.user_id != claim.sub:
            raise AuthorizationError("You can only cancel your own orders")
        if order.status is not OrderStatus.INQUEUE:
            raise AuthorizationError("Order is already being made")

    try:
        db.delete(order)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        raise InternalError("Could not delete order", cause=err) from err

    return Response(status_code=status.HTTP_204_NO_CONTENT)
