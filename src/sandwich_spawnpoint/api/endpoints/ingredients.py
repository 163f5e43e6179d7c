# src/sandwich_spawnpoint/api/endpoints/ingredients.py
"""Ingredient catalogue endpoints."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from sandwich_spawnpoint.api.dependencies import AdminSessionDep, CurrentSessionDep, SessionDep
from sandwich_spawnpoint.core.errors import (
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
)
from sandwich_spawnpoint.models import Ingredient, IngredientOnOrder, Role
from sandwich_spawnpoint.schemas.ingredient import (
    IngredientAddRequest,
    IngredientListItem,
    IngredientModifyRequest,
    IngredientOut,
)

router = APIRouter(prefix="/ingredient", tags=["ingredients"])


@router.get("/list", summary="List ingredients", response_model=list[IngredientListItem])
def list_ingredients(
    claim: CurrentSessionDep,
    db: SessionDep,
    include_disabled: Annotated[
        bool, Query(alias="all", description="Include disabled ingredients (admin only)")
    ] = False,
) -> list[IngredientListItem]:
    if include_disabled and claim.role is not Role.ADMIN:
        raise AuthorizationError("You are not allowed to fetch all ingredients")

    order_count = func.count(IngredientOnOrder.order_id)
    stmt = (
        select(Ingredient, order_count)
        .outerjoin(IngredientOnOrder, IngredientOnOrder.ingredient_id == Ingredient.id)
        .group_by(Ingredient.id)
        .order_by(Ingredient.type, Ingredient.name)
    )
    if not include_disabled:
        stmt = stmt.where(Ingredient.enabled.is_(True))

    return [
        IngredientListItem(
            **IngredientOut.model_validate(ingredient).model_dump(),
            order_count=int(count or 0),
        )
        for ingredient, count in db.execute(stmt).all()
    ]


@router.post(
    "/add",
    summary="Add an ingredient",
    status_code=status.HTTP_201_CREATED,
    response_model=IngredientOut,
)
def add_ingredient(payload: IngredientAddRequest, _: AdminSessionDep, db: SessionDep) -> IngredientOut:
    ingredient = Ingredient(**payload.model_dump())
    db.add(ingredient)
    db.commit()
    db.refresh(ingredient)
    return IngredientOut.model_validate(ingredient)


@router.patch(
    "/modify/{ingredient_id}",
    summary="Modify an ingredient",
    response_model=IngredientOut,
)
def modify_ingredient(
    ingredient_id: UUID,
    payload: IngredientModifyRequest,
    _: AdminSessionDep,
    db: SessionDep,
) -> IngredientOut:
    ingredient = db.get(Ingredient, str(ingredient_id))
    if ingredient is None:
        raise NotFoundError("Ingredient does not exist")

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(ingredient, field, value)
    db.commit()
    db.refresh(ingredient)
    return IngredientOut.model_validate(ingredient)


@router.delete(
    "/delete/{ingredient_id}",
    summary="Delete an ingredient that no order uses",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_ingredient(ingredient_id: UUID, _: AdminSessionDep, db: SessionDep) -> Response:
    ingredient = db.get(Ingredient, str(ingredient_id))
    if ingredient is None:
        raise NotFoundError("Ingredient does not exist")

    in_use = db.execute(
        select(func.count())
        .select_from(IngredientOnOrder)
        .where(IngredientOnOrder.ingredient_id == ingredient.id)
    ).scalar_one()
    if in_use:
        raise ConflictError("Ingredient cannot be deleted. Has orders assigned!")

    try:
        db.delete(ingredient)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        raise InternalError("Error with deletion!", cause=err) from err

    return Response(status_code=status.HTTP_204_NO_CONTENT)
