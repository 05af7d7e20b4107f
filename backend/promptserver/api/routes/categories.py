"""Category Routes — category CRUD and hierarchy listing.

Invariants:
    - Reads are public; create/update/delete require authentication
    - /roots is declared before /{category_id}
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from promptserver.api.dependencies import get_current_user
from promptserver.core.commands import CreateCategoryCommand, UpdateCategoryCommand
from promptserver.infrastructure.database import get_db
from promptserver.models.user import User
from promptserver.schemas.category import (
    CategoryCreateRequest, CategoryUpdateRequest, CategoryResponse,
)
from promptserver.services.category_service import CategoryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


def _service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


@router.post(
    "", response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreateRequest,
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(_service),
):
    category = await service.create(CreateCategoryCommand(
        name=body.name,
        display_name=body.display_name,
        description=body.description,
        parent_category_id=body.parent_category_id,
    ))
    return CategoryResponse.model_validate(category)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(service: CategoryService = Depends(_service)):
    return [CategoryResponse.model_validate(c) for c in await service.list_all()]


@router.get("/roots", response_model=list[CategoryResponse])
async def list_root_categories(service: CategoryService = Depends(_service)):
    return [CategoryResponse.model_validate(c) for c in await service.list_roots()]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, service: CategoryService = Depends(_service)):
    return CategoryResponse.model_validate(await service.get(category_id))


@router.get("/{category_id}/subcategories", response_model=list[CategoryResponse])
async def list_subcategories(
    category_id: int, service: CategoryService = Depends(_service),
):
    return [
        CategoryResponse.model_validate(c)
        for c in await service.list_subcategories(category_id)
    ]


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    body: CategoryUpdateRequest,
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(_service),
):
    category = await service.update(UpdateCategoryCommand(
        category_id=category_id,
        display_name=body.display_name,
        description=body.description,
        parent_category_id=body.parent_category_id,
    ))
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    user: User = Depends(get_current_user),
    service: CategoryService = Depends(_service),
):
    await service.delete(category_id)
