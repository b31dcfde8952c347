from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from moneymanager.api.auth import get_current_profile
from moneymanager.database.connection import get_db as get_session
from moneymanager.database.db_service import get_db_service
from moneymanager.models.schemas import Category, CategoryCreate, CategoryType, Profile
from moneymanager.services.categories import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


def get_category_service(session: Session = Depends(get_session)) -> CategoryService:
    return CategoryService(get_db_service(session))


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    category: CategoryCreate,
    current_profile: Profile = Depends(get_current_profile),
    service: CategoryService = Depends(get_category_service),
):
    return service.add(current_profile, category.name, category.icon, category.type)


@router.get("", response_model=List[Category])
async def get_categories(
    current_profile: Profile = Depends(get_current_profile),
    service: CategoryService = Depends(get_category_service),
):
    return service.list_for_owner(current_profile)


@router.get("/{type}", response_model=List[Category])
async def get_categories_by_type(
    type: CategoryType,
    current_profile: Profile = Depends(get_current_profile),
    service: CategoryService = Depends(get_category_service),
):
    return service.list_by_type(current_profile, type)


@router.put("/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    category: CategoryCreate,
    current_profile: Profile = Depends(get_current_profile),
    service: CategoryService = Depends(get_category_service),
):
    return service.update(current_profile, category_id, category.name, category.icon, category.type)
