"""Company directory and part attribute catalog endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from elevatorid.core.config import settings
from elevatorid.core.pagination import PaginationParams
from elevatorid.core.response import DataResponse, ListResponse, paginated
from elevatorid.db.base import get_db
from elevatorid.schemas.directory import (
    CategoryCreate,
    CategoryOut,
    CompanyCreate,
    CompanyOut,
    FeatureCreate,
    FeatureOut,
)
from elevatorid.services.directory import CatalogService, CompanyDirectory

router = APIRouter(tags=["Directory"])

_CLIENT = settings.default_client_id


# ------------------------------------------------------------------
# Companies
# ------------------------------------------------------------------

@router.get("/companies", response_model=ListResponse[CompanyOut])
async def list_companies(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await CompanyDirectory(session, _CLIENT).list_companies(pagination)
    return paginated(
        [CompanyOut.model_validate(c) for c in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/companies", response_model=DataResponse[CompanyOut], status_code=status.HTTP_201_CREATED)
async def create_company(
    body: CompanyCreate,
    session: AsyncSession = Depends(get_db),
):
    company = await CompanyDirectory(session, _CLIENT).create_company(body)
    return {"data": CompanyOut.model_validate(company)}


@router.get("/companies/{company_id}", response_model=DataResponse[CompanyOut])
async def get_company(
    company_id: str,
    session: AsyncSession = Depends(get_db),
):
    company = await CompanyDirectory(session, _CLIENT).get_company(company_id)
    return {"data": CompanyOut.model_validate(company)}


# ------------------------------------------------------------------
# Catalog
# ------------------------------------------------------------------

@router.get("/categories", response_model=ListResponse[CategoryOut])
async def list_categories(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await CatalogService(session, _CLIENT).list_categories(pagination)
    return paginated(
        [CategoryOut.model_validate(c) for c in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/categories", response_model=DataResponse[CategoryOut], status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    session: AsyncSession = Depends(get_db),
):
    category = await CatalogService(session, _CLIENT).create_category(body)
    return {"data": CategoryOut.model_validate(category)}


@router.get("/features", response_model=ListResponse[FeatureOut])
async def list_features(
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await CatalogService(session, _CLIENT).list_features(pagination, category_id)
    return paginated(
        [FeatureOut.model_validate(f) for f in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/features", response_model=DataResponse[FeatureOut], status_code=status.HTTP_201_CREATED)
async def create_feature(
    body: FeatureCreate,
    session: AsyncSession = Depends(get_db),
):
    feature = await CatalogService(session, _CLIENT).create_feature(body)
    return {"data": FeatureOut.model_validate(feature)}
