from fastapi import APIRouter, Depends

from careerpath.models import CareerCatalogResponse, CareerCategory, ErrorResponse
from careerpath.services.career_catalog import CareerCatalog, get_career_catalog

router = APIRouter(prefix="/api/careers", tags=["careers"])


@router.get("", response_model=CareerCatalogResponse)
def list_categories(catalog: CareerCatalog = Depends(get_career_catalog)):
    return CareerCatalogResponse(categories=catalog.all())


@router.get("/{slug}", response_model=CareerCategory, responses={404: {"model": ErrorResponse}})
def get_category(slug: str, catalog: CareerCatalog = Depends(get_career_catalog)):
    return catalog.get(slug)
