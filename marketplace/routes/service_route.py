from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from marketplace.catalog import CATEGORIES, CITIES
from marketplace.services.service_crud import service_crud
from marketplace.services.listing_composer import listing_composer
from marketplace.schemas.service_schema import ListingView, ServiceCreate, ServiceResponse
from marketplace.database import get_db
from marketplace.security.auth import get_current_user
from marketplace.models.user_model import User
from marketplace.routes.errors import http_error
from marketplace.logger import get_logger

service_router = APIRouter()
logger = get_logger(__name__)

# PUBLIC ENDPOINTS - Anyone can browse listings


@service_router.get("/categories", status_code=status.HTTP_200_OK)
async def get_categories():
    return CATEGORIES


@service_router.get("/cities", response_model=List[str], status_code=status.HTTP_200_OK)
async def get_cities():
    return CITIES


@service_router.get(
    "/services", response_model=List[ListingView], status_code=status.HTTP_200_OK
)
async def list_services(
    category: Optional[str] = Query(None, description="Category, matched case-insensitively"),
    city: Optional[str] = Query(None, description="City, matched exactly"),
):
    """Active services with their provider's name"""
    logger.info(f"Fetching services: category={category}, city={city}")
    result = await listing_composer.list_services(category=category, city=city)
    if not result.ok:
        raise http_error(result.error)
    return result.data


# PROVIDER ENDPOINTS - Providers manage their own offerings


@service_router.post(
    "/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED
)
def create_service(
    service: ServiceCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new service offered by the current user"""
    try:
        logger.info(f"Provider {current_user.email} creating service: {service.title}")
        db_service = service_crud.create_service(db, service, current_user.id)
        return ServiceResponse.model_validate(db_service)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating service: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while creating service",
        )


@service_router.delete(
    "/services/{service_id}",
    response_model=ServiceResponse,
    status_code=status.HTTP_200_OK,
)
def deactivate_service(
    service_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Deactivate one of the current user's services"""
    try:
        logger.info(f"Provider {current_user.email} deactivating service: {service_id}")
        db_service = service_crud.deactivate_service(db, service_id, current_user.id)
        return ServiceResponse.model_validate(db_service)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deactivating service {service_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error occurred while deactivating service",
        )
