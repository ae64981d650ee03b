from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from marketplace.models.service_model import Service
from marketplace.schemas.service_schema import ServiceCreate
from marketplace.logger import get_logger

logger = get_logger(__name__)


class ServiceCRUD:
    """Provider-side management of offerings."""

    @staticmethod
    def create_service(db: Session, service: ServiceCreate, provider_id: str) -> Service:
        try:
            db_service = Service(
                title=service.title,
                description=service.description,
                price=service.price,
                category=service.category,
                city=service.city,
                provider_id=provider_id,
                is_active=True,
            )
            db.add(db_service)
            db.commit()
            db.refresh(db_service)
            logger.info(f"Service created: {service.title} by provider {provider_id}")
            return db_service

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating service: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while creating service"
            )

    @staticmethod
    def get_service_by_id(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def deactivate_service(db: Session, service_id: str, provider_id: str) -> Service:
        # Soft delete; bookings keep pointing at the row
        db_service = ServiceCRUD.get_service_by_id(db, service_id)
        if not db_service:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Service not found"
            )

        if db_service.provider_id != provider_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to deactivate this service"
            )

        try:
            db_service.is_active = False
            db.commit()
            db.refresh(db_service)
            logger.info(f"Service deactivated: {service_id}")
            return db_service

        except Exception as e:
            db.rollback()
            logger.error(f"Error deactivating service {service_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error occurred while deactivating service"
            )


service_crud = ServiceCRUD()
