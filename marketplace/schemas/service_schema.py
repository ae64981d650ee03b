from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ServiceBase(BaseModel):
    title: str = Field(..., example="Deep Home Cleaning")
    description: Optional[str] = Field(None, example="Kitchen, bathrooms and living areas")
    price: float = Field(..., ge=0, example=1499.0)
    category: str = Field(..., min_length=1, example="Cleaning")
    city: str = Field(..., min_length=1, example="Pune")


class ServiceCreate(ServiceBase):
    pass


class ServiceResponse(ServiceBase):
    id: str
    is_active: bool
    created_at: datetime
    provider_id: str

    class Config:
        from_attributes = True


class ProviderSummary(BaseModel):
    id: str
    display_name: str


class ListingFilter(BaseModel):
    """Optional listing filters; a field left as None is not applied."""

    category: Optional[str] = None
    city: Optional[str] = None


class ListingView(ServiceResponse):
    # None when no profile matches provider_id
    provider: Optional[ProviderSummary] = None
