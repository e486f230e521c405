from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime


class DealerCreate(BaseModel):
    dealer_name: str = Field(..., min_length=1, max_length=255)


class DealerResponse(BaseModel):
    id: UUID
    dealer_name: str
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class BranchCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class BranchResponse(BaseModel):
    id: UUID
    name: str
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)
