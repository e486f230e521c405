from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api import deps
from backoffice.services.directory_service import DirectoryService
from backoffice.schemas.directory import DealerCreate, DealerResponse
from backoffice.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[DealerResponse]])
async def list_dealers(db: AsyncSession = Depends(deps.get_db)) -> Any:
    """Dealers for the bill form dropdown, sorted by name."""
    dealers = await DirectoryService.list_dealers(db)
    return SuccessResponse(data=[DealerResponse.model_validate(d) for d in dealers])


@router.post("", response_model=SuccessResponse[DealerResponse])
async def create_dealer(
    dealer_in: DealerCreate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    dealer = await DirectoryService.create_dealer(db, dealer_in.dealer_name)
    return SuccessResponse(data=DealerResponse.model_validate(dealer), message="Dealer created successfully")
