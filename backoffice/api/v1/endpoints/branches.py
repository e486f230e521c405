from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api import deps
from backoffice.services.directory_service import DirectoryService
from backoffice.schemas.directory import BranchCreate, BranchResponse
from backoffice.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[BranchResponse]])
async def list_branches(db: AsyncSession = Depends(deps.get_db)) -> Any:
    branches = await DirectoryService.list_branches(db)
    return SuccessResponse(data=[BranchResponse.model_validate(b) for b in branches])


@router.post("", response_model=SuccessResponse[BranchResponse])
async def create_branch(
    branch_in: BranchCreate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    branch = await DirectoryService.create_branch(db, branch_in.name)
    return SuccessResponse(data=BranchResponse.model_validate(branch), message="Branch created successfully")
