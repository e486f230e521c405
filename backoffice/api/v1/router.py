"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from backoffice.api.v1.endpoints import bills, dealers, branches

# Create API v1 router
api_router = APIRouter()

api_router.include_router(bills.router, prefix="/dealers/bills", tags=["Dealer Bills"])
api_router.include_router(dealers.router, prefix="/dealers", tags=["Dealers"])
api_router.include_router(branches.router, prefix="/branches", tags=["Branches"])
