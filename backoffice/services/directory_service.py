"""Directory Service - dealers and branches referenced by bills"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.directory import Dealer, Branch


class DirectoryService:
    @staticmethod
    async def get_dealer(db: AsyncSession, dealer_id: UUID) -> Optional[Dealer]:
        result = await db.execute(select(Dealer).where(Dealer.id == dealer_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_branch(db: AsyncSession, branch_id: UUID) -> Optional[Branch]:
        result = await db.execute(select(Branch).where(Branch.id == branch_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_dealers(db: AsyncSession) -> List[Dealer]:
        result = await db.execute(select(Dealer).order_by(Dealer.dealer_name))
        return list(result.scalars().all())

    @staticmethod
    async def list_branches(db: AsyncSession) -> List[Branch]:
        result = await db.execute(select(Branch).order_by(Branch.name))
        return list(result.scalars().all())

    @staticmethod
    async def create_dealer(db: AsyncSession, dealer_name: str) -> Dealer:
        dealer = Dealer(dealer_name=dealer_name.strip())
        db.add(dealer)
        await db.commit()
        await db.refresh(dealer)
        return dealer

    @staticmethod
    async def create_branch(db: AsyncSession, name: str) -> Branch:
        branch = Branch(name=name.strip())
        db.add(branch)
        await db.commit()
        await db.refresh(branch)
        return branch
