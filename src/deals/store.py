from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from loguru import logger
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.deals.normalizer import Deal
from src.errors import StorageError
from src.models.deal import DealRecord

ANALYSIS_ROW_LIMIT = 50

_CENTS = Decimal("0.01")


def to_decimal(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


class DealStore(ABC):
    @abstractmethod
    async def add_deals(
        self, deals: Sequence[Deal], search_query: str, category: Optional[str] = None
    ) -> int:
        """Persist deals as new rows and return how many were written."""
        ...

    @abstractmethod
    async def find_deals(
        self,
        text: Optional[str] = None,
        min_discount: Optional[float] = None,
        limit: int = ANALYSIS_ROW_LIMIT,
    ) -> List[DealRecord]:
        """Stored deals matching all given filters, biggest discount first."""
        ...


class SqlDealStore(DealStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_deals(
        self, deals: Sequence[Deal], search_query: str, category: Optional[str] = None
    ) -> int:
        records = [
            DealRecord(
                title=deal.title,
                source=deal.source,
                product_link=deal.product_link,
                image_url=deal.image_url,
                price=to_decimal(deal.price),
                original_price=to_decimal(deal.original_price),
                discount_percent=to_decimal(deal.discount_percent),
                currency=deal.currency,
                search_query=search_query,
                category=category,
            )
            for deal in deals
        ]
        try:
            self.session.add_all(records)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database insert failed: {e}")
            raise StorageError("Failed to store deals in database", details=str(e)) from e

        logger.info(f"Stored {len(records)} deals for query '{search_query}'")
        return len(records)

    async def find_deals(
        self,
        text: Optional[str] = None,
        min_discount: Optional[float] = None,
        limit: int = ANALYSIS_ROW_LIMIT,
    ) -> List[DealRecord]:
        filters = []
        if text:
            filters.append(
                or_(
                    DealRecord.title.icontains(text, autoescape=True),
                    DealRecord.search_query.icontains(text, autoescape=True),
                )
            )
        if min_discount is not None:
            filters.append(DealRecord.discount_percent >= Decimal(str(min_discount)))

        stmt = (
            select(DealRecord)
            .order_by(DealRecord.discount_percent.desc().nulls_last(), DealRecord.id.asc())
            .limit(limit)
        )
        if filters:
            stmt = stmt.where(and_(*filters))

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Database query failed: {e}")
            raise StorageError("Failed to query deals from database", details=str(e)) from e
        return list(result.scalars().all())
