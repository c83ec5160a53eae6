from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DealsSearchRequest(CamelModel):
    query: str = Field(..., min_length=1)
    category: Optional[str] = None
    min_discount: Optional[float] = Field(None, ge=0, le=100)
    limit: int = Field(30, ge=1, le=100)


class DealOut(CamelModel):
    title: str
    source: str
    product_link: str
    image_url: str
    price: Optional[float] = None
    original_price: Optional[float] = None
    discount_percent: Optional[int] = None
    currency: str


class DealsSearchResponse(CamelModel):
    deals: List[DealOut]
    count: int
    total_fetched: int


class DealsAnalyzeRequest(CamelModel):
    question: str = Field(..., min_length=5)
    query: Optional[str] = None
    min_discount: Optional[float] = Field(None, ge=0, le=100)


class DealsAnalyzeResponse(CamelModel):
    answer: str
    deals_analyzed: int


class PlanRequest(CamelModel):
    sites: List[str] = Field(..., min_length=1)
    min_discount: float = Field(..., ge=0, le=100)
    max_discount: float = Field(..., ge=0, le=100)
    keywords: Optional[str] = None

    @field_validator("sites")
    @classmethod
    def sites_not_blank(cls, v: List[str]) -> List[str]:
        if any(not site.strip() for site in v):
            raise ValueError("sites must be a non-empty array of site names")
        return v

    @model_validator(mode="after")
    def check_discount_range(self) -> "PlanRequest":
        if self.min_discount > self.max_discount:
            raise ValueError("minDiscount must be less than or equal to maxDiscount")
        return self


class PlanResponse(CamelModel):
    plan: str
    debug_info: Dict[str, Any]


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
