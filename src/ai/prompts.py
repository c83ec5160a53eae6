"""Centralized prompt templates for LLM interactions."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

ANALYST_SYSTEM_PROMPT = (
    "You are a shopping deals analyst. Your job is to analyze deals data and provide "
    "concise, helpful answers to user questions. Use bullet points for clarity and be "
    "specific about products, prices, and discounts. Only use the deals you are given."
)

PLANNER_SYSTEM_PROMPT = (
    "You are a helpful shopping assistant that helps users find the best deals online. "
    "Respond in a clear, structured manner."
)


def _format_amount(value: Optional[Decimal]) -> str:
    return "N/A" if value is None else str(value)


def _format_percent(value: Decimal) -> str:
    # 20.00 -> "20", 12.50 -> "12.5"
    return f"{Decimal(value).normalize():f}"


class DealContextRow(BaseModel):
    """One stored deal rendered as a line of analysis context."""

    rank: int
    title: str
    source: str
    currency: str
    price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    product_link: str = ""

    def to_line(self) -> str:
        parts = [
            f"{self.rank}. {self.title} - {self.source} - "
            f"{self.currency} {_format_amount(self.price)}"
        ]
        if self.original_price is not None:
            parts.append(f"(was {self.currency} {self.original_price})")
        if self.discount_percent:
            parts.append(f"{_format_percent(self.discount_percent)}% off")
        else:
            parts.append("No discount")
        return " ".join(parts) + f" - {self.product_link}"


class DealsAnalysisPrompt(BaseModel):
    """User message for answering a question over stored deals."""

    question: str
    context_lines: List[str]

    def to_prompt(self) -> str:
        deals_context = "\n".join(self.context_lines)
        return (
            f"Question: {self.question}\n\n"
            f"Here are the relevant deals:\n\n{deals_context}\n\n"
            "Please provide a concise, bullet-pointed answer based on these deals."
        )


class SearchPlanPrompt(BaseModel):
    """User message asking for a plain-language search plan."""

    sites: List[str]
    min_discount: float
    max_discount: float
    keywords: Optional[str] = None

    def to_prompt(self) -> str:
        keyword_line = (
            f"- Keywords/Product type: {self.keywords}"
            if self.keywords
            else "- No specific keywords"
        )
        return "\n".join(
            [
                "You are a shopping deal finder assistant. Based on the following search "
                "parameters, create a detailed plan for finding deals.",
                "",
                "Search Parameters:",
                f"- Sites to check: {', '.join(self.sites)}",
                f"- Minimum discount: {self.min_discount:g}%",
                f"- Maximum discount: {self.max_discount:g}%",
                keyword_line,
                "",
                "Please provide a concise, structured plan that includes:",
                "1. Which sites will be checked",
                "2. What discount filters will be applied",
                "3. What product keywords (if any) will be used to filter results",
                "4. The expected approach for finding these deals",
                "",
                "Keep the response clear, friendly, and under 200 words.",
            ]
        )
