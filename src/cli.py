import argparse
import asyncio
import json
import sys
from typing import Optional

from loguru import logger

from src.ai.llm_client import LLMClient
from src.config import LLMConfig, SearchProviderConfig, get_settings
from src.db.database import async_session, init_db
from src.deals.store import SqlDealStore
from src.errors import DealFinderError
from src.providers.serpapi import SerpApiClient
from src.services.deal_analysis import DealAnalysisService
from src.services.deal_search import DEFAULT_LIMIT, DealSearchService

settings = get_settings()


async def run_search(
    query: str,
    category: Optional[str] = None,
    min_discount: Optional[float] = None,
    limit: int = DEFAULT_LIMIT,
) -> dict:
    """Search, filter and store deals, returning the API response shape."""
    await init_db()
    async with async_session() as session:
        service = DealSearchService(
            lambda: SerpApiClient(SearchProviderConfig.from_settings(settings)),
            SqlDealStore(session),
        )
        result = await service.search(
            query, category=category, min_discount=min_discount, limit=limit
        )
    return {
        "deals": [d.to_dict() for d in result.deals],
        "count": result.count,
        "totalFetched": result.total_fetched,
    }


async def run_analysis(
    question: str, query: Optional[str] = None, min_discount: Optional[float] = None
) -> dict:
    """Answer a question about stored deals."""
    await init_db()
    async with async_session() as session:
        service = DealAnalysisService(
            SqlDealStore(session), lambda: LLMClient(LLMConfig.from_settings(settings))
        )
        analysis = await service.analyze(question, query=query, min_discount=min_discount)
    return {"answer": analysis.answer, "dealsAnalyzed": analysis.deals_analyzed}


def main():
    parser = argparse.ArgumentParser(description="Deal Finder CLI")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    subparsers.add_parser("init", help="Initialize database")

    # serve command
    subparsers.add_parser("serve", help="Start API server")

    # search command
    search_parser = subparsers.add_parser("search", help="Search and store deals")
    search_parser.add_argument("query", help="Product search text")
    search_parser.add_argument("--category", "-c", help="Category label to store with deals")
    search_parser.add_argument("--min-discount", "-m", type=float, help="Minimum discount percent")
    search_parser.add_argument("--limit", "-l", type=int, default=DEFAULT_LIMIT)

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Ask a question about stored deals")
    analyze_parser.add_argument("question", help="Question about stored deals")
    analyze_parser.add_argument("--query", "-q", help="Filter deals by title or search text")
    analyze_parser.add_argument("--min-discount", "-m", type=float, help="Minimum discount percent")

    args = parser.parse_args()

    if args.command == "init":
        asyncio.run(init_db())
    elif args.command == "serve":
        import uvicorn

        uvicorn.run(
            "src.main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.debug,
        )
    elif args.command in ("search", "analyze"):
        if args.min_discount is not None and not 0 <= args.min_discount <= 100:
            parser.error("--min-discount must be between 0 and 100")
        try:
            if args.command == "search":
                if not args.query:
                    parser.error("query cannot be empty")
                if not 1 <= args.limit <= 100:
                    parser.error("--limit must be between 1 and 100")
                output = asyncio.run(
                    run_search(args.query, args.category, args.min_discount, args.limit)
                )
            else:
                if len(args.question) < 5:
                    parser.error("question must be at least 5 characters long")
                output = asyncio.run(
                    run_analysis(args.question, args.query, args.min_discount)
                )
        except DealFinderError as e:
            logger.error(f"{e.message}: {e.details}")
            sys.exit(1)
        print(json.dumps(output, indent=2))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
