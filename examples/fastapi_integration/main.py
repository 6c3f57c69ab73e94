"""
FastAPI Integration Example

Demonstrates paged endpoints over an in-memory source and a DynamoDB table,
with next-page links built from the incoming request.
"""

import logging
from datetime import datetime, timezone

import boto3
from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import BaseModel

from pagantic import CapabilityNotSupportedError, PageRequest, SourceRegistry, count
from pagantic.sources import DynamoTableSource, SequenceSource
from pagantic.web import PageEnvelope, PageParams, get_page_with_next_from_request

logging.basicConfig(level=logging.INFO)


class User(BaseModel):
    """User entity stored in DynamoDB"""

    user_id: str
    email: str
    name: str
    age: int
    is_active: bool = True
    created_at: datetime


class Article(BaseModel):
    """Article entity kept in memory"""

    slug: str
    title: str
    published_at: datetime


class AuditLog:
    """A store that can only append; it cannot be paged."""

    entity_type = "AuditLog"


now = datetime.now(timezone.utc)
articles = [
    Article(slug=f"post-{n}", title=f"Post number {n}", published_at=now) for n in range(1, 251)
]

registry = SourceRegistry()
registry.register("users", DynamoTableSource(boto3.client("dynamodb"), "Users", model_cls=User))
registry.register("articles", SequenceSource(articles, entity_type=Article))
registry.register("audit", AuditLog())


def active_users(kwargs: dict) -> dict:
    """Scan filter: only users flagged as active."""
    return {
        **kwargs,
        "FilterExpression": "#active = :yes",
        "ExpressionAttributeNames": {"#active": "is_active"},
        "ExpressionAttributeValues": {":yes": {"BOOL": True}},
    }


app = FastAPI(title="Pagantic + FastAPI Example")


@app.get("/users", response_model=PageEnvelope[User])
async def list_users(request: Request) -> PageEnvelope[User]:
    """List active users, one page at a time"""
    result = await get_page_with_next_from_request(
        registry.get("users"), request, filter=active_users
    )
    return PageEnvelope.from_result(result)


@app.get("/articles", response_model=PageEnvelope[Article])
async def list_articles(request: Request) -> PageEnvelope[Article]:
    """List articles, newest slug first"""
    result = await get_page_with_next_from_request(
        registry.get("articles"),
        request,
        filter=lambda items: sorted(items, key=lambda a: a.slug, reverse=True),
    )
    return PageEnvelope.from_result(result)


@app.get("/articles/count")
async def count_articles() -> dict[str, int]:
    """Total number of articles"""
    return {"count": await count(registry.get("articles"))}


@app.get("/{entity}/page")
async def page_of(entity: str, page_request: PageRequest = Depends(PageParams())) -> dict:
    """Generic page lookup over any registered source"""
    try:
        source = registry.paging(entity)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown entity '{entity}'"
        ) from None
    except CapabilityNotSupportedError as e:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=e.message) from e

    result = await source.get_page(page_request)
    return {"page": result.page, "pagesize": result.page_size, "count": result.count}


# Run with: uvicorn main:app --reload
# Visit: http://localhost:8000/articles?page=2&pagesize=20
