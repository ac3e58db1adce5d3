"""API route handlers for the newshub web API."""

from __future__ import annotations

import logging
import math
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from newshub.cache import cache_key_for, remember
from newshub.storage.articles import ArticleStore, DuplicateArticleError
from newshub.storage.connection import get_connection
from newshub.storage.preferences import (
    create_preference,
    delete_preference,
    list_preferences,
    update_preference,
)
from newshub.web.deps import throttled_user
from newshub.web.models import (
    Article,
    ArticleCreate,
    ArticleListResponse,
    ArticleUpdate,
    IngestionRunListResponse,
    MessageResponse,
    Preference,
    PreferenceIn,
)
from newshub.web.queries import list_articles, list_ingestion_runs, personalized_feed

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(throttled_user)])
health_router = APIRouter()


def _article_page(rows: list[dict], total: int, page: int, per_page: int) -> dict:
    return {
        "articles": rows,
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if total else 0,
    }


def _conflict() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail="An article with this title and published_at already exists",
    )


@health_router.get("/health")
def health(request: Request) -> JSONResponse:
    """Check database connectivity and return health status."""
    database_path = request.app.state.database_path
    try:
        with get_connection(database_path) as conn:
            conn.execute("SELECT 1")
        return JSONResponse({"status": "healthy", "database": "ok"})
    except (sqlite3.Error, OSError) as exc:
        logger.warning("Health check failed: %s", exc)
        return JSONResponse(
            {"status": "unhealthy", "database": "error", "detail": str(exc)},
            status_code=503,
        )


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------
@router.get("/articles", response_model=ArticleListResponse)
def articles(
    request: Request,
    search: str | None = None,
    author: str | None = None,
    published_at: str | None = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
) -> ArticleListResponse:
    database_path = request.app.state.database_path

    filters: dict[str, str] = {}
    if search:
        filters["search"] = search
    if author:
        filters["author"] = author
    if published_at:
        filters["published_at"] = published_at

    key = cache_key_for(
        "articles_index", {**filters, "page": page, "per_page": per_page}
    )

    def _load() -> dict:
        rows, total = list_articles(
            database_path, filters=filters, page=page, per_page=per_page
        )
        return _article_page(rows, total, page, per_page)

    data = remember(request.app.state.cache, key, request.app.state.cache_ttl, _load)
    return ArticleListResponse(**data)


@router.post("/articles", response_model=Article, status_code=201)
def create_article(request: Request, body: ArticleCreate) -> Article:
    store = ArticleStore(request.app.state.database_path)
    try:
        article = store.create(body.to_fields())
    except DuplicateArticleError as exc:
        raise _conflict() from exc
    logger.info("Article %d created via API", article.id)
    return Article(**article.to_dict())


@router.get("/articles/{article_id}", response_model=Article)
def article_by_id(request: Request, article_id: int) -> Article:
    article = ArticleStore(request.app.state.database_path).get(article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return Article(**article.to_dict())


@router.put("/articles/{article_id}", response_model=Article)
def update_article(request: Request, article_id: int, body: ArticleUpdate) -> Article:
    store = ArticleStore(request.app.state.database_path)
    try:
        article = store.update(article_id, body.to_fields())
    except DuplicateArticleError as exc:
        raise _conflict() from exc
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return Article(**article.to_dict())


@router.delete("/articles/{article_id}", response_model=MessageResponse)
def delete_article(request: Request, article_id: int) -> MessageResponse:
    if not ArticleStore(request.app.state.database_path).delete(article_id):
        raise HTTPException(status_code=404, detail="Article not found")
    return MessageResponse(message="Article deleted successfully")


@router.get("/feed/personalized", response_model=ArticleListResponse)
def feed(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    user: dict = Depends(throttled_user),
) -> ArticleListResponse:
    database_path = request.app.state.database_path
    key = cache_key_for(
        "articles_personalized",
        {"user_id": user["id"], "page": page, "per_page": per_page},
    )

    def _load() -> dict:
        rows, total = personalized_feed(
            database_path, user["id"], page=page, per_page=per_page
        )
        return _article_page(rows, total, page, per_page)

    data = remember(request.app.state.cache, key, request.app.state.cache_ttl, _load)
    return ArticleListResponse(**data)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------
@router.get("/preferences", response_model=list[Preference])
def preferences(request: Request, user: dict = Depends(throttled_user)) -> list[Preference]:
    rows = list_preferences(request.app.state.database_path, user["id"])
    return [Preference(**r) for r in rows]


@router.post("/preferences", response_model=Preference, status_code=201)
def create_pref(
    request: Request, body: PreferenceIn, user: dict = Depends(throttled_user)
) -> Preference:
    row = create_preference(request.app.state.database_path, user["id"], body.model_dump())
    return Preference(**row)


@router.put("/preferences/{preference_id}", response_model=Preference)
def update_pref(
    request: Request,
    preference_id: int,
    body: PreferenceIn,
    user: dict = Depends(throttled_user),
) -> Preference:
    row = update_preference(
        request.app.state.database_path,
        user["id"],
        preference_id,
        body.model_dump(exclude_unset=True),
    )
    if row is None:
        raise HTTPException(status_code=404, detail="Preference not found")
    return Preference(**row)


@router.delete("/preferences/{preference_id}", response_model=MessageResponse)
def delete_pref(
    request: Request, preference_id: int, user: dict = Depends(throttled_user)
) -> MessageResponse:
    if not delete_preference(request.app.state.database_path, user["id"], preference_id):
        raise HTTPException(status_code=404, detail="Preference not found")
    return MessageResponse(message="Preference deleted successfully")


# ---------------------------------------------------------------------------
# Ingestion runs
# ---------------------------------------------------------------------------
@router.get("/ingestion/runs", response_model=IngestionRunListResponse)
def runs(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
) -> IngestionRunListResponse:
    rows, total = list_ingestion_runs(
        request.app.state.database_path, page=page, per_page=per_page
    )
    pages = math.ceil(total / per_page) if total else 0
    return IngestionRunListResponse(
        runs=rows,
        total=total,
        page=page,
        per_page=per_page,
        pages=pages,
    )
