import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel

from explorer.config import settings
from explorer.search.nl_query import QueryAnalyzer
from explorer.tokens.aliases import load_alias_table
from explorer.validation.input import validate_account
from explorer.view.display import build_transaction_summary
from explorer.view.registry import ViewRegistry
from explorer.view.search_view import SearchView

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("explorer.main")

app = FastAPI(title="Transaction History Explorer", version="0.1.0")

aliases = load_alias_table(settings.alias_table_path or None)
views = ViewRegistry(aliases, analyzer=QueryAnalyzer())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("INCOMING REQUEST: %s %s", request.method, request.url.path)
    response = await call_next(request)
    logger.info(
        "RESPONSE: %s %s -> %s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


class SearchRequest(BaseModel):
    query: Optional[str] = None


async def _open_view(account: str) -> SearchView:
    account = validate_account(account)
    view, created = views.get_or_create(account)
    if created:
        logger.info("NEW VIEW for %s, loading first page", account[:12])
        await view.load_more()
    return view


def _existing_view(account: str) -> SearchView:
    account = validate_account(account)
    view = views.get(account)
    if view is None:
        raise HTTPException(status_code=404, detail="No history loaded for this account")
    return view


def _history_response(view: SearchView) -> dict:
    controller = view.controller
    transactions = view.visible()
    return {
        "account": view.account,
        "query": view.query,
        "criteria": view.criteria().model_dump(mode="json"),
        "pagination": {
            "state": controller.state.value,
            "has_more": controller.has_more,
            "cursor": controller.cursor,
            "loaded": len(controller.transactions),
            "last_error": controller.last_error,
        },
        "transactions": [
            build_transaction_summary(tx, view.account, view.metadata, controller.noise_types)
            for tx in transactions
        ],
    }


@app.get("/v1/history/{account}")
async def history(account: str, q: str = Query(default="")):
    view = await _open_view(account)
    view.set_query(q)
    logger.info("GET history %s | q=%r", view.account[:12], q)
    return _history_response(view)


@app.post("/v1/history/{account}/more")
async def load_more(account: str):
    view = await _open_view(account)
    fetched = await view.load_more()
    logger.info("MORE %s | fetched=%s state=%s", view.account[:12], fetched, view.controller.state.value)
    return {**_history_response(view), "fetched": fetched}


@app.post("/v1/history/{account}/retry")
async def retry(account: str):
    view = _existing_view(account)
    if not view.controller.retry():
        raise HTTPException(status_code=409, detail="Loading has not failed for this account")
    fetched = await view.load_more()
    return {**_history_response(view), "fetched": fetched}


@app.post("/v1/history/{account}/search")
async def search(account: str, body: SearchRequest):
    view = await _open_view(account)
    await view.search(body.query or "")
    logger.info("SEARCH %s | query=%r", view.account[:12], view.query)
    return _history_response(view)
