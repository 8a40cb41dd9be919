"""List-page-data API endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from ..auth.dependencies import CurrentPrincipal
from ..errors import QueryValidationError
from ..listdata.result import ListPageResult
from ..models.list_page import ListPageRequest, ListPageResponse, SearchSpec, SortField, SortSpec
from ..pagination import CursorMethod, OffsetMethod, PaginationRequest, create_link_header
from ..services.list_page_data import ListPageDataService, get_list_page_data_service


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/{entity}/list-page-data",
    tags=["List Page Data"],
    responses={
        400: {"description": "Bad Request - Invalid list query"},
        403: {"description": "Forbidden"},
        404: {"description": "Unknown entity"},
        500: {"description": "Store failure"}
    }
)

Service = Annotated[ListPageDataService, Depends(get_list_page_data_service)]


def parse_sort(sort: Optional[str]) -> Optional[SortSpec]:
    """Parse ``field[:asc|desc],...`` into a sort specification.

    Raises:
        QueryValidationError: If a direction is neither asc nor desc
    """
    if not sort:
        return None

    fields = []
    for part in sort.split(","):
        part = part.strip()
        if not part:
            continue
        name, _, direction = part.partition(":")
        direction = (direction or "asc").upper()
        if direction not in ("ASC", "DESC"):
            raise QueryValidationError(f"Invalid sort direction '{direction.lower()}' for '{name}'", field="sort")
        fields.append(SortField(field=name.strip(), direction=direction))

    return SortSpec(fields=fields)


def _set_link_header(request: Request, response: Response, result: ListPageResult, params: dict) -> None:
    """Add an RFC 8288 Link header pointing at the next page."""
    next_cursor = result.pagination.next_cursor
    if not next_cursor:
        return

    base_url = str(request.url).split('?')[0]
    link_header = create_link_header(base_url=base_url, params=params, next_cursor=next_cursor)
    if link_header:
        response.headers["Link"] = link_header


def _link_params(body: Optional[ListPageRequest]) -> Optional[dict]:
    """Query parameters reproducing a POST body on the GET variant.

    Returns None when the body uses filters or search options, which the
    query-string variant cannot express.
    """
    if body is None:
        return {}
    if body.filters or (body.search is not None and body.search.options is not None):
        return None

    params = {}
    if body.pagination is not None and body.pagination.limit > 0:
        params["limit"] = body.pagination.limit
    if body.search is not None:
        params["q"] = body.search.query
    if body.sort is not None and body.sort.fields:
        params["sort"] = ",".join(f"{f.field}:{f.direction.lower()}" for f in body.sort.fields)
    return params


@router.post(
    "",
    response_model=ListPageResponse,
    summary="List a page of entities",
    description=(
        "Filter, search, sort and paginate an entity collection. "
        "Offset pagination reports page numbers; cursor pagination reports only nextCursor."
    ),
    responses={
        200: {"description": "Page retrieved successfully"},
        422: {"description": "Malformed request body"}
    }
)
async def post_list_page_data(
    entity: str,
    request: Request,
    response: Response,
    service: Service,
    principal: CurrentPrincipal,
    body: Annotated[Optional[ListPageRequest], Body()] = None
) -> ListPageResponse:
    """List a page of entities from a JSON request body.

    Args:
        entity: Entity name from the path
        request: FastAPI request object
        response: FastAPI response object for adding headers
        service: List page data service
        principal: Caller identified by the bearer token, if any
        body: List request; omitted body lists with defaults

    Returns:
        Page envelope with data, pagination metadata and search results
    """
    logger.info(f"POST list-page-data for '{entity}'")

    result = await service.get_list_page_data(entity, body, principal)

    link_params = _link_params(body)
    if link_params is not None:
        _set_link_header(request, response, result, link_params)

    return result.to_response()


@router.get(
    "",
    response_model=ListPageResponse,
    summary="List a page of entities (query parameters)",
    description="Query-string variant without typed filters; used by Link header navigation.",
    responses={
        200: {"description": "Page retrieved successfully"}
    }
)
async def get_list_page_data(
    entity: str,
    request: Request,
    response: Response,
    service: Service,
    principal: CurrentPrincipal,
    limit: Annotated[int, Query(description="Items per page (defaults to 20, clamped to 100)")] = 0,
    page: Annotated[Optional[int], Query(description="1-based page number")] = None,
    cursor: Annotated[Optional[str], Query(description="Cursor from a previous nextCursor")] = None,
    q: Annotated[Optional[str], Query(description="Free-text search query")] = None,
    sort: Annotated[Optional[str], Query(description="Comma-separated field[:asc|desc] list")] = None
) -> ListPageResponse:
    """List a page of entities from query parameters.

    Args:
        entity: Entity name from the path
        request: FastAPI request object
        response: FastAPI response object for adding headers
        service: List page data service
        principal: Caller identified by the bearer token, if any
        limit: Items per page
        page: Page number for offset pagination
        cursor: Token for cursor pagination
        q: Search query
        sort: Sort fields

    Returns:
        Page envelope with data, pagination metadata and search results

    Raises:
        QueryValidationError: If both page and cursor are given or sort is malformed
    """
    logger.info(f"GET list-page-data for '{entity}'")

    if page is not None and cursor is not None:
        raise QueryValidationError("Use either page or cursor, not both", field="cursor")

    pagination = PaginationRequest(
        limit=limit,
        offset=OffsetMethod(page=page) if page is not None else None,
        cursor=CursorMethod(token=cursor) if cursor is not None else None
    )
    list_request = ListPageRequest(
        search=SearchSpec(query=q) if q is not None else None,
        sort=parse_sort(sort),
        pagination=pagination
    )

    result = await service.get_list_page_data(entity, list_request, principal)

    _set_link_header(request, response, result, {"limit": limit or None, "q": q, "sort": sort})

    return result.to_response()
