"""
api/routes/articles.py -- Catalog routes.

Routes:
  POST /articulos  -- create an article (admin only)
  GET  /articulos  -- list all articles (any authenticated role)

Auth policy:
  Both routes run the auth gate; POST additionally requires Role.admin via
  require_role(). The POST body is not a handler parameter: FastAPI would
  decode it before resolving any dependency. article_body() reads and
  validates it only after the role check has passed, so an unauthenticated
  or under-privileged caller never learns whether its body was well-formed.
"""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from api.models import ArticleCreate, ArticleCreatedResponse, ArticleResponse, validation_detail
from auth.dependencies import require_claims, require_role
from auth.models import Claims, Role
from catalog.models import Article
from catalog.store import ArticleStore
from core.errors import ValidationError

router = APIRouter()


async def article_body(
    request: Request,
    claims: Claims = Depends(require_role(Role.admin)),
) -> ArticleCreate:
    """Validate the POST /articulos body once the caller is known to be an admin."""
    raw = await request.body()
    try:
        return ArticleCreate.model_validate_json(raw)
    except PydanticValidationError as exc:
        errors = [{**err, "loc": ("body", *err["loc"])} for err in exc.errors()]
        raise ValidationError(detail=validation_detail(errors)) from exc


@router.post(
    "/articulos",
    response_model=ArticleCreatedResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ArticleCreate.model_json_schema()}},
        }
    },
)
def create_article(
    request: Request,
    body: ArticleCreate = Depends(article_body),
) -> ArticleCreatedResponse:
    """Add an article to the catalog."""
    store: ArticleStore = request.app.state.article_store
    article_id = store.create_article(
        Article(title=body.title, description=body.description, price=body.price)
    )
    return ArticleCreatedResponse(message="Article created.", id=article_id)


@router.get("/articulos", response_model=list[ArticleResponse])
def list_articles(
    request: Request,
    claims: Claims = Depends(require_claims),
) -> list[ArticleResponse]:
    """Return every article in the catalog."""
    store: ArticleStore = request.app.state.article_store
    return [ArticleResponse.from_article(a) for a in store.list_articles()]
