"""Blog post API."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_blog_service, require_admin_secret
from app.schemas.blog import BlogPost, BlogPostCreate, BlogPostUpdate, CreatedResponse
from app.services.blog_service import BlogService

router = APIRouter(prefix="/api/v1", tags=["blog"])


@router.get("/blog-posts", response_model=list[BlogPost])
async def list_blog_posts(service: BlogService = Depends(get_blog_service)) -> list[BlogPost]:  # noqa: B008
    return await service.list_posts()


@router.get("/blog-posts/slug/{slug}", response_model=BlogPost)
async def get_blog_post_by_slug(slug: str, service: BlogService = Depends(get_blog_service)) -> BlogPost:  # noqa: B008
    return await service.get_post_by_slug(slug)


@router.get("/blog-posts/{post_id}", response_model=BlogPost)
async def get_blog_post(post_id: str, service: BlogService = Depends(get_blog_service)) -> BlogPost:  # noqa: B008
    return await service.get_post(post_id)


@router.post(
    "/blog-posts",
    response_model=CreatedResponse,
    status_code=201,
    dependencies=[Depends(require_admin_secret)],
)
async def create_blog_post(
    request: BlogPostCreate,
    service: BlogService = Depends(get_blog_service),  # noqa: B008
) -> CreatedResponse:
    """Create a post; the slug is derived from the title when omitted."""
    return CreatedResponse(id=await service.create_post(request))


@router.patch("/blog-posts/{post_id}", response_model=CreatedResponse, dependencies=[Depends(require_admin_secret)])
async def update_blog_post(
    post_id: str,
    request: BlogPostUpdate,
    service: BlogService = Depends(get_blog_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.update_post(post_id, request))


@router.delete("/blog-posts/{post_id}", response_model=CreatedResponse, dependencies=[Depends(require_admin_secret)])
async def delete_blog_post(
    post_id: str,
    service: BlogService = Depends(get_blog_service),  # noqa: B008
) -> CreatedResponse:
    return CreatedResponse(id=await service.delete_post(post_id))
