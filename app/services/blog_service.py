"""Blog post CRUD over the ``blog-posts`` collection."""

from __future__ import annotations

import re

from app.core.errors import NotFound
from app.core.logger import get_logger
from app.schemas.blog import BlogPost, BlogPostCreate, BlogPostUpdate
from app.services.store import Collections, DocumentStore, StoredDocument

logger = get_logger(__name__)

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """Lowercase, strip punctuation and join words with hyphens."""
    return _WHITESPACE.sub("-", _NON_WORD.sub("", title.lower()))


def to_blog_post(document: StoredDocument) -> BlogPost:
    data = document.data
    return BlogPost.model_validate(
        {
            "id": document.id,
            "slug": data.get("slug") or "",
            "title": data.get("title") or "",
            "subtitle": data.get("subtitle"),
            "author": data.get("author") or {"name": "Anonymous"},
            "publishDate": data.get("publishDate") or "",
            "updatedDate": data.get("updatedDate"),
            "mainImage": data.get("mainImage"),
            "images": data.get("images") or [],
            "summary": data.get("summary") or "",
            "content": data.get("content") or "",
            "readingTime": data.get("readingTime"),
            "tags": data.get("tags") or [],
            "categories": data.get("categories") or [],
            "relatedPosts": data.get("relatedPosts") or [],
            "created_at": data.get("created_at"),
            "updated_at": data.get("updated_at"),
        }
    )


class BlogService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def create_post(self, payload: BlogPostCreate) -> str:
        document = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not document.get("slug"):
            document["slug"] = slugify(payload.title)

        timestamp = self._store.server_timestamp()
        document["created_at"] = timestamp
        document["updated_at"] = timestamp

        post_id = await self._store.add_document(Collections.BLOG_POSTS, document)
        logger.info("Blog post created: id=%s slug=%s", post_id, document["slug"])
        return post_id

    async def list_posts(self) -> list[BlogPost]:
        documents = await self._store.get_all_documents(Collections.BLOG_POSTS)
        return [to_blog_post(document) for document in documents]

    async def get_post(self, post_id: str) -> BlogPost:
        document = await self._store.get_document(Collections.BLOG_POSTS, post_id)
        if document is None:
            raise NotFound(f"Blog post with ID {post_id} not found")
        return to_blog_post(document)

    async def get_post_by_slug(self, slug: str) -> BlogPost:
        """Return the first post stored under ``slug``."""
        documents = await self._store.query_documents(Collections.BLOG_POSTS, "slug", slug)
        if not documents:
            raise NotFound(f"Blog post with slug {slug} not found")
        return to_blog_post(documents[0])

    async def update_post(self, post_id: str, payload: BlogPostUpdate) -> str:
        if await self._store.get_document(Collections.BLOG_POSTS, post_id) is None:
            raise NotFound(f"Blog post with ID {post_id} not found")

        document = payload.to_document()
        document["updated_at"] = self._store.server_timestamp()
        await self._store.set_document(Collections.BLOG_POSTS, post_id, document, merge=True)
        logger.info("Blog post updated: id=%s", post_id)
        return post_id

    async def delete_post(self, post_id: str) -> str:
        if await self._store.get_document(Collections.BLOG_POSTS, post_id) is None:
            raise NotFound(f"Blog post with ID {post_id} not found")

        await self._store.delete_document(Collections.BLOG_POSTS, post_id)
        logger.info("Blog post deleted: id=%s", post_id)
        return post_id
