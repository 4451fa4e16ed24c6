"""Local content schemas.

Remote Hashnode objects are transformed into these shapes before they reach
the content store. The models use ``pydantic`` so that every item is checked
field by field and a failing item reports all of its issues at once.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Type
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from hashnode_loader.core.error_recovery import ValidationError


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"invalid URL: {value!r}")
    return value


Url = Annotated[str, AfterValidator(_check_url)]


class ContentModel(BaseModel):
    """Base model for content shapes; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")


class Content(ContentModel):
    html: str = ""
    markdown: Optional[str] = None


class Social(ContentModel):
    website: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


class Author(ContentModel):
    id: str
    name: str
    username: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    url: Optional[str] = None
    social: Optional[Social] = None
    followers_count: Optional[int] = None


class CoverImage(ContentModel):
    url: Url
    alt: Optional[str] = None
    attribution: Optional[str] = None
    is_portrait: Optional[bool] = None
    is_attribution_hidden: Optional[bool] = None


class Tag(ContentModel):
    id: Optional[str] = None
    name: str
    slug: str


class Seo(ContentModel):
    title: Optional[str] = None
    description: Optional[str] = None


class OgMetaData(ContentModel):
    image: Optional[str] = None


class PostSeriesRef(ContentModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None


class TocItem(ContentModel):
    id: str
    level: int
    parent_id: Optional[str] = None
    slug: str
    title: str


class TableOfContents(ContentModel):
    is_enabled: bool = False
    items: List[TocItem] = Field(default_factory=list)


class Comment(ContentModel):
    id: str
    date_added: str
    total_reactions: int = 0
    content: Content
    author: Author
    replies: List["Comment"] = Field(default_factory=list)


class CommentsData(ContentModel):
    total_count: int = 0
    comments: List[Comment] = Field(default_factory=list)


class Preferences(ContentModel):
    disable_comments: Optional[bool] = None
    stick_cover_to_bottom: Optional[bool] = None
    pinned_to_blog: Optional[bool] = None
    is_delisted: Optional[bool] = None


class PublicationRef(ContentModel):
    id: Optional[str] = None
    title: str
    url: Optional[str] = None


class PostSchema(ContentModel):
    """A published post."""

    id: str
    cuid: Optional[str] = None
    title: str = Field(min_length=1)
    subtitle: str = ""
    brief: str = ""
    slug: str = Field(min_length=1)
    url: Url
    content: Content
    published_at: datetime
    updated_at: Optional[datetime] = None
    reading_time: int = 0
    word_count: Optional[int] = None
    views: int = 0
    reactions: int = 0
    comments: int = 0
    replies: int = 0
    is_draft: bool = False
    has_latex: bool = False
    hashnode_id: str
    hashnode_url: Url
    author: Author
    co_authors: Optional[List[Author]] = None
    cover_image: Optional[CoverImage] = None
    tags: List[Tag] = Field(default_factory=list)
    series: Optional[PostSeriesRef] = None
    seo: Seo
    og_meta_data: Optional[OgMetaData] = None
    table_of_contents: Optional[TableOfContents] = None
    comments_data: Optional[CommentsData] = None
    preferences: Optional[Preferences] = None
    publication: Optional[PublicationRef] = None


class SeriesAuthor(ContentModel):
    id: str = ""
    name: str = ""
    username: str = ""
    profile_picture: str = ""
    bio: str = ""
    followers_count: int = 0


class SeriesPostAuthor(ContentModel):
    name: str = ""
    username: str = ""
    profile_picture: str = ""


class SeriesPostCover(ContentModel):
    url: Url
    is_portrait: bool = False


class SeriesPost(ContentModel):
    id: str
    title: str
    slug: str
    brief: str = ""
    published_at: datetime
    read_time_in_minutes: int = 0
    views: int = 0
    url: Url
    cover_image: Optional[SeriesPostCover] = None
    author: SeriesPostAuthor = Field(default_factory=SeriesPostAuthor)


class SeriesSchema(ContentModel):
    """A named, ordered collection of posts."""

    id: str
    cuid: Optional[str] = None
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: str = ""
    created_at: datetime
    updated_at: datetime
    cover_image: Optional[CoverImage] = None
    seo: Seo
    author: Optional[SeriesAuthor] = None
    posts: List[SeriesPost] = Field(default_factory=list)
    posts_count: int = 0
    sort_order: str = "asc"


class SearchAuthor(ContentModel):
    id: str
    name: str
    username: str
    profile_picture: str = ""


class SearchRaw(ContentModel):
    cuid: Optional[str] = None


class SearchResultSchema(ContentModel):
    """A post found by one of the configured search terms."""

    id: str
    title: str
    brief: str = ""
    slug: str
    url: Url
    search_term: str
    search_relevance: float
    published_at: datetime
    reaction_count: int = 0
    views: int = 0
    author: SearchAuthor
    cover_image: Optional[CoverImage] = None
    publication: Optional[PublicationRef] = None
    raw: SearchRaw = Field(default_factory=SearchRaw)


class DraftAuthor(ContentModel):
    id: str = "unknown"
    name: str = "Unknown Author"
    username: str = "unknown"
    profile_picture: str = ""


class DraftRaw(ContentModel):
    id: Optional[str] = None


class DraftSchema(ContentModel):
    """An unpublished draft of the authenticated user."""

    id: str
    title: str = "Untitled Draft"
    subtitle: Optional[str] = None
    content: str = ""
    canonical_url: Optional[str] = None
    updated_at: datetime
    created_at: datetime
    author: DraftAuthor = Field(default_factory=DraftAuthor)
    cover_image: Optional[CoverImage] = None
    tags: List[Tag] = Field(default_factory=list)
    table_of_contents: List[TocItem] = Field(default_factory=list)
    is_draft: bool = True
    last_saved: datetime
    raw: DraftRaw = Field(default_factory=DraftRaw)


SCHEMAS: Dict[str, Type[ContentModel]] = {
    "posts": PostSchema,
    "series": SeriesSchema,
    "drafts": DraftSchema,
    "search": SearchResultSchema,
}


def _format_loc(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def validate_payload(schema: Type[BaseModel], data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate ``data`` against ``schema``.

    Args:
        schema: pydantic model class
        data: Transformed item

    Returns:
        The validated payload as a plain dict

    Raises:
        ValidationError: With one ``{"path", "message"}`` issue per failing field
    """
    try:
        return schema.model_validate(data).model_dump()
    except PydanticValidationError as exc:
        issues = [
            {"path": _format_loc(error["loc"]), "message": error["msg"]} for error in exc.errors()
        ]
        summary = "; ".join(f"{issue['path']}: {issue['message']}" for issue in issues)
        raise ValidationError(f"Schema validation failed: {summary}", issues=issues) from exc


def schema_json(schema: Type[BaseModel]) -> Dict[str, Any]:
    """JSON Schema of a content model, for hosts that infer types from it."""
    return schema.model_json_schema()
