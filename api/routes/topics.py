"""
Topic API routes.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Path

from api.dependencies import (
    MAX_PAGE_SIZE,
    Articles,
    CurrentActor,
    OptionalActor,
    Page20,
    normalize_limit,
    parse_int,
)
from api.response import ok
from api.schemas.article import (
    ArticleListItem,
    ArticleListResult,
    TopicCreateRequest,
    TopicDetailResult,
    TopicResponse,
)
from api.schemas.common import Envelope

router = APIRouter(prefix="/topics", tags=["topics"])

TopicId = Annotated[int, Path(ge=1)]

HOT_TOPICS_DEFAULT = 10


@router.get("/hot", response_model=Envelope[list[TopicResponse]])
async def get_hot_topics(service: Articles, limit: Optional[str] = None):
    count = normalize_limit(parse_int(limit, HOT_TOPICS_DEFAULT), HOT_TOPICS_DEFAULT, MAX_PAGE_SIZE)
    topics = await service.get_hot_topics(count)
    return ok([TopicResponse.model_validate(topic) for topic in topics])


@router.get("/{topic_id}", response_model=Envelope[TopicDetailResult])
async def get_topic(topic_id: TopicId, service: Articles, viewer: OptionalActor):
    detail = await service.get_topic(topic_id, viewer.actor_id if viewer else None)
    return ok(TopicDetailResult.model_validate(detail))


@router.get("/{topic_id}/articles", response_model=Envelope[ArticleListResult])
async def list_topic_articles(topic_id: TopicId, service: Articles, paging: Page20):
    articles, total = await service.list_topic_articles(topic_id, paging.page, paging.page_size)
    return ok(
        ArticleListResult(
            articles=[ArticleListItem.from_summary(summary) for summary in articles],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )
    )


@router.post("", response_model=Envelope[TopicResponse])
async def create_topic(body: TopicCreateRequest, actor: CurrentActor, service: Articles):
    """Create a topic, or return the existing one with the same name."""
    topic = await service.create_topic(actor.actor_id, body.model_dump())
    return ok(TopicResponse.model_validate(topic))


@router.post("/{topic_id}/follow", response_model=Envelope[None])
async def follow_topic(topic_id: TopicId, actor: CurrentActor, service: Articles):
    await service.follow_topic(actor.actor_id, topic_id)
    return ok()


@router.delete("/{topic_id}/follow", response_model=Envelope[None])
async def unfollow_topic(topic_id: TopicId, actor: CurrentActor, service: Articles):
    await service.unfollow_topic(actor.actor_id, topic_id)
    return ok()
