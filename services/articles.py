"""
Article service: publishing, revisions, drafts, categories and topics.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Optional

import markdown
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.content import (
    ArticleDetail,
    ArticleStatus,
    ArticleSummary,
    ArticleVisibility,
    CategoryNode,
    HistoryChangeType,
    TopicDetail,
)
from core.errors import ServiceError
from core.interfaces import ArticleService
from core.ranking import article_hot_score, read_time_minutes
from infrastructure.database.models import (
    Article,
    ArticleColumn,
    ArticleContent,
    ArticleDraft,
    ArticleHistory,
    ArticleTopic,
    Category,
    ColumnArticle,
    Topic,
    TopicFollow,
    User,
)

from .queries import decremented, escape_like, fetch_page, summarize

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 10

# Fields an edit may change directly on the article row
_EDITABLE_FIELDS = (
    "title",
    "summary",
    "cover_image",
    "visibility",
    "allow_comment",
    "is_paid",
    "price",
    "keywords",
    "description",
    "tags",
    "content_type",
)

# Nullable columns an edit may clear by sending null
_CLEARABLE_FIELDS = ("summary", "cover_image", "keywords", "description")

# Draft columns that always hold a value
_REQUIRED_DRAFT_FIELDS = ("category_id", "column_id", "tags", "topics")

_ARTICLE_ORDER = {
    "hot": (Article.hot_score.desc(), Article.publish_time.desc(), Article.id.desc()),
    "like": (Article.like_count.desc(), Article.publish_time.desc(), Article.id.desc()),
    "time": (Article.publish_time.desc(), Article.id.desc()),
}


def render_content(article_id: int, text: str) -> dict[str, Any]:
    """Column values of an ArticleContent row for a markdown body."""
    word_count = len(text)
    return {
        "article_id": article_id,
        "content": text,
        "content_html": markdown.markdown(text),
        "word_count": word_count,
        "read_time": read_time_minutes(word_count),
    }


def _listed_conditions() -> list:
    """Articles anyone may see in listings."""
    return [
        Article.status == ArticleStatus.PUBLISHED.value,
        Article.visibility == ArticleVisibility.PUBLIC.value,
        Article.deleted_at.is_(None),
    ]


def _clean_names(names: list[str]) -> list[str]:
    seen: list[str] = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.append(name)
    return seen


class SqlArticleService(ArticleService):
    """ArticleService over an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        """
        Args:
            db: Async database session
        """
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get_article(self, article_id: int) -> Article:
        result = await self.db.execute(
            select(Article).where(
                Article.id == article_id,
                Article.deleted_at.is_(None),
                Article.status != ArticleStatus.DELETED.value,
            )
        )
        article = result.scalar_one_or_none()
        if not article:
            raise ServiceError.not_found("Article not found")
        return article

    async def _get_owned_article(self, actor_id: str, article_id: int) -> Article:
        article = await self._get_article(article_id)
        if article.user_id != actor_id:
            logger.warning("User %s tried to modify article %s", actor_id, article_id)
            raise ServiceError.forbidden("You can only modify your own articles")
        return article

    async def _get_owned_draft(self, actor_id: str, draft_id: int) -> ArticleDraft:
        draft = await self.db.get(ArticleDraft, draft_id)
        if not draft:
            raise ServiceError.not_found("Draft not found")
        if draft.user_id != actor_id:
            raise ServiceError.forbidden("You can only access your own drafts")
        return draft

    async def _get_topic(self, topic_id: int) -> Topic:
        topic = await self.db.get(Topic, topic_id)
        if not topic:
            raise ServiceError.not_found("Topic not found")
        return topic

    async def _require_category(self, category_id: int) -> None:
        if category_id and not await self.db.get(Category, category_id):
            raise ServiceError.not_found("Category not found")

    # ------------------------------------------------------------------
    # Counters and relations
    # ------------------------------------------------------------------

    async def _bump_category(self, category_id: int, delta: int) -> None:
        if not category_id:
            return
        if delta > 0:
            value = Category.article_count + delta
        else:
            value = decremented(Category.article_count, -delta)
        await self.db.execute(
            update(Category).where(Category.id == category_id).values(article_count=value)
        )

    def _refresh_hot_score(self, article: Article) -> None:
        article.hot_score = article_hot_score(
            article.view_count,
            article.like_count,
            article.comment_count,
            article.favorite_count,
            article.publish_time,
        )

    async def _sync_topics(self, article: Article, names: list[str], actor_id: str) -> None:
        """Make the article's topic relations match ``names``, creating topics as needed."""
        names = _clean_names(names)
        result = await self.db.execute(
            select(Topic)
            .join(ArticleTopic, ArticleTopic.topic_id == Topic.id)
            .where(ArticleTopic.article_id == article.id)
        )
        current = {topic.name: topic for topic in result.scalars().all()}

        for name, topic in current.items():
            if name in names:
                continue
            await self.db.execute(
                delete(ArticleTopic).where(
                    ArticleTopic.article_id == article.id, ArticleTopic.topic_id == topic.id
                )
            )
            await self.db.execute(
                update(Topic)
                .where(Topic.id == topic.id)
                .values(article_count=decremented(Topic.article_count))
            )

        for name in names:
            if name in current:
                continue
            topic = await self._find_or_create_topic(name, actor_id)
            self.db.add(ArticleTopic(article_id=article.id, topic_id=topic.id))
            await self.db.execute(
                update(Topic)
                .where(Topic.id == topic.id)
                .values(article_count=Topic.article_count + 1)
            )

        article.topics = names

    async def _find_or_create_topic(
        self, name: str, actor_id: str, description: Optional[str] = None
    ) -> Topic:
        result = await self.db.execute(select(Topic).where(Topic.name == name))
        topic = result.scalar_one_or_none()
        if topic:
            return topic
        topic = Topic(name=name, description=description, creator_id=actor_id, status=1)
        self.db.add(topic)
        await self.db.flush()
        return topic

    async def _require_owned_column(self, column_id: int, actor_id: str) -> None:
        if not column_id:
            return
        column = await self.db.get(ArticleColumn, column_id)
        if not column:
            raise ServiceError.not_found("Column not found")
        if column.user_id != actor_id:
            raise ServiceError.forbidden("You can only publish into your own columns")

    async def _attach_to_column(self, article: Article, column_id: int) -> None:
        existing = await self.db.execute(
            select(ColumnArticle.id).where(
                ColumnArticle.column_id == column_id, ColumnArticle.article_id == article.id
            )
        )
        if existing.scalar_one_or_none():
            return
        self.db.add(ColumnArticle(column_id=column_id, article_id=article.id, sort_order=0))
        await self.db.execute(
            update(ArticleColumn)
            .where(ArticleColumn.id == column_id)
            .values(article_count=ArticleColumn.article_count + 1)
        )

    async def _detach_from_column(self, article: Article) -> None:
        if not article.column_id:
            return
        removed = await self.db.execute(
            delete(ColumnArticle).where(
                ColumnArticle.column_id == article.column_id,
                ColumnArticle.article_id == article.id,
            )
        )
        if removed.rowcount:
            await self.db.execute(
                update(ArticleColumn)
                .where(ArticleColumn.id == article.column_id)
                .values(article_count=decremented(ArticleColumn.article_count))
            )
    async def _record_history(
        self,
        article: Article,
        content: Optional[str],
        change_type: HistoryChangeType,
        operator_id: str,
        reason: Optional[str] = None,
    ) -> ArticleHistory:
        result = await self.db.execute(
            select(func.max(ArticleHistory.version)).where(ArticleHistory.article_id == article.id)
        )
        version = (result.scalar() or 0) + 1
        history = ArticleHistory(
            article_id=article.id,
            version=version,
            title=article.title,
            summary=article.summary,
            content=content,
            change_type=change_type.value,
            change_reason=reason,
            operator_id=operator_id,
        )
        self.db.add(history)
        return history

    async def _publish(
        self,
        actor_id: str,
        fields: dict[str, Any],
        content: str,
        change_type: HistoryChangeType,
        reason: Optional[str] = None,
    ) -> Article:
        """Insert an article with its body, first revision, counters and topics."""
        topics = fields.pop("topics", None) or []
        column_id = fields.get("column_id") or 0
        await self._require_category(fields.get("category_id") or 0)
        await self._require_owned_column(column_id, actor_id)

        now = datetime.now(UTC)
        article = Article(
            user_id=actor_id,
            status=ArticleStatus.PUBLISHED.value,
            publish_time=now,
            topics=[],
            **fields,
        )
        self.db.add(article)
        await self.db.flush()

        self.db.add(ArticleContent(**render_content(article.id, content)))
        await self._record_history(article, content, change_type, actor_id, reason)
        await self._bump_category(article.category_id, 1)
        if column_id:
            await self._attach_to_column(article, column_id)
        if topics:
            await self._sync_topics(article, topics, actor_id)
        return article

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    async def list_articles(
        self,
        *,
        sort_by: str,
        category_id: Optional[int],
        column_id: Optional[int],
        keyword: Optional[str],
        page: int,
        page_size: int,
    ) -> tuple[list[ArticleSummary], int]:
        conditions = _listed_conditions()
        if category_id:
            conditions.append(Article.category_id == category_id)
        if column_id:
            conditions.append(Article.column_id == column_id)
        if keyword and keyword.strip():
            pattern = f"%{escape_like(keyword.strip())}%"
            conditions.append(
                or_(
                    Article.title.ilike(pattern, escape="\\"),
                    Article.summary.ilike(pattern, escape="\\"),
                )
            )

        order = _ARTICLE_ORDER.get(sort_by, _ARTICLE_ORDER["hot"])
        query = select(Article).where(and_(*conditions)).order_by(*order)
        articles, total = await fetch_page(self.db, query, page, page_size)
        return await summarize(self.db, articles), total

    async def get_article(self, article_id: int, viewer_id: Optional[str]) -> ArticleDetail:
        article = await self._get_article(article_id)
        is_author = viewer_id is not None and viewer_id == article.user_id

        if not is_author:
            if article.status != ArticleStatus.PUBLISHED.value:
                raise ServiceError.not_found("Article not found")
            if article.visibility != ArticleVisibility.PUBLIC.value:
                raise ServiceError.forbidden("You do not have access to this article")

        await self.db.execute(
            update(Article)
            .where(Article.id == article.id)
            .values(view_count=Article.view_count + 1)
        )
        await self.db.refresh(article)
        self._refresh_hot_score(article)
        await self.db.commit()

        result = await self.db.execute(
            select(ArticleContent).where(ArticleContent.article_id == article.id)
        )
        content = result.scalar_one_or_none()
        author = await self.db.get(User, article.user_id)
        category = await self.db.get(Category, article.category_id) if article.category_id else None

        return ArticleDetail(
            article=article,
            content=content,
            author=author,
            category=category,
            is_author=is_author,
        )

    async def get_article_history(self, article_id: int) -> list[ArticleHistory]:
        await self._get_article(article_id)
        result = await self.db.execute(
            select(ArticleHistory)
            .where(ArticleHistory.article_id == article_id)
            .order_by(ArticleHistory.version.desc())
        )
        return list(result.scalars().all())

    async def create_article(self, actor_id: str, data: dict[str, Any]) -> Article:
        fields = dict(data)
        content = fields.pop("content")
        article = await self._publish(actor_id, fields, content, HistoryChangeType.CREATE)
        await self.db.commit()
        await self.db.refresh(article)

        logger.info("Article %s published by %s", article.id, actor_id)
        return article

    async def update_article(self, actor_id: str, article_id: int, data: dict[str, Any]) -> Article:
        article = await self._get_owned_article(actor_id, article_id)
        changes = dict(data)
        reason = changes.pop("change_reason", None) or "User edit"

        new_category = changes.pop("category_id", None)
        if new_category is not None and new_category != article.category_id:
            await self._require_category(new_category)
            await self._bump_category(article.category_id, -1)
            await self._bump_category(new_category, 1)
            article.category_id = new_category

        new_column = changes.pop("column_id", None)
        if new_column is not None and new_column != article.column_id:
            await self._require_owned_column(new_column, actor_id)
            await self._detach_from_column(article)
            if new_column:
                await self._attach_to_column(article, new_column)
            article.column_id = new_column

        topics = changes.pop("topics", None)
        if topics is not None:
            await self._sync_topics(article, topics, actor_id)

        new_content = changes.pop("content", None)
        if new_content is not None:
            result = await self.db.execute(
                select(ArticleContent).where(ArticleContent.article_id == article.id)
            )
            body = result.scalar_one_or_none()
            values = render_content(article.id, new_content)
            if body:
                for field, value in values.items():
                    setattr(body, field, value)
            else:
                self.db.add(ArticleContent(**values))

        for field, value in changes.items():
            if field not in _EDITABLE_FIELDS:
                continue
            if value is None and field not in _CLEARABLE_FIELDS:
                continue
            setattr(article, field, value)

        await self._record_history(article, new_content, HistoryChangeType.EDIT, actor_id, reason)
        await self.db.commit()
        await self.db.refresh(article)

        logger.info("Article %s edited by %s", article.id, actor_id)
        return article

    async def delete_article(self, actor_id: str, article_id: int) -> None:
        article = await self._get_owned_article(actor_id, article_id)

        article.status = ArticleStatus.DELETED.value
        article.deleted_at = datetime.now(UTC)
        await self._bump_category(article.category_id, -1)
        await self._detach_from_column(article)

        result = await self.db.execute(
            select(ArticleTopic.topic_id).where(ArticleTopic.article_id == article.id)
        )
        topic_ids = list(result.scalars().all())
        if topic_ids:
            await self.db.execute(
                update(Topic)
                .where(Topic.id.in_(topic_ids))
                .values(article_count=decremented(Topic.article_count))
            )

        await self.db.commit()
        logger.info("Article %s deleted by %s", article_id, actor_id)

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    async def save_draft(self, actor_id: str, data: dict[str, Any]) -> ArticleDraft:
        draft = ArticleDraft(
            user_id=actor_id,
            auto_save_count=1,
            last_edit_time=datetime.now(UTC),
            **data,
        )
        self.db.add(draft)
        await self.db.commit()
        await self.db.refresh(draft)
        return draft

    async def list_drafts(
        self, actor_id: str, page: int, page_size: int
    ) -> tuple[list[ArticleDraft], int]:
        query = (
            select(ArticleDraft)
            .where(ArticleDraft.user_id == actor_id)
            .order_by(ArticleDraft.updated_at.desc(), ArticleDraft.id.desc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def get_draft(self, actor_id: str, draft_id: int) -> ArticleDraft:
        return await self._get_owned_draft(actor_id, draft_id)

    async def update_draft(
        self, actor_id: str, draft_id: int, data: dict[str, Any]
    ) -> ArticleDraft:
        draft = await self._get_owned_draft(actor_id, draft_id)
        for field, value in data.items():
            if value is None and field in _REQUIRED_DRAFT_FIELDS:
                continue
            setattr(draft, field, value)
        draft.auto_save_count = draft.auto_save_count + 1
        draft.last_edit_time = datetime.now(UTC)
        await self.db.commit()
        await self.db.refresh(draft)
        return draft

    async def delete_draft(self, actor_id: str, draft_id: int) -> None:
        draft = await self._get_owned_draft(actor_id, draft_id)
        await self.db.delete(draft)
        await self.db.commit()

    async def publish_draft(self, actor_id: str, draft_id: int) -> Article:
        draft = await self._get_owned_draft(actor_id, draft_id)
        if draft.is_published:
            raise ServiceError.conflict("Draft has already been published")
        if not draft.title or not draft.title.strip():
            raise ServiceError.invalid("Title is required to publish")
        if not draft.content or len(draft.content) < MIN_CONTENT_LENGTH:
            raise ServiceError.invalid(
                f"Content must be at least {MIN_CONTENT_LENGTH} characters to publish"
            )

        fields = {
            "title": draft.title,
            "summary": draft.summary,
            "cover_image": draft.cover_image,
            "category_id": draft.category_id,
            "column_id": draft.column_id,
            "tags": list(draft.tags or []),
            "topics": list(draft.topics or []),
        }
        article = await self._publish(
            actor_id, fields, draft.content, HistoryChangeType.PUBLISH, "Published from draft"
        )
        draft.is_published = True
        draft.article_id = article.id
        await self.db.commit()
        await self.db.refresh(article)

        logger.info("Draft %s published as article %s", draft_id, article.id)
        return article

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def get_category_tree(self) -> list[CategoryNode]:
        result = await self.db.execute(
            select(Category)
            .where(Category.is_show.is_(True))
            .order_by(Category.sort_order.asc(), Category.id.asc())
        )
        categories = list(result.scalars().all())

        nodes = {category.id: CategoryNode(category=category) for category in categories}
        roots: list[CategoryNode] = []
        for category in categories:
            node = nodes[category.id]
            if category.parent_id == 0:
                roots.append(node)
            elif category.parent_id in nodes:
                nodes[category.parent_id].children.append(node)
        return roots

    async def list_category_articles(
        self, category_id: int, page: int, page_size: int
    ) -> tuple[list[ArticleSummary], int]:
        await self._require_category(category_id)
        query = (
            select(Article)
            .where(*_listed_conditions(), Article.category_id == category_id)
            .order_by(Article.publish_time.desc(), Article.id.desc())
        )
        articles, total = await fetch_page(self.db, query, page, page_size)
        return await summarize(self.db, articles), total

    async def create_category(self, data: dict[str, Any]) -> Category:
        parent_id = data.get("parent_id") or 0
        if parent_id and not await self.db.get(Category, parent_id):
            raise ServiceError.not_found("Parent category not found")

        category = Category(is_show=True, **data)
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)

        logger.info("Category %s (%s) created", category.id, category.name)
        return category

    # ------------------------------------------------------------------
    # Topics
    # ------------------------------------------------------------------

    async def get_hot_topics(self, limit: int) -> list[Topic]:
        result = await self.db.execute(
            select(Topic)
            .where(Topic.status == 1)
            .order_by(
                Topic.is_hot.desc(),
                Topic.follow_count.desc(),
                Topic.article_count.desc(),
                Topic.id.asc(),
            )
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_topic(self, topic_id: int, viewer_id: Optional[str]) -> TopicDetail:
        topic = await self._get_topic(topic_id)
        is_followed = False
        if viewer_id:
            is_followed = await self._is_following(viewer_id, topic_id)
        return TopicDetail(topic=topic, is_followed=is_followed)

    async def list_topic_articles(
        self, topic_id: int, page: int, page_size: int
    ) -> tuple[list[ArticleSummary], int]:
        await self._get_topic(topic_id)
        query = (
            select(Article)
            .join(ArticleTopic, ArticleTopic.article_id == Article.id)
            .where(*_listed_conditions(), ArticleTopic.topic_id == topic_id)
            .order_by(Article.publish_time.desc(), Article.id.desc())
        )
        articles, total = await fetch_page(self.db, query, page, page_size)
        return await summarize(self.db, articles), total

    async def create_topic(self, actor_id: str, data: dict[str, Any]) -> Topic:
        name = data["name"].strip()
        if not name:
            raise ServiceError.invalid("Topic name is required")
        topic = await self._find_or_create_topic(name, actor_id, data.get("description"))
        if data.get("cover_image") and topic.creator_id == actor_id and not topic.cover_image:
            topic.cover_image = data["cover_image"]
        await self.db.commit()
        await self.db.refresh(topic)
        return topic

    async def _is_following(self, user_id: str, topic_id: int) -> bool:
        result = await self.db.execute(
            select(TopicFollow.id).where(
                TopicFollow.user_id == user_id, TopicFollow.topic_id == topic_id
            )
        )
        return result.scalar_one_or_none() is not None

    async def follow_topic(self, actor_id: str, topic_id: int) -> None:
        await self._get_topic(topic_id)
        if await self._is_following(actor_id, topic_id):
            raise ServiceError.conflict("Already following this topic")

        self.db.add(TopicFollow(user_id=actor_id, topic_id=topic_id))
        await self.db.execute(
            update(Topic).where(Topic.id == topic_id).values(follow_count=Topic.follow_count + 1)
        )
        await self.db.commit()
        logger.info("User %s followed topic %s", actor_id, topic_id)

    async def unfollow_topic(self, actor_id: str, topic_id: int) -> None:
        await self._get_topic(topic_id)
        result = await self.db.execute(
            delete(TopicFollow).where(
                TopicFollow.user_id == actor_id, TopicFollow.topic_id == topic_id
            )
        )
        if not result.rowcount:
            raise ServiceError.invalid("Not following this topic")

        await self.db.execute(
            update(Topic)
            .where(Topic.id == topic_id)
            .values(follow_count=decremented(Topic.follow_count))
        )
        await self.db.commit()
        logger.info("User %s unfollowed topic %s", actor_id, topic_id)
