"""
Comment service: threaded comments, interactions, reports and moderation.

Root comments get the next floor number on their target. Replies inherit the
floor of their parent, take the next sub-floor under it and carry the chain of
ancestor ids. Every write keeps the parent, root and article counters in step
inside the same transaction.
"""

import logging
from datetime import UTC, datetime, time
from typing import Any, Optional

from sqlalchemy import and_, case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.content import (
    AuditStatus,
    CommentNode,
    CommentStats,
    CommentStatus,
    CommentTargetType,
    InteractionType,
    ReportStatus,
    RiskLevel,
    UserCommentStats,
)
from core.errors import ServiceError
from core.interfaces import CommentService
from core.moderation import AuditResult, SensitiveWordFilter, WordEntry, audit_content
from core.ranking import article_hot_score, comment_hot_score
from infrastructure.config.settings import settings
from infrastructure.database.models import (
    Article,
    Comment,
    CommentAuthorReply,
    CommentFloorBuilding,
    CommentInteraction,
    CommentReport,
    SensitiveWord,
    User,
)

from .queries import count_rows, decremented, fetch_page

logger = logging.getLogger(__name__)

_ROOT_ORDER = {
    "hot": (Comment.hot_score.desc(), Comment.like_count.desc(), Comment.created_at.desc()),
    "like": (Comment.like_count.desc(), Comment.created_at.desc()),
    "time": (Comment.created_at.desc(),),
    "time_asc": (Comment.created_at.asc(),),
}

_COUNTERS = {
    InteractionType.LIKE: "like_count",
    InteractionType.DISLIKE: "dislike_count",
}


def _visible() -> list:
    return [Comment.status == CommentStatus.NORMAL.value, Comment.deleted_at.is_(None)]


def _mentions(data: dict[str, Any]) -> list[str]:
    """Mentioned user ids in request order, blanks and repeats dropped."""
    ids = (str(user_id).strip() for user_id in data.get("at_user_ids") or [])
    return list(dict.fromkeys(user_id for user_id in ids if user_id))


def refresh_hot_state(comment: Comment) -> None:
    """Recompute ``hot_score`` and ``is_hot`` from the comment's counters."""
    comment.hot_score = comment_hot_score(
        comment.like_count,
        comment.dislike_count,
        comment.reply_count,
        comment.created_at,
        is_author=comment.is_author,
    )
    comment.is_hot = comment.hot_score >= settings.comment_hot_threshold


class SqlCommentService(CommentService):
    """CommentService over an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get_comment(self, comment_id: int) -> Comment:
        result = await self.db.execute(
            select(Comment).where(
                Comment.id == comment_id,
                Comment.deleted_at.is_(None),
                Comment.status != CommentStatus.DELETED.value,
            )
        )
        comment = result.scalar_one_or_none()
        if not comment:
            raise ServiceError.not_found("Comment not found")
        return comment

    async def _get_target_article(self, target_type: int, target_id: int) -> Optional[Article]:
        """The commented article, checked for existence and open comments."""
        if target_type != CommentTargetType.ARTICLE.value:
            return None
        article = await self.db.get(Article, target_id)
        if not article or article.deleted_at is not None:
            raise ServiceError.not_found("Article not found")
        if not article.allow_comment:
            raise ServiceError.invalid("Comments are disabled for this article")
        return article

    async def _is_target_author(self, target_type: int, target_id: int, user_id: str) -> bool:
        # Only articles have a known owner
        if target_type != CommentTargetType.ARTICLE.value:
            return False
        article = await self.db.get(Article, target_id)
        return article is not None and article.user_id == user_id

    async def _require_target_author(self, comment: Comment, actor_id: str) -> None:
        if not await self._is_target_author(comment.target_type, comment.target_id, actor_id):
            logger.warning("User %s is not the author of comment %s's target", actor_id, comment.id)
            raise ServiceError.forbidden("Only the author of the commented content can do this")

    async def _load_filter(self) -> SensitiveWordFilter:
        result = await self.db.execute(
            select(SensitiveWord).where(SensitiveWord.is_enabled.is_(True))
        )
        return SensitiveWordFilter(
            WordEntry(word=w.word, level=w.level, action=w.action, replacement=w.replacement)
            for w in result.scalars().all()
        )

    async def _screen(self, content: str) -> tuple[str, AuditResult]:
        """Reject blocked words, audit the text and mask replaceable words."""
        word_filter = await self._load_filter()
        if word_filter.blocked_words(content):
            raise ServiceError.invalid("Comment contains sensitive words")
        audit = audit_content(content, word_filter)
        return word_filter.replace(content), audit

    async def _author_snapshot(self, user_id: str) -> tuple[Optional[str], Optional[str]]:
        user = await self.db.get(User, user_id)
        if not user:
            return None, None
        return user.username, user.avatar

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    async def _record_floor_building(self, comment: Comment) -> None:
        """Append ``comment`` to its author's run of comments on the target."""
        result = await self.db.execute(
            select(CommentFloorBuilding).where(
                CommentFloorBuilding.target_type == comment.target_type,
                CommentFloorBuilding.target_id == comment.target_id,
                CommentFloorBuilding.user_id == comment.user_id,
            )
        )
        building = result.scalar_one_or_none()
        now = datetime.now(UTC)
        if not building:
            self.db.add(
                CommentFloorBuilding(
                    target_type=comment.target_type,
                    target_id=comment.target_id,
                    user_id=comment.user_id,
                    comment_ids=[comment.id],
                    floor_count=1,
                    first_comment_time=now,
                    last_comment_time=now,
                )
            )
            return
        building.comment_ids = list(building.comment_ids or []) + [comment.id]
        building.floor_count = building.floor_count + 1
        building.last_comment_time = now

    async def _bump(self, comment_id: int, column: str, delta: int) -> None:
        attr = getattr(Comment, column)
        value = attr + delta if delta > 0 else decremented(attr, -delta)
        await self.db.execute(
            update(Comment).where(Comment.id == comment_id).values({column: value})
        )

    async def _count_on_target(self, comment: Comment, delta: int) -> None:
        """Adjust the article's comment counter and, on growth, its hot score."""
        if comment.target_type != CommentTargetType.ARTICLE.value:
            return
        if delta > 0:
            value = Article.comment_count + delta
        else:
            value = decremented(Article.comment_count, -delta)
        await self.db.execute(
            update(Article).where(Article.id == comment.target_id).values(comment_count=value)
        )
        if delta > 0:
            article = await self.db.get(Article, comment.target_id)
            if article:
                await self.db.refresh(article)
                article.hot_score = article_hot_score(
                    article.view_count,
                    article.like_count,
                    article.comment_count,
                    article.favorite_count,
                    article.publish_time,
                )

    async def _soft_delete(self, comment: Comment) -> None:
        comment.status = CommentStatus.DELETED.value
        comment.deleted_at = datetime.now(UTC)
        if comment.parent_id:
            await self._bump(comment.parent_id, "reply_count", -1)
        if comment.root_id and comment.root_id != comment.id:
            await self._bump(comment.root_id, "total_reply_count", -1)
        await self._count_on_target(comment, -1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_root_comments(
        self, target_type: int, target_id: int, sort_by: str, page: int, page_size: int
    ) -> tuple[list[Comment], int]:
        order = _ROOT_ORDER.get(sort_by, _ROOT_ORDER["hot"])
        query = (
            select(Comment)
            .where(
                Comment.target_type == target_type,
                Comment.target_id == target_id,
                Comment.parent_id == 0,
                *_visible(),
            )
            .order_by(Comment.is_pinned.desc(), *order, Comment.id.desc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def get_hot_comments(self, target_type: int, target_id: int, limit: int) -> list[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(
                Comment.target_type == target_type,
                Comment.target_id == target_id,
                Comment.is_hot.is_(True),
                *_visible(),
            )
            .order_by(Comment.hot_score.desc(), Comment.like_count.desc(), Comment.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_comment_stats(self, target_type: int, target_id: int) -> CommentStats:
        today = datetime.combine(datetime.now(UTC).date(), time.min, tzinfo=UTC)
        result = await self.db.execute(
            select(
                func.count(Comment.id),
                func.sum(case((Comment.parent_id == 0, 1), else_=0)),
                func.sum(case((Comment.created_at >= today, 1), else_=0)),
                func.max(Comment.created_at),
            ).where(
                Comment.target_type == target_type,
                Comment.target_id == target_id,
                *_visible(),
            )
        )
        total, roots, today_count, last = result.one()
        return CommentStats(
            target_type=target_type,
            target_id=target_id,
            total_count=total or 0,
            root_count=roots or 0,
            today_count=today_count or 0,
            last_comment_time=last,
        )

    async def get_user_comment_stats(self, user_id: str) -> UserCommentStats:
        result = await self.db.execute(
            select(
                func.count(Comment.id),
                func.sum(Comment.like_count),
                func.sum(Comment.reply_count),
                func.sum(case((Comment.is_hot.is_(True), 1), else_=0)),
                func.sum(case((Comment.is_pinned.is_(True), 1), else_=0)),
                func.sum(case((Comment.is_featured.is_(True), 1), else_=0)),
            ).where(Comment.user_id == user_id, Comment.deleted_at.is_(None))
        )
        total, likes, replies, hot, pinned, featured = result.one()
        total = total or 0
        likes = likes or 0
        return UserCommentStats(
            total_comments=total,
            total_likes=likes,
            total_replies=replies or 0,
            avg_like_count=likes / total if total else 0.0,
            hot_comment_count=hot or 0,
            pinned_count=pinned or 0,
            featured_count=featured or 0,
        )

    async def get_comment(self, comment_id: int) -> Comment:
        return await self._get_comment(comment_id)

    async def list_replies(
        self, comment_id: int, page: int, page_size: int
    ) -> tuple[list[Comment], int]:
        await self._get_comment(comment_id)
        query = (
            select(Comment)
            .where(Comment.parent_id == comment_id, *_visible())
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def get_comment_tree(self, comment_id: int) -> CommentNode:
        """The comment with every visible reply beneath it, nested by parent."""
        comment = await self._get_comment(comment_id)
        thread_root = comment.root_id or comment.id
        result = await self.db.execute(
            select(Comment)
            .where(Comment.root_id == thread_root, Comment.id != comment.id, *_visible())
            .order_by(Comment.depth.asc(), Comment.created_at.asc(), Comment.id.asc())
        )

        nodes = {comment.id: CommentNode(comment=comment)}
        for reply in result.scalars().all():
            nodes[reply.id] = CommentNode(comment=reply)
            parent = nodes.get(reply.parent_id)
            # Replies under a hidden parent, or outside this subtree, are dropped
            if parent is not None:
                parent.replies.append(nodes[reply.id])
        return nodes[comment.id]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_root_comment(
        self,
        actor_id: str,
        data: dict[str, Any],
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Comment:
        target_type = data["target_type"]
        target_id = data["target_id"]
        article = await self._get_target_article(target_type, target_id)
        content, audit = await self._screen(data["content"])

        result = await self.db.execute(
            select(func.coalesce(func.max(Comment.floor_number), 0)).where(
                Comment.target_type == target_type,
                Comment.target_id == target_id,
                Comment.parent_id == 0,
            )
        )
        floor = (result.scalar() or 0) + 1
        username, avatar = await self._author_snapshot(actor_id)

        comment = Comment(
            target_type=target_type,
            target_id=target_id,
            user_id=actor_id,
            username=username,
            user_avatar=avatar,
            parent_id=0,
            root_id=0,
            floor_number=floor,
            sub_floor_number=0,
            reply_chain=[],
            depth=0,
            content=content,
            content_type=data.get("content_type", 1),
            images=list(data.get("images") or []),
            at_user_ids=_mentions(data),
            status=self._status_for(audit),
            is_author=article is not None and article.user_id == actor_id,
            audit_status=audit.status.value,
            risk_level=audit.risk_level.value,
            ip=ip,
            user_agent=user_agent,
        )
        self.db.add(comment)
        await self.db.flush()
        comment.root_id = comment.id

        await self._count_on_target(comment, 1)
        await self._record_floor_building(comment)
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info(
            "Comment %s on %s:%s by %s (floor %s, risk %s)",
            comment.id,
            target_type,
            target_id,
            actor_id,
            floor,
            audit.risk_level.name,
        )
        return comment

    async def create_reply(
        self,
        actor_id: str,
        data: dict[str, Any],
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Comment:
        result = await self.db.execute(
            select(Comment).where(
                Comment.id == data["parent_id"],
                Comment.deleted_at.is_(None),
                Comment.status != CommentStatus.DELETED.value,
            )
        )
        parent = result.scalar_one_or_none()
        if not parent:
            raise ServiceError.not_found("Parent comment not found")

        await self._get_target_article(parent.target_type, parent.target_id)
        content, audit = await self._screen(data["content"])

        result = await self.db.execute(
            select(func.coalesce(func.max(Comment.sub_floor_number), 0)).where(
                Comment.parent_id == parent.id
            )
        )
        sub_floor = (result.scalar() or 0) + 1
        root_id = parent.root_id or parent.id
        username, avatar = await self._author_snapshot(actor_id)

        reply = Comment(
            target_type=parent.target_type,
            target_id=parent.target_id,
            user_id=actor_id,
            username=username,
            user_avatar=avatar,
            parent_id=parent.id,
            root_id=root_id,
            reply_to_comment_id=data.get("reply_to_comment_id") or parent.id,
            reply_to_user_id=data.get("reply_to_user_id") or parent.user_id,
            floor_number=parent.floor_number,
            sub_floor_number=sub_floor,
            reply_chain=list(parent.reply_chain or []) + [parent.id],
            depth=parent.depth + 1,
            content=content,
            content_type=data.get("content_type", 1),
            images=list(data.get("images") or []),
            at_user_ids=_mentions(data),
            status=self._status_for(audit),
            is_author=await self._is_target_author(
                parent.target_type, parent.target_id, actor_id
            ),
            audit_status=audit.status.value,
            risk_level=audit.risk_level.value,
            ip=ip,
            user_agent=user_agent,
        )
        self.db.add(reply)
        await self.db.flush()

        await self._bump(parent.id, "reply_count", 1)
        await self._bump(root_id, "total_reply_count", 1)
        await self._count_on_target(reply, 1)
        await self._record_floor_building(reply)

        await self.db.refresh(parent)
        refresh_hot_state(parent)
        await self.db.commit()
        await self.db.refresh(reply)

        logger.info(
            "Reply %s to comment %s by %s (floor %s-%s)",
            reply.id,
            parent.id,
            actor_id,
            reply.floor_number,
            sub_floor,
        )
        return reply

    @staticmethod
    def _status_for(audit: AuditResult) -> int:
        if audit.risk_level >= RiskLevel.HIGH or audit.status == AuditStatus.REJECTED:
            return CommentStatus.FOLDED.value
        return CommentStatus.NORMAL.value

    async def delete_comment(self, actor_id: str, comment_id: int, is_admin: bool = False) -> None:
        comment = await self._get_comment(comment_id)
        if comment.user_id != actor_id and not is_admin:
            logger.warning("User %s tried to delete comment %s", actor_id, comment_id)
            raise ServiceError.forbidden("You can only delete your own comments")

        await self._soft_delete(comment)
        await self.db.commit()
        logger.info("Comment %s deleted by %s", comment_id, actor_id)

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    async def _apply(self, actor_id: str, comment_id: int, action: InteractionType) -> None:
        comment = await self._get_comment(comment_id)
        result = await self.db.execute(
            select(CommentInteraction.id).where(
                CommentInteraction.comment_id == comment_id,
                CommentInteraction.user_id == actor_id,
                CommentInteraction.action_type == action.value,
            )
        )
        if result.scalar_one_or_none() is not None:
            verb = "liked" if action == InteractionType.LIKE else "disliked"
            raise ServiceError.conflict(f"Comment already {verb}")

        self.db.add(
            CommentInteraction(comment_id=comment_id, user_id=actor_id, action_type=action.value)
        )
        await self._bump(comment_id, _COUNTERS[action], 1)
        await self.db.refresh(comment)
        refresh_hot_state(comment)
        await self.db.commit()

    async def _revert(self, actor_id: str, comment_id: int, action: InteractionType) -> None:
        comment = await self._get_comment(comment_id)
        result = await self.db.execute(
            delete(CommentInteraction).where(
                CommentInteraction.comment_id == comment_id,
                CommentInteraction.user_id == actor_id,
                CommentInteraction.action_type == action.value,
            )
        )
        if not result.rowcount:
            verb = "liked" if action == InteractionType.LIKE else "disliked"
            raise ServiceError.invalid(f"Comment not {verb}")

        await self._bump(comment_id, _COUNTERS[action], -1)
        await self.db.refresh(comment)
        refresh_hot_state(comment)
        await self.db.commit()

    async def like_comment(self, actor_id: str, comment_id: int) -> None:
        await self._apply(actor_id, comment_id, InteractionType.LIKE)

    async def unlike_comment(self, actor_id: str, comment_id: int) -> None:
        await self._revert(actor_id, comment_id, InteractionType.LIKE)

    async def dislike_comment(self, actor_id: str, comment_id: int) -> None:
        await self._apply(actor_id, comment_id, InteractionType.DISLIKE)

    async def undislike_comment(self, actor_id: str, comment_id: int) -> None:
        await self._revert(actor_id, comment_id, InteractionType.DISLIKE)

    # ------------------------------------------------------------------
    # Reports and author actions
    # ------------------------------------------------------------------

    async def report_comment(
        self, actor_id: str, comment_id: int, reason_type: int, reason_desc: Optional[str]
    ) -> CommentReport:
        comment = await self._get_comment(comment_id)
        result = await self.db.execute(
            select(CommentReport.id).where(
                CommentReport.comment_id == comment_id,
                CommentReport.reporter_user_id == actor_id,
            )
        )
        if result.scalar_one_or_none() is not None:
            raise ServiceError.conflict("You have already reported this comment")

        report = CommentReport(
            comment_id=comment_id,
            reporter_user_id=actor_id,
            reason_type=reason_type,
            reason_desc=reason_desc,
            status=ReportStatus.PENDING.value,
        )
        self.db.add(report)
        await self.db.flush()

        reports = await count_rows(
            self.db, select(CommentReport.id).where(CommentReport.comment_id == comment_id)
        )
        if (
            reports >= settings.comment_fold_report_threshold
            and comment.status == CommentStatus.NORMAL.value
        ):
            comment.status = CommentStatus.FOLDED.value
            logger.info("Comment %s folded after %d reports", comment_id, reports)

        await self.db.commit()
        await self.db.refresh(report)
        return report

    async def add_author_reply(
        self, actor_id: str, comment_id: int, content: str
    ) -> CommentAuthorReply:
        comment = await self._get_comment(comment_id)
        await self._require_target_author(comment, actor_id)

        note = CommentAuthorReply(comment_id=comment_id, author_user_id=actor_id, content=content)
        self.db.add(note)
        await self.db.commit()
        await self.db.refresh(note)
        return note

    async def set_pinned(self, actor_id: str, comment_id: int, pinned: bool) -> None:
        comment = await self._get_comment(comment_id)
        await self._require_target_author(comment, actor_id)
        comment.is_pinned = pinned
        await self.db.commit()
        logger.info("Comment %s pinned=%s by %s", comment_id, pinned, actor_id)

    async def set_featured(self, actor_id: str, comment_id: int, featured: bool) -> None:
        comment = await self._get_comment(comment_id)
        await self._require_target_author(comment, actor_id)
        comment.is_featured = featured
        await self.db.commit()
        logger.info("Comment %s featured=%s by %s", comment_id, featured, actor_id)

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    async def batch_delete(self, actor_id: str, comment_ids: list[int]) -> int:
        result = await self.db.execute(
            select(Comment).where(
                Comment.id.in_(list(dict.fromkeys(comment_ids))),
                Comment.deleted_at.is_(None),
                Comment.status != CommentStatus.DELETED.value,
            )
        )
        comments = list(result.scalars().all())
        for comment in comments:
            await self._soft_delete(comment)
        await self.db.commit()

        logger.info("Admin %s deleted %d comments", actor_id, len(comments))
        return len(comments)

    async def batch_fold(self, actor_id: str, comment_ids: list[int]) -> int:
        result = await self.db.execute(
            update(Comment)
            .where(
                and_(
                    Comment.id.in_(list(dict.fromkeys(comment_ids))),
                    Comment.status == CommentStatus.NORMAL.value,
                    Comment.deleted_at.is_(None),
                )
            )
            .values(status=CommentStatus.FOLDED.value)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()

        logger.info("Admin %s folded %d comments", actor_id, result.rowcount)
        return result.rowcount

    async def list_pending_reports(
        self, page: int, page_size: int
    ) -> tuple[list[CommentReport], int]:
        query = (
            select(CommentReport)
            .where(CommentReport.status == ReportStatus.PENDING.value)
            .order_by(CommentReport.created_at.asc(), CommentReport.id.asc())
        )
        return await fetch_page(self.db, query, page, page_size)

    async def handle_report(
        self, actor_id: str, report_id: int, result: str, approved: bool
    ) -> CommentReport:
        report = await self.db.get(CommentReport, report_id)
        if not report:
            raise ServiceError.not_found("Report not found")
        if report.status != ReportStatus.PENDING.value:
            raise ServiceError.conflict("Report has already been handled")

        report.handle_user_id = actor_id
        report.handle_result = result
        report.handle_time = datetime.now(UTC)

        if approved:
            report.status = ReportStatus.UPHELD.value
            comment = await self.db.get(Comment, report.comment_id)
            if comment and comment.deleted_at is None:
                await self._soft_delete(comment)
        else:
            report.status = ReportStatus.REJECTED.value

        await self.db.commit()
        await self.db.refresh(report)

        logger.info("Report %s handled by %s (approved=%s)", report_id, actor_id, approved)
        return report

    async def list_sensitive_words(self) -> list[SensitiveWord]:
        result = await self.db.execute(select(SensitiveWord).order_by(SensitiveWord.id.asc()))
        return list(result.scalars().all())

    async def add_sensitive_word(self, data: dict[str, Any]) -> SensitiveWord:
        word = data["word"].strip()
        if not word:
            raise ServiceError.invalid("Word is required")
        result = await self.db.execute(select(SensitiveWord.id).where(SensitiveWord.word == word))
        if result.scalar_one_or_none() is not None:
            raise ServiceError.conflict("Sensitive word already exists")

        entry = SensitiveWord(
            word=word,
            level=data.get("level", 1),
            action=data.get("action", 1),
            replacement=data.get("replacement"),
            is_enabled=True,
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)

        logger.info("Sensitive word %r added (level %s, action %s)", word, entry.level, entry.action)
        return entry
