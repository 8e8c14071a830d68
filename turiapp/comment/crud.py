from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy import select, literal, func, case
from sqlalchemy.orm import Session, aliased

from ..core.repository import Repository
from .models import Comment

comments = Repository(Comment)

OLDEST_FIRST = (Comment.created_at.asc(), Comment.id.asc())
NEWEST_FIRST = (Comment.created_at.desc(), Comment.id.desc())


def get_comment(db: Session, comment_id: int) -> Optional[Comment]:
    return comments.get(db, comment_id)


def _public():
    return Comment.is_public.is_(True)


def get_comments_by_review(db: Session, review_id: int, limit: int = 50, offset: int = 0,
                           top_level_only: bool = False) -> List[Comment]:
    query = db.query(Comment).filter(Comment.review_id == review_id, _public())
    if top_level_only:
        query = query.filter(Comment.parent_id.is_(None))
    return query.order_by(*OLDEST_FIRST).offset(offset).limit(limit).all()


def get_comment_replies(db: Session, parent_id: int, limit: int = 10, offset: int = 0) -> List[Comment]:
    return (
        db.query(Comment)
        .filter(Comment.parent_id == parent_id, _public())
        .order_by(*OLDEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_comment_thread(db: Session, comment_id: int) -> List[Tuple[Comment, int]]:
    """
    Tên Function: get_comment_thread

    1. Mô tả ngắn gọn:
    Lấy một bình luận và toàn bộ các phản hồi con cháu của nó.

    2. Mô tả công dụng:
    Dùng một truy vấn đệ quy (WITH RECURSIVE) duy nhất: bước gốc chọn
    bình luận ban đầu với level 0, bước đệ quy nối các bình luận có
    parent_id trỏ tới một nút đã có trong cây với level + 1. Chỉ các bình
    luận công khai được đi qua, nên một nhánh bị ẩn sẽ ẩn luôn con của nó.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - comment_id (int): ID bình luận gốc

    4. Giá trị trả về:
    - List[Tuple[Comment, int]]: các cặp (bình luận, level), sắp theo
      level rồi thời gian tạo
    """
    thread = (
        select(Comment.id.label("id"), literal(0).label("level"))
        .where(Comment.id == comment_id, _public())
        .cte(name="comment_thread", recursive=True)
    )
    reply = aliased(Comment)
    thread = thread.union_all(
        select(reply.id, thread.c.level + 1)
        .join(thread, reply.parent_id == thread.c.id)
        .where(reply.is_public.is_(True))
    )
    return (
        db.query(Comment, thread.c.level)
        .join(thread, Comment.id == thread.c.id)
        .order_by(thread.c.level.asc(), *OLDEST_FIRST)
        .all()
    )


def get_user_comments(db: Session, user_id: int, limit: int = 20, offset: int = 0) -> List[Comment]:
    return (
        db.query(Comment)
        .filter(Comment.user_id == user_id, _public())
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_recent_comments(db: Session, limit: int = 20) -> List[Comment]:
    return db.query(Comment).filter(_public()).order_by(*NEWEST_FIRST).limit(limit).all()


def search_comments(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[Comment]:
    return (
        db.query(Comment)
        .filter(_public(), Comment.content.ilike(f"%{term}%"))
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
        .all()
    )


def count_by_review(db: Session, review_id: int) -> int:
    return comments.count(db, {"review_id": review_id, "is_public": True})


def has_top_level_comment(db: Session, review_id: int, user_id: int) -> bool:
    return (
        db.query(Comment.id)
        .filter(Comment.review_id == review_id, Comment.user_id == user_id, Comment.parent_id.is_(None))
        .first()
        is not None
    )


def get_user_comment_stats(db: Session, user_id: int) -> Dict[str, Any]:
    row = (
        db.query(
            func.count(Comment.id).label("total"),
            func.sum(case((Comment.parent_id.is_(None), 1), else_=0)).label("top_level"),
            func.sum(case((Comment.parent_id.isnot(None), 1), else_=0)).label("replies"),
        )
        .filter(Comment.user_id == user_id, _public())
        .one()
    )
    return {
        "total_comments": row.total or 0,
        "top_level_comments": int(row.top_level or 0),
        "reply_comments": int(row.replies or 0),
    }


def create_comment(db: Session, data: Dict[str, Any]) -> Comment:
    return comments.create(db, data)
