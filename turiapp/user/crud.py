from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any

from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from ..core.repository import Repository
from .models import User

users = Repository(User)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return users.get(db, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Tên Function: get_user_by_email

    1. Mô tả ngắn gọn:
    Tìm người dùng theo email.

    2. Mô tả công dụng:
    Dùng khi đăng ký để kiểm tra email đã tồn tại hay chưa và khi
    yêu cầu đặt lại mật khẩu. So sánh không phân biệt hoa thường.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - email (str): Địa chỉ email cần tìm

    4. Giá trị trả về:
    - Optional[User]: User nếu tìm thấy, None nếu không
    """
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_user_by_identifier(db: Session, identifier: str) -> Optional[User]:
    """
    Tên Function: get_user_by_identifier

    1. Mô tả ngắn gọn:
    Tìm người dùng theo email hoặc username.

    2. Mô tả công dụng:
    Dùng trong đăng nhập: người dùng có thể nhập email hoặc tên đăng nhập
    vào cùng một ô.

    3. Các tham số đầu vào:
    - db (Session): Phiên làm việc với database
    - identifier (str): Email hoặc username

    4. Giá trị trả về:
    - Optional[User]: User nếu tìm thấy, None nếu không
    """
    return db.query(User).filter(
        or_(func.lower(User.email) == identifier.lower(), User.username == identifier)
    ).first()


def get_users(
    db: Session,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_verified: Optional[bool] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[User]:
    return users.list(
        db,
        filters={"role": role, "is_active": is_active, "is_verified": is_verified},
        order_by=(User.created_at.desc(), User.id.desc()),
        limit=limit,
        offset=offset,
    )


def search_users(db: Session, term: str, limit: int = 20, offset: int = 0) -> List[User]:
    pattern = f"%{term}%"
    return (
        db.query(User)
        .filter(
            User.is_active.is_(True),
            or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            ),
        )
        .order_by(User.username)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_recent_users(db: Session, days: int = 30, limit: int = 20) -> List[User]:
    since = datetime.utcnow() - timedelta(days=days)
    return (
        db.query(User)
        .filter(User.created_at >= since)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(limit)
        .all()
    )


def create_user(db: Session, data: Dict[str, Any]) -> User:
    """``data`` already carries ``password_hash``; hashing is the service's job."""
    return users.create(db, data)


def update_user(db: Session, user: User, data: Dict[str, Any]) -> User:
    return users.update(db, user, data)


def delete_user(db: Session, user: User) -> None:
    users.delete(db, user)


def update_last_login(db: Session, user: User) -> User:
    return users.update(db, user, {"last_login": datetime.utcnow()})
