# Import các module cơ bản
from .database import get_db, Base, engine, SessionLocal, transaction
from .security import hash_password, verify_password

# Export các thành phần cần thiết từ modules core
__all__ = [
    'Base', 'engine', 'get_db', 'SessionLocal', 'transaction',
    'verify_password', 'hash_password',
]

# Không import từ auth.py để tránh circular import
# Các module khác nên import trực tiếp từ core.auth
