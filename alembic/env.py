from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Import các model để lấy metadata, config đã tự nạp .env
from turiapp.core.config import DATABASE_URL
from turiapp.core.database import Base
from turiapp.user.models import User
from turiapp.person.models import Person
from turiapp.category.models import Category, place_categories
from turiapp.place.models import Place
from turiapp.review.models import Review, ReviewHelpful
from turiapp.comment.models import Comment
from turiapp.favorite.models import Favorite

config = context.config

# URL lấy từ turiapp.core.config, không đọc từ alembic.ini
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL without a connection."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # Các tùy chọn bổ sung cho việc so sánh schema
            compare_type=True,
            compare_server_default=True,
            render_as_batch=True,  # Hỗ trợ SQLite
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
