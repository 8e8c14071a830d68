import sys
import logging

from sqlalchemy.dialects import mysql
from sqlalchemy.schema import CreateIndex, CreateTable

# Thiết lập logging cơ bản
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

MODEL_MODULES = [
    'turiapp.user.models',
    'turiapp.person.models',
    'turiapp.category.models',
    'turiapp.place.models',
    'turiapp.review.models',
    'turiapp.comment.models',
    'turiapp.favorite.models',
]


def get_all_metadata():
    """Import tất cả models và trả về Base.metadata."""
    import importlib

    from turiapp.core.database import Base

    for module_path in MODEL_MODULES:
        importlib.import_module(module_path)
        logger.info(f"Đã import models từ: {module_path}")
    return Base.metadata


def generate_sql_schema(db_name: str, output_file: str = "database_schema.sql") -> None:
    """Ghi DDL MySQL của toàn bộ schema ra file, không cần kết nối database."""
    metadata = get_all_metadata()
    if not metadata.tables:
        logger.error("Không tìm thấy bảng nào trong metadata.")
        sys.exit(1)

    dialect = mysql.dialect()
    statements = [
        f"CREATE DATABASE IF NOT EXISTS `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;",
        f"USE `{db_name}`;",
        "",
    ]

    # sorted_tables đã sắp xếp theo thứ tự phụ thuộc khóa ngoại
    for table in metadata.sorted_tables:
        logger.info(f"Đang tạo DDL cho bảng: {table.name}")
        statements.append(f"{str(CreateTable(table).compile(dialect=dialect)).strip()};\n")
        for index in sorted(table.indexes, key=lambda ix: ix.name):
            statements.append(f"{str(CreateIndex(index).compile(dialect=dialect)).strip()};")
        statements.append("")

    with open(output_file, "w", encoding="utf-8") as f:
        f.write("\n".join(statements))
    logger.info(f"Đã tạo file schema SQL: {output_file} ({len(metadata.tables)} bảng)")


if __name__ == "__main__":
    from turiapp.core.config import DB_NAME

    output = sys.argv[1] if len(sys.argv) > 1 else "database_schema.sql"
    generate_sql_schema(DB_NAME, output)
