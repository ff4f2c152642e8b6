"""
db/init_db.py
-------------
Creates the `cadastro` table if it does not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import ConnectionPool
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Patient registration records, keyed by CPF
CREATE TABLE IF NOT EXISTS cadastro (
    cpf                 VARCHAR(14) PRIMARY KEY,
    nome_completo       VARCHAR(255) NOT NULL,
    data_nascimento     DATE NOT NULL,
    sexo                CHAR(1) NOT NULL CHECK (sexo IN ('M', 'F')),
    telefone            VARCHAR(20) NOT NULL,
    quarto_leito        VARCHAR(50) NOT NULL,
    queixa_principal    TEXT NOT NULL,
    observacoes         TEXT,
    created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


def ensure_schema(db_pool: ConnectionPool) -> None:
    """
    Execute the schema SQL to create the cadastro table.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    with db_pool.connection() as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()
            logger.info("Database schema initialized successfully.")
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to initialize schema: {e}")
            raise


if __name__ == "__main__":
    db_pool = ConnectionPool.from_config()
    try:
        ensure_schema(db_pool)
    finally:
        db_pool.close()
    print("Database schema created successfully.")
