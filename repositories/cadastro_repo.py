"""
repositories/cadastro_repo.py
-----------------------------
Data access layer for patient registrations.
All SQL queries related to the `cadastro` table live here.
Every method runs exactly one parameterized statement.
"""

from typing import Optional

from psycopg2 import extras

from db.connection import ConnectionPool
from models.cadastro import COLUMNS, Cadastro
from utils.logger import get_logger

logger = get_logger(__name__)

_SELECT_COLUMNS = ", ".join(COLUMNS)


class CadastroRepository:
    """Repository for CRUD operations on the cadastro table."""

    def __init__(self, db_pool: ConnectionPool):
        self.pool = db_pool

    # ── CREATE ────────────────────────────────────────────

    def add(self, cadastro: Cadastro) -> None:
        """
        Insert a new patient record.

        Args:
            cadastro: The Cadastro to persist. Timestamps are set by the database.

        Raises:
            psycopg2.IntegrityError: If the cpf already exists or a required
                column is missing.
        """
        sql = """
            INSERT INTO cadastro (cpf, nome_completo, data_nascimento, sexo, telefone,
                                  quarto_leito, queixa_principal, observacoes)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s);
        """
        with self.pool.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, (cadastro.cpf,) + cadastro.mutable_values())
                conn.commit()
                logger.info(f"Added cadastro {cadastro.cpf}")
            except Exception as e:
                conn.rollback()
                logger.error(f"Failed to add cadastro {cadastro.cpf}: {e}")
                raise

    # ── READ ──────────────────────────────────────────────

    def list_all(self) -> list[Cadastro]:
        """
        Fetch every record.

        Returns:
            List of Cadastro objects, newest first.
        """
        sql = f"SELECT {_SELECT_COLUMNS} FROM cadastro ORDER BY created_at DESC;"
        with self.pool.connection() as conn:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(sql)
                return [Cadastro.from_row(r) for r in cur.fetchall()]

    def get_by_cpf(self, cpf: str) -> Optional[Cadastro]:
        """
        Fetch a single record by cpf.

        Returns:
            A Cadastro object or None if not found.
        """
        sql = f"SELECT {_SELECT_COLUMNS} FROM cadastro WHERE cpf = %s;"
        with self.pool.connection() as conn:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(sql, (cpf,))
                row = cur.fetchone()
                return Cadastro.from_row(row) if row else None

    def count(self) -> int:
        """Total number of records."""
        sql = "SELECT COUNT(*) FROM cadastro;"
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return int(cur.fetchone()[0])

    def search_by_name(self, fragment: str) -> list[Cadastro]:
        """
        Fetch records whose name contains ``fragment`` anywhere.

        Matching follows the database's LIKE operator (case-sensitive in
        PostgreSQL); ``%`` and ``_`` inside the fragment act as wildcards.

        Returns:
            List of Cadastro objects ordered by name ascending.
        """
        sql = f"""
            SELECT {_SELECT_COLUMNS} FROM cadastro
            WHERE nome_completo LIKE %s
            ORDER BY nome_completo ASC;
        """
        with self.pool.connection() as conn:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(sql, (f"%{fragment}%",))
                return [Cadastro.from_row(r) for r in cur.fetchall()]

    # ── UPDATE ────────────────────────────────────────────

    def update(self, cadastro: Cadastro) -> bool:
        """
        Overwrite every mutable column of an existing record.

        Args:
            cadastro: Cadastro with the new values (cpf selects the row).

        Returns:
            True if a row was updated, False otherwise.
        """
        sql = """
            UPDATE cadastro
            SET nome_completo = %s, data_nascimento = %s, sexo = %s, telefone = %s,
                quarto_leito = %s, queixa_principal = %s, observacoes = %s,
                updated_at = NOW()
            WHERE cpf = %s;
        """
        with self.pool.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, cadastro.mutable_values() + (cadastro.cpf,))
                    updated = cur.rowcount > 0
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Failed to update cadastro {cadastro.cpf}: {e}")
                raise
        if updated:
            logger.info(f"Updated cadastro {cadastro.cpf}")
        else:
            logger.warning(f"Update matched no cadastro for cpf {cadastro.cpf}")
        return updated

    # ── DELETE ────────────────────────────────────────────

    def delete(self, cpf: str) -> bool:
        """
        Delete a record by cpf.

        Returns:
            True if a row was deleted, False otherwise.
        """
        sql = "DELETE FROM cadastro WHERE cpf = %s;"
        with self.pool.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, (cpf,))
                    deleted = cur.rowcount > 0
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Failed to delete cadastro {cpf}: {e}")
                raise
        if deleted:
            logger.info(f"Deleted cadastro {cpf}")
        else:
            logger.warning(f"Delete matched no cadastro for cpf {cpf}")
        return deleted
