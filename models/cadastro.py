"""
models/cadastro.py
------------------
Domain model for patient registration records (cadastros).
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Optional, Union

# Request body key -> column name, for every column a client may write.
PAYLOAD_KEYS: dict[str, str] = {
    "nomeCompleto": "nome_completo",
    "dataNascimento": "data_nascimento",
    "sexo": "sexo",
    "telefone": "telefone",
    "quartoLeito": "quarto_leito",
    "queixaPrincipal": "queixa_principal",
    "observacoes": "observacoes",
}

MUTABLE_COLUMNS: tuple[str, ...] = tuple(PAYLOAD_KEYS.values())
COLUMNS: tuple[str, ...] = ("cpf",) + MUTABLE_COLUMNS + ("created_at", "updated_at")


@dataclass
class Cadastro:
    """
    Represents a single patient registration.

    Attributes:
        cpf: Brazilian taxpayer ID, primary key (11 digits, or 14 chars punctuated).
        nome_completo: Full name.
        data_nascimento: Birth date (a raw string when it comes from a request body).
        sexo: 'M' or 'F'.
        telefone: Contact phone.
        quarto_leito: Room / bed identifier.
        queixa_principal: Chief complaint.
        observacoes: Optional free-text notes.
        created_at: Set by the database at insert.
        updated_at: Set at insert, refreshed on every update.
    """
    cpf: Optional[str]
    nome_completo: Optional[str] = None
    data_nascimento: Union[date, str, None] = None
    sexo: Optional[str] = None
    telefone: Optional[str] = None
    quarto_leito: Optional[str] = None
    queixa_principal: Optional[str] = None
    observacoes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any], cpf: Optional[str] = None) -> "Cadastro":
        """
        Build a record from a request body.

        Values are taken as-is; missing keys become None and are left for the
        database constraints to reject.

        Args:
            payload: JSON body using the client's camelCase keys.
            cpf: Key from the URL path; overrides any ``cpf`` in the body.
        """
        values = {column: payload.get(key) for key, column in PAYLOAD_KEYS.items()}
        return cls(cpf=cpf if cpf is not None else payload.get("cpf"), **values)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Cadastro":
        """Convert a database row (dict cursor) to a Cadastro."""
        return cls(**{column: row.get(column) for column in COLUMNS})

    def mutable_values(self) -> tuple:
        """Values of the writable columns, in MUTABLE_COLUMNS order."""
        return tuple(getattr(self, column) for column in MUTABLE_COLUMNS)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        return f"{self.cpf} | {self.nome_completo} | {self.quarto_leito}"
