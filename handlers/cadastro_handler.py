"""
handlers/cadastro_handler.py
----------------------------
REST routes for patient registrations under /api/cadastros.

The fixed paths (/count, /search/{nome}) are declared before /{cpf} so the
cpf route does not swallow them.
"""

from typing import Any

from fastapi import APIRouter, Depends

from errors import NotFound
from handlers.dependencies import get_repository, read_payload
from handlers.envelope import envelope, store_call
from models.cadastro import Cadastro
from repositories.cadastro_repo import CadastroRepository

router = APIRouter(prefix="/api/cadastros")

NOT_FOUND_MESSAGE = "Paciente não encontrado"


@router.post("")
async def create_cadastro(
    payload: dict[str, Any] = Depends(read_payload),
    repo: CadastroRepository = Depends(get_repository),
):
    cadastro = Cadastro.from_payload(payload)
    await store_call(repo.add, cadastro, action="insert patient")
    return envelope(message="Paciente cadastrado com sucesso!")


@router.get("")
async def list_cadastros(repo: CadastroRepository = Depends(get_repository)):
    cadastros = await store_call(repo.list_all, action="list patients")
    return envelope(data=[c.to_dict() for c in cadastros])


@router.get("/count")
async def count_cadastros(repo: CadastroRepository = Depends(get_repository)):
    total = await store_call(repo.count, action="count patients")
    return envelope(total=total)


@router.get("/search/{nome}")
async def search_cadastros(nome: str, repo: CadastroRepository = Depends(get_repository)):
    """Substring search on the full name, ordered by name."""
    cadastros = await store_call(repo.search_by_name, nome, action="search patients by name")
    return envelope(data=[c.to_dict() for c in cadastros])


@router.get("/{cpf}")
async def get_cadastro(cpf: str, repo: CadastroRepository = Depends(get_repository)):
    cadastro = await store_call(repo.get_by_cpf, cpf, action="fetch patient")
    if cadastro is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return envelope(data=cadastro.to_dict())


@router.put("/{cpf}")
async def update_cadastro(
    cpf: str,
    payload: dict[str, Any] = Depends(read_payload),
    repo: CadastroRepository = Depends(get_repository),
):
    """
    Overwrite all mutable fields of a record.

    Succeeds even when no record has this cpf.
    """
    cadastro = Cadastro.from_payload(payload, cpf=cpf)
    await store_call(repo.update, cadastro, action="update patient")
    return envelope(message="Paciente atualizado com sucesso!")


@router.delete("/{cpf}")
async def delete_cadastro(cpf: str, repo: CadastroRepository = Depends(get_repository)):
    """Delete a record. Succeeds even when no record has this cpf."""
    await store_call(repo.delete, cpf, action="delete patient")
    return envelope(message="Paciente deletado com sucesso!")
