"""
tests/test_cadastro_api.py
--------------------------
End-to-end tests of the HTTP surface through TestClient: the /api/cadastros
routes, the liveness and create-table routes, and the error envelope.
"""

from unittest import TestCase
from unittest.mock import MagicMock

import psycopg2
from fastapi.testclient import TestClient

from errors import PoolExhausted
from handlers.dependencies import get_pool, get_repository
from main import create_app
from tests.fakes import InMemoryCadastroRepository, mock_pool


def _payload(cpf="123.456.789-00", nome="Maria Silva", **overrides):
    body = {
        "cpf": cpf,
        "nomeCompleto": nome,
        "dataNascimento": "1990-05-10",
        "sexo": "F",
        "telefone": "11999999999",
        "quartoLeito": "204A",
        "queixaPrincipal": "febre",
        "observacoes": None,
    }
    body.update(overrides)
    return body


class CadastroAPITest(TestCase):
    """Tests for /api/cadastros endpoints against an in-memory repository."""

    def setUp(self):
        self.repo = InMemoryCadastroRepository()
        self.app = create_app(db_pool=MagicMock())
        self.app.dependency_overrides[get_repository] = lambda: self.repo
        self.client = TestClient(self.app)

    def _create(self, **kwargs):
        return self.client.post("/api/cadastros", json=_payload(**kwargs))

    def test_status_route(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "online")
        self.assertIn("timestamp", body)

    def test_registration_lifecycle(self):
        response = self._create()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"success": True, "message": "Paciente cadastrado com sucesso!"},
        )

        response = self.client.get("/api/cadastros/123.456.789-00")
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["cpf"], "123.456.789-00")
        self.assertEqual(data["nome_completo"], "Maria Silva")
        self.assertEqual(data["sexo"], "F")
        self.assertEqual(data["telefone"], "11999999999")
        self.assertEqual(data["quarto_leito"], "204A")
        self.assertEqual(data["queixa_principal"], "febre")
        self.assertIsNone(data["observacoes"])
        self.assertIsNotNone(data["created_at"])

        response = self.client.get("/api/cadastros/000.000.000-00")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(), {"success": False, "message": "Paciente não encontrado"}
        )

        self.assertEqual(self.client.get("/api/cadastros/count").json(), {"success": True, "total": 1})

        found = self.client.get("/api/cadastros/search/Maria").json()["data"]
        self.assertEqual([c["cpf"] for c in found], ["123.456.789-00"])

        response = self.client.delete("/api/cadastros/123.456.789-00")
        self.assertEqual(
            response.json(),
            {"success": True, "message": "Paciente deletado com sucesso!"},
        )
        self.assertEqual(self.client.get("/api/cadastros/123.456.789-00").status_code, 404)

    def test_duplicate_cpf_is_rejected_and_state_unchanged(self):
        self._create()
        response = self._create(nome="Outra Pessoa")
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("duplicate key", body["error"])
        self.assertEqual(self.repo.rows["123.456.789-00"].nome_completo, "Maria Silva")
        self.assertEqual(self.repo.count(), 1)

    def test_missing_required_field_surfaces_store_error(self):
        response = self.client.post("/api/cadastros", json={"cpf": "11122233344"})
        self.assertEqual(response.status_code, 500)
        self.assertIn("not-null", response.json()["error"])
        self.assertEqual(self.repo.count(), 0)

    def test_empty_body_is_forwarded_to_store(self):
        response = self.client.post("/api/cadastros")
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()["success"])

    def test_non_object_json_body_is_forwarded_to_store(self):
        response = self.client.post("/api/cadastros", json=[1, 2])
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("not-null", body["error"])
        self.assertEqual(self.repo.count(), 0)

    def test_malformed_json_body_is_enveloped(self):
        response = self.client.post(
            "/api/cadastros",
            content=b'{"cpf": "123",',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(body["error"].startswith("Invalid JSON body"))
        self.assertEqual(self.repo.count(), 0)

    def test_create_from_form_body(self):
        form = {k: v for k, v in _payload().items() if v is not None}
        response = self.client.post("/api/cadastros", data=form)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        stored = self.repo.rows["123.456.789-00"]
        self.assertEqual(stored.quarto_leito, "204A")
        self.assertIsNone(stored.observacoes)

    def test_update_from_form_body(self):
        self._create()
        form = {k: v for k, v in _payload(nome="Maria Souza").items() if v is not None}
        response = self.client.put("/api/cadastros/123.456.789-00", data=form)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.repo.rows["123.456.789-00"].nome_completo, "Maria Souza")

    def test_list_empty_is_success(self):
        response = self.client.get("/api/cadastros")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "data": []})

    def test_list_orders_newest_first(self):
        self._create(cpf="1", nome="Ana")
        self._create(cpf="2", nome="Bruno")
        self._create(cpf="3", nome="Carla")
        data = self.client.get("/api/cadastros").json()["data"]
        self.assertEqual([c["cpf"] for c in data], ["3", "2", "1"])

    def test_update_overwrites_fields_and_refreshes_updated_at(self):
        self._create()
        before = self.repo.rows["123.456.789-00"]

        body = _payload(nome="Maria Souza", quartoLeito="305B", observacoes="alergia")
        del body["cpf"]
        response = self.client.put("/api/cadastros/123.456.789-00", json=body)
        self.assertEqual(
            response.json(),
            {"success": True, "message": "Paciente atualizado com sucesso!"},
        )

        data = self.client.get("/api/cadastros/123.456.789-00").json()["data"]
        self.assertEqual(data["nome_completo"], "Maria Souza")
        self.assertEqual(data["quarto_leito"], "305B")
        self.assertEqual(data["observacoes"], "alergia")

        after = self.repo.rows["123.456.789-00"]
        self.assertEqual(after.created_at, before.created_at)
        self.assertGreater(after.updated_at, before.updated_at)

    def test_update_path_cpf_wins_over_body(self):
        self._create()
        body = _payload(cpf="999.999.999-99", nome="Maria Souza")
        self.client.put("/api/cadastros/123.456.789-00", json=body)
        self.assertNotIn("999.999.999-99", self.repo.rows)
        self.assertEqual(self.repo.rows["123.456.789-00"].nome_completo, "Maria Souza")

    def test_update_unknown_cpf_still_succeeds(self):
        response = self.client.put("/api/cadastros/000.000.000-00", json=_payload())
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertEqual(self.repo.count(), 0)

    def test_delete_unknown_cpf_still_succeeds(self):
        response = self.client.delete("/api/cadastros/000.000.000-00")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

    def test_count_tracks_inserts_and_deletes(self):
        self.assertEqual(self.client.get("/api/cadastros/count").json()["total"], 0)
        for cpf in ("1", "2", "3", "4"):
            self._create(cpf=cpf)
        self.client.delete("/api/cadastros/2")
        self.client.delete("/api/cadastros/4")
        self.assertEqual(self.client.get("/api/cadastros/count").json()["total"], 2)

    def test_search_matches_substring_ordered_by_name(self):
        self._create(cpf="1", nome="Paulo Parente")
        self._create(cpf="2", nome="Ana Pereira")
        self._create(cpf="3", nome="Clara Esparza")
        self._create(cpf="4", nome="Bruno Lima")

        data = self.client.get("/api/cadastros/search/par").json()["data"]
        self.assertEqual([c["nome_completo"] for c in data], ["Clara Esparza"])

        data = self.client.get("/api/cadastros/search/Par").json()["data"]
        self.assertEqual([c["nome_completo"] for c in data], ["Paulo Parente"])

        data = self.client.get("/api/cadastros/search/a").json()["data"]
        self.assertEqual(
            [c["nome_completo"] for c in data],
            ["Ana Pereira", "Bruno Lima", "Clara Esparza", "Paulo Parente"],
        )

    def test_search_without_matches_is_success(self):
        self._create()
        response = self.client.get("/api/cadastros/search/Zzz")
        self.assertEqual(response.json(), {"success": True, "data": []})


class CadastroAPIErrorTest(TestCase):
    """Store failures are rendered as the error envelope, never raised."""

    def setUp(self):
        self.repo = MagicMock()
        self.app = create_app(db_pool=MagicMock())
        self.app.dependency_overrides[get_repository] = lambda: self.repo
        self.client = TestClient(self.app)

    def test_pool_exhausted_returns_500(self):
        self.repo.list_all.side_effect = PoolExhausted("Connection pool exhausted (10 connections in use).")
        response = self.client.get("/api/cadastros")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"success": False, "error": "Connection pool exhausted (10 connections in use)."},
        )

    def test_unreachable_store_returns_500(self):
        self.repo.count.side_effect = psycopg2.OperationalError("could not connect to server")
        response = self.client.get("/api/cadastros/count")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "could not connect to server")

    def test_driver_error_text_is_returned_verbatim(self):
        self.repo.get_by_cpf.side_effect = psycopg2.ProgrammingError('relation "cadastro" does not exist')
        response = self.client.get("/api/cadastros/123")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], 'relation "cadastro" does not exist')

    def test_unexpected_error_is_enveloped(self):
        self.repo.delete.side_effect = ValueError("boom")
        response = self.client.delete("/api/cadastros/123")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "error": "boom"})

    def test_count_route_is_not_shadowed_by_cpf_route(self):
        self.repo.count.return_value = 7
        response = self.client.get("/api/cadastros/count")
        self.assertEqual(response.json(), {"success": True, "total": 7})
        self.repo.get_by_cpf.assert_not_called()

    def test_unknown_route_is_enveloped(self):
        response = self.client.get("/api/unknown")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "error": "Not Found"})

    def test_unsupported_method_is_enveloped(self):
        response = self.client.patch("/api/cadastros/123", json={})
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json(), {"success": False, "error": "Method Not Allowed"})
        self.assertIn("PUT", response.headers["allow"])


class CreateTableAPITest(TestCase):
    """Tests for POST /api/create-table."""

    def setUp(self):
        self.pool = mock_pool()
        self.conn = self.pool.acquire.return_value
        self.cursor = self.conn.cursor.return_value.__enter__.return_value
        self.app = create_app(db_pool=MagicMock())
        self.app.dependency_overrides[get_pool] = lambda: self.pool
        self.client = TestClient(self.app)

    def test_create_table(self):
        response = self.client.post("/api/create-table")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "message": "Tabela criada com sucesso!"})
        sql = self.cursor.execute.call_args[0][0]
        self.assertIn("CREATE TABLE IF NOT EXISTS cadastro", sql)
        self.conn.commit.assert_called_once()
        self.pool.release.assert_called_once_with(self.conn)

    def test_create_table_failure(self):
        self.cursor.execute.side_effect = psycopg2.ProgrammingError("permission denied for schema public")
        response = self.client.post("/api/create-table")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"success": False, "error": "permission denied for schema public"},
        )
        self.conn.rollback.assert_called_once()
        self.pool.release.assert_called_once_with(self.conn)

    def test_missing_pool_is_reported(self):
        app = create_app()
        client = TestClient(app)
        response = client.post("/api/create-table")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Database pool not initialized.")
