"""
Static checks of the typestate API: mypy must accept legal flows and reject
calling an operation the current state does not offer.
"""
import textwrap
from pathlib import Path

import pytest
from mypy import api as mypy_api

REPO_ROOT = Path(__file__).resolve().parents[2]


def _run_mypy(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, source: str) -> tuple[str, int]:
    script = tmp_path / "flow.py"
    script.write_text(textwrap.dedent(source))
    monkeypatch.setenv("MYPYPATH", str(REPO_ROOT))
    stdout, _stderr, status = mypy_api.run(
        [
            str(script),
            "--config-file",
            str(REPO_ROOT / "pyproject.toml"),
            "--cache-dir",
            str(tmp_path / ".mypy_cache"),
            "--follow-imports",
            "silent",
            "--show-error-codes",
        ]
    )
    return stdout, status


class TestLegalFlows:
    def test_full_checkout_flow_type_checks(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        stdout, status = _run_mypy(
            tmp_path,
            monkeypatch,
            """
            from stated.domain.entities.customer import visit_site

            browsing = visit_site()
            shopping = browsing.add_item(20)
            shopping = shopping.add_item(42)
            shopping = shopping.pop_item()
            checkout = shopping.proceed_to_checkout()
            shopping = checkout.cancel_checkout()
            browsing = shopping.clear_cart()
            shopping = browsing.add_item(100)
            shopping.proceed_to_checkout().finalise_payment()
            """,
        )
        assert status == 0, stdout

    def test_leave_from_browsing_type_checks(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        stdout, status = _run_mypy(
            tmp_path,
            monkeypatch,
            """
            from stated.domain.entities.customer import visit_site

            visit_site().leave()
            """,
        )
        assert status == 0, stdout


class TestIllegalFlows:
    @pytest.mark.parametrize(
        "setup,call,class_name",
        [
            ("visit_site().add_item(1).proceed_to_checkout()", "leave()", "CheckoutCustomer"),
            ("visit_site().add_item(1).proceed_to_checkout()", "add_item(2)", "CheckoutCustomer"),
            ("visit_site()", "pop_item()", "BrowsingCustomer"),
            ("visit_site()", "proceed_to_checkout()", "BrowsingCustomer"),
            ("visit_site().add_item(1)", "finalise_payment()", "ShoppingCustomer"),
            ("visit_site().add_item(1)", "leave()", "ShoppingCustomer"),
        ],
    )
    def test_operation_outside_state_is_rejected(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        setup: str,
        call: str,
        class_name: str,
    ) -> None:
        stdout, status = _run_mypy(
            tmp_path,
            monkeypatch,
            f"""
            from stated.domain.entities.customer import visit_site

            customer = {setup}
            customer.{call}
            """,
        )
        assert status == 1
        method = call.split("(")[0]
        assert f'"{class_name}" has no attribute "{method}"' in stdout
        assert "[attr-defined]" in stdout

    def test_terminal_operation_yields_no_handle(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        stdout, status = _run_mypy(
            tmp_path,
            monkeypatch,
            """
            from stated.domain.entities.customer import visit_site

            done = visit_site().add_item(1).proceed_to_checkout().finalise_payment()
            done.add_item(2)
            """,
        )
        assert status == 1
        assert "does not return a value" in stdout

    def test_add_item_requires_an_int(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        stdout, status = _run_mypy(
            tmp_path,
            monkeypatch,
            """
            from stated.domain.entities.customer import visit_site

            visit_site().add_item("twenty")
            """,
        )
        assert status == 1
        assert "[arg-type]" in stdout
