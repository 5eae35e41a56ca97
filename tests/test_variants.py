"""
Tests for editor variant resolution.
"""

from pathlib import Path

from conftest import ALTERNATE, INSIDERS, PRIMARY

from vscode_workflow.variants import (
    VARIANTS,
    present_extension_dirs,
    resolve_store_variant,
    resolve_variant,
)


class TestVariantTable:
    def test_priority_order_is_fixed(self):
        assert [v.name for v in VARIANTS] == [
            "Visual Studio Code",
            "Visual Studio Code - Insiders",
            "VSCodium",
        ]

    def test_cli_path_inside_bundle(self, applications_dir: Path):
        assert PRIMARY.cli_path(applications_dir) == (
            applications_dir / "Visual Studio Code.app/Contents/Resources/app/bin/code"
        )

    def test_store_path(self, home: Path):
        assert INSIDERS.store_path(home) == (
            home / "Library/Application Support/Code - Insiders/User/globalStorage/state.vscdb"
        )

    def test_extension_url_uses_scheme(self):
        assert ALTERNATE.extension_url("a.b") == "vscodium:extension/a.b"


class TestResolveVariant:
    def test_none_installed(self, applications_dir: Path):
        assert resolve_variant(applications_dir) is None

    def test_primary_wins_over_alternate(self, install_app, applications_dir: Path):
        install_app(ALTERNATE)
        install_app(PRIMARY)
        assert resolve_variant(applications_dir) is PRIMARY

    def test_falls_through_to_later_variant(self, install_app, applications_dir: Path):
        install_app(ALTERNATE)
        assert resolve_variant(applications_dir) is ALTERNATE

    def test_repeated_calls_are_stable(self, install_app, applications_dir: Path):
        install_app(INSIDERS)
        install_app(ALTERNATE)
        assert {resolve_variant(applications_dir) for _ in range(3)} == {INSIDERS}


class TestResolveStoreVariant:
    def test_none_found(self, home: Path):
        assert resolve_store_variant(home) is None

    def test_first_existing_store_wins(self, make_store, home: Path):
        make_store(ALTERNATE)
        make_store(INSIDERS)
        assert resolve_store_variant(home) is INSIDERS

    def test_uses_home_env_by_default(self, make_store):
        make_store(PRIMARY)
        assert resolve_store_variant() is PRIMARY


class TestPresentExtensionDirs:
    def test_lists_all_present_in_order(self, home: Path):
        ALTERNATE.extensions_dir(home).mkdir(parents=True)
        PRIMARY.extensions_dir(home).mkdir(parents=True)
        found = present_extension_dirs(home)
        assert [v for v, _ in found] == [PRIMARY, ALTERNATE]
        assert found[0][1] == home / ".vscode" / "extensions"
