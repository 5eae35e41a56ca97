# =============================================================================
# Editor Variants
# =============================================================================
# One ordered table shared by every action. Order is the resolution priority
# and must not change: Visual Studio Code, Insiders, VSCodium.

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .environment import home_dir

APPLICATIONS_DIR = Path("/Applications")
CLI_RELATIVE_PATH = Path("Contents/Resources/app/bin")
STORE_RELATIVE_PATH = Path("User/globalStorage/state.vscdb")
MARKETPLACE_URL = "https://marketplace.visualstudio.com/items?itemName="


@dataclass(frozen=True)
class Variant:
    name: str           # Application name, also used by AppleScript
    bundle: str         # Bundle directory name under /Applications
    cli: str            # CLI binary inside the bundle
    data_dir: str       # Folder under ~/Library/Application Support
    extensions_home: str  # Dot-directory under HOME holding extensions/
    scheme: str         # URI scheme registered by the application

    def app_path(self, applications_dir: Path | None = None) -> Path:
        return (applications_dir or APPLICATIONS_DIR) / self.bundle

    def cli_path(self, applications_dir: Path | None = None) -> Path:
        return self.app_path(applications_dir) / CLI_RELATIVE_PATH / self.cli

    def store_path(self, home: Path | None = None) -> Path:
        return ((home or home_dir()) / "Library" / "Application Support"
                / self.data_dir / STORE_RELATIVE_PATH)

    def extensions_dir(self, home: Path | None = None) -> Path:
        return (home or home_dir()) / self.extensions_home / "extensions"

    def extension_url(self, extension_id: str) -> str:
        """URI that opens an extension's page inside this editor."""
        return f"{self.scheme}:extension/{extension_id}"


VARIANTS: tuple[Variant, ...] = (
    Variant(
        name="Visual Studio Code",
        bundle="Visual Studio Code.app",
        cli="code",
        data_dir="Code",
        extensions_home=".vscode",
        scheme="vscode",
    ),
    Variant(
        name="Visual Studio Code - Insiders",
        bundle="Visual Studio Code - Insiders.app",
        cli="code-insiders",
        data_dir="Code - Insiders",
        extensions_home=".vscode-insiders",
        scheme="vscode-insiders",
    ),
    Variant(
        name="VSCodium",
        bundle="VSCodium.app",
        cli="codium",
        data_dir="VSCodium",
        extensions_home=".vscode-oss",
        scheme="vscodium",
    ),
)


def resolve_variant(applications_dir: Path | None = None) -> Variant | None:
    """
    Find the installed editor variant by its application bundle.

    Args:
        applications_dir: Root to probe instead of /Applications

    Returns:
        First variant whose bundle exists, or None if none is installed
    """
    for variant in VARIANTS:
        if variant.app_path(applications_dir).exists():
            logger.debug(
                "Resolved editor variant",
                operation="resolve_variant",
                status="success",
                variant=variant.name
            )
            return variant

    logger.debug(
        "No editor application found",
        operation="resolve_variant",
        status="not_found",
        searched=[str(v.app_path(applications_dir)) for v in VARIANTS]
    )
    return None


def resolve_store_variant(home: Path | None = None) -> Variant | None:
    """
    Find the first variant whose persisted state database exists.

    Args:
        home: Home directory to probe instead of $HOME

    Returns:
        First variant with a state.vscdb file, or None
    """
    for variant in VARIANTS:
        if variant.store_path(home).is_file():
            logger.debug(
                "Resolved state database",
                operation="resolve_store_variant",
                status="success",
                variant=variant.name,
                path=str(variant.store_path(home))
            )
            return variant

    logger.debug(
        "No state database found",
        operation="resolve_store_variant",
        status="not_found"
    )
    return None


def present_extension_dirs(home: Path | None = None) -> list[tuple[Variant, Path]]:
    """All variants whose extensions directory exists, in priority order."""
    return [
        (variant, variant.extensions_dir(home))
        for variant in VARIANTS
        if variant.extensions_dir(home).is_dir()
    ]
