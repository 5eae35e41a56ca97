"""
VS Code workflow actions for Alfred.

Install and uninstall extensions, search the Marketplace, list installed
extensions, browse and prune recently opened projects, and open new editor
windows. Works with Visual Studio Code, Insiders and VSCodium.
"""

__version__ = "1.0.0"
