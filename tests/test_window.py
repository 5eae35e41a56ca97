"""
Tests for opening a new editor window.
"""

from conftest import INSIDERS

from vscode_workflow import window
from vscode_workflow.errors import Error, ErrorType, Result
from vscode_workflow.window import new_window_script, open_new_window


class TestNewWindowScript:
    def test_launch_only_when_stopped(self):
        script = new_window_script(INSIDERS, running=False)
        assert script == 'tell application "Visual Studio Code - Insiders" to activate'

    def test_keystroke_when_running(self):
        script = new_window_script(INSIDERS, running=True)
        assert 'keystroke "n" using {command down, shift down}' in script


class TestOpenNewWindow:
    def test_not_installed(self, applications_dir):
        assert open_new_window(applications_dir) == "VS Code not found"

    def test_running_editor_gets_shortcut(self, applications_dir, install_app, monkeypatch):
        install_app(INSIDERS)
        scripts = []

        def fake_osascript(script, **kwargs):
            scripts.append(script)
            return Result.ok("true\n")

        monkeypatch.setattr(window, "run_osascript", fake_osascript)
        assert open_new_window(applications_dir) == ""
        assert scripts[0] == 'application "Visual Studio Code - Insiders" is running'
        assert "System Events" in scripts[1]

    def test_osascript_failure(self, applications_dir, install_app, monkeypatch):
        install_app(INSIDERS)
        monkeypatch.setattr(
            window, "run_osascript",
            lambda script, **kwargs: Result.err(Error(ErrorType.TRANSPORT_ERROR, "denied"))
        )
        assert open_new_window(applications_dir) == "Could not open a new Visual Studio Code - Insiders window"
