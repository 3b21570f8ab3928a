"""
Terminal driver for the upload wizard.

Renders the current step with rich and feeds the user's answers back into
the wizard until Exit is chosen. Ctrl+C is never caught here.
"""

from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt

from .screens import render
from .wizard import Option, Step, Wizard


class TerminalApp:
    """
    Interactive loop around a Wizard.

    Example:
        >>> app = TerminalApp(Wizard(settings, activity))
        >>> exit_code = app.run()
    """

    def __init__(self, wizard: Wizard, console: Optional[Console] = None):
        self.wizard = wizard
        self.console = console or Console()
        self._handlers: Dict[Step, Callable[[], None]] = {
            Step.MAIN_MENU: self._main_menu,
            Step.HELP: self._press_enter,
            Step.LOGIN: self._login,
            Step.FILE_INPUT_METHOD: self._file_input_method,
            Step.SELECT_FILES: self._select_files,
            Step.ENTER_FILE_PATH: self._enter_file_path,
            Step.ENTER_TITLE: self._enter_title,
            Step.ENTER_DESCRIPTION: self._enter_description,
            Step.ENTER_TAGS: self._enter_tags,
            Step.SELECT_PRIVACY: self._select_privacy,
            Step.CONFIRM_UPLOAD: self._confirm_upload,
            Step.SUCCESS: self._press_enter,
            Step.ERROR: self._press_enter,
        }

    def run(self) -> int:
        """Run until the user picks Exit; returns the process exit code."""
        while not self.wizard.exit_requested:
            self.show()
            handler = self._handlers.get(self.wizard.step)
            if handler is None:
                # AUTHENTICATING / UPLOADING only exist inside a boundary call
                self._press_enter()
                continue
            handler()
        return 0

    def show(self):
        self.console.print()
        self.console.print(Panel(render(self.wizard.state), expand=False))

    # -- input helpers ----------------------------------------------------

    def choose(self, options: List[Option]) -> Option:
        choice = IntPrompt.ask(
            "Select",
            console=self.console,
            choices=[str(i) for i in range(1, len(options) + 1)],
            show_choices=False,
        )
        return options[choice - 1]

    def ask(self, label: str, default: str = "") -> str:
        return Prompt.ask(
            label, console=self.console, default=default, show_default=False
        )

    def _press_enter(self):
        self.ask("Press Enter to continue")
        if self.wizard.step in (Step.HELP, Step.ERROR, Step.SUCCESS):
            self.wizard.back_to_menu()

    def _live(self, action: Callable[[], None]):
        with Live(render(self.wizard.state), console=self.console, refresh_per_second=8) as live:
            self.wizard.on_change = lambda state: live.update(render(state))
            try:
                action()
            finally:
                self.wizard.on_change = None

    # -- step handlers ----------------------------------------------------

    def _main_menu(self):
        self.wizard.select_main_menu(self.choose(self.wizard.options()))

    def _login(self):
        self.ask("Press Enter to continue")
        self._live(self.wizard.login)

    def _file_input_method(self):
        self.wizard.select_file_input_method(self.choose(self.wizard.options()))

    def _select_files(self):
        options = self.wizard.options()
        if not options:
            self.ask("Press Enter to scan again")
            self.wizard.rescan_files()
            return
        self.wizard.select_file(self.choose(options))

    def _enter_file_path(self):
        self.wizard.submit_file_path(self.ask("Path"))

    def _enter_title(self):
        self.wizard.submit_title(self.ask("Title", self.wizard.state.title))

    def _enter_description(self):
        self.wizard.submit_description(
            self.ask("Description", self.wizard.state.description)
        )

    def _enter_tags(self):
        self.wizard.submit_tags(self.ask("Tags", ", ".join(self.wizard.state.tags)))

    def _select_privacy(self):
        self.wizard.select_privacy(self.choose(self.wizard.options()))

    def _confirm_upload(self):
        self.ask("Press Enter to start")
        self._live(self.wizard.confirm_upload)
