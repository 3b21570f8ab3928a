"""
Upload wizard state machine.

The wizard walks through a closed set of steps:

    MAIN_MENU -> FILE_INPUT_METHOD -> SELECT_FILES | ENTER_FILE_PATH
      -> ENTER_TITLE -> ENTER_DESCRIPTION -> ENTER_TAGS -> SELECT_PRIVACY
      -> CONFIRM_UPLOAD -> UPLOADING -> SUCCESS | ERROR
    MAIN_MENU -> LOGIN -> AUTHENTICATING -> MAIN_MENU | ERROR
    MAIN_MENU -> HELP -> MAIN_MENU

Every move is checked against TRANSITIONS. The wizard holds no terminal
code: the terminal driver calls the handlers below and renders
``wizard.state`` with ``screens.render``.
"""

import os
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Generic, List, Optional, TypeVar

from .activity_log import ActivityLogger
from .config import Settings
from .errors import UploaderError, ValidationError
from .models import Privacy, VideoMetadata, parse_tags
from .youtube import auth, uploader

VIDEO_FILE_PATTERN = re.compile(r"\.(mp4|mov|avi|wmv)$", re.IGNORECASE)

T = TypeVar("T")


class Step(Enum):
    MAIN_MENU = "Main Menu"
    HELP = "Help"
    LOGIN = "Login"
    AUTHENTICATING = "Authenticating..."
    FILE_INPUT_METHOD = "File Input Method"
    SELECT_FILES = "Select Video File"
    ENTER_FILE_PATH = "Enter File Path"
    ENTER_TITLE = "Enter Title"
    ENTER_DESCRIPTION = "Enter Description"
    ENTER_TAGS = "Enter Tags (comma-separated)"
    SELECT_PRIVACY = "Select Privacy"
    CONFIRM_UPLOAD = "Ready to Upload?"
    UPLOADING = "Uploading..."
    SUCCESS = "Success!"
    ERROR = "Error"


TRANSITIONS: Dict[Step, FrozenSet[Step]] = {
    Step.MAIN_MENU: frozenset({Step.FILE_INPUT_METHOD, Step.LOGIN, Step.HELP}),
    Step.HELP: frozenset({Step.MAIN_MENU}),
    Step.LOGIN: frozenset({Step.AUTHENTICATING}),
    Step.AUTHENTICATING: frozenset({Step.MAIN_MENU, Step.ERROR}),
    Step.FILE_INPUT_METHOD: frozenset({Step.SELECT_FILES, Step.ENTER_FILE_PATH}),
    Step.SELECT_FILES: frozenset({Step.ENTER_TITLE, Step.ERROR}),
    Step.ENTER_FILE_PATH: frozenset({Step.ENTER_TITLE, Step.ERROR}),
    Step.ENTER_TITLE: frozenset({Step.ENTER_DESCRIPTION}),
    Step.ENTER_DESCRIPTION: frozenset({Step.ENTER_TAGS}),
    Step.ENTER_TAGS: frozenset({Step.SELECT_PRIVACY}),
    Step.SELECT_PRIVACY: frozenset({Step.CONFIRM_UPLOAD}),
    Step.CONFIRM_UPLOAD: frozenset({Step.UPLOADING, Step.ERROR}),
    Step.UPLOADING: frozenset({Step.SUCCESS, Step.ERROR}),
    Step.SUCCESS: frozenset({Step.MAIN_MENU}),
    Step.ERROR: frozenset({Step.MAIN_MENU}),
}


class WizardTransitionError(RuntimeError):
    """A handler tried a move that TRANSITIONS does not allow."""

    pass


@dataclass(frozen=True)
class Option(Generic[T]):
    """A selectable menu entry carrying a typed value."""

    label: str
    value: T


class MenuAction(Enum):
    UPLOAD = "upload"
    LOGIN = "login"
    HELP = "help"
    EXIT = "exit"


class FileInputMethod(Enum):
    BROWSE = "browse"
    MANUAL = "manual"


MAIN_MENU_OPTIONS: List[Option[MenuAction]] = [
    Option("Upload Video", MenuAction.UPLOAD),
    Option("Login to YouTube", MenuAction.LOGIN),
    Option("Help", MenuAction.HELP),
    Option("Exit", MenuAction.EXIT),
]

FILE_INPUT_METHOD_OPTIONS: List[Option[FileInputMethod]] = [
    Option("Browse current directory", FileInputMethod.BROWSE),
    Option("Enter custom file path", FileInputMethod.MANUAL),
]

PRIVACY_OPTIONS: List[Option[Privacy]] = [
    Option("Public", Privacy.PUBLIC),
    Option("Private", Privacy.PRIVATE),
    Option("Unlisted", Privacy.UNLISTED),
]


@dataclass
class WizardState:
    """Everything the screens need to render the current step."""

    step: Step = Step.MAIN_MENU
    file_path: Optional[str] = None
    file_input_method: Optional[FileInputMethod] = None
    files: List[Option[str]] = field(default_factory=list)
    title: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    privacy: Privacy = Privacy.PRIVATE
    category_id: str = "22"
    progress: float = 0.0
    video_id: Optional[str] = None
    error: Optional[str] = None
    loading: bool = False
    is_authenticated: bool = False

    def metadata(self) -> VideoMetadata:
        return VideoMetadata(
            title=self.title,
            description=self.description,
            tags=tuple(self.tags),
            privacy=self.privacy,
            category_id=self.category_id,
        )


def list_video_files(directory: str = ".") -> List[Option[str]]:
    """Video files in ``directory`` as options labelled by name, valued by absolute path."""
    with os.scandir(directory) as entries:
        matches = [
            entry
            for entry in entries
            if entry.is_file() and VIDEO_FILE_PATTERN.search(entry.name)
        ]
    return [
        Option(entry.name, os.path.abspath(entry.path))
        for entry in sorted(matches, key=lambda e: e.name)
    ]


def validate_file_path(text: str) -> str:
    """
    Resolve a user-entered path to an existing regular file.

    Returns:
        str: The absolute path with symlinks resolved

    Raises:
        ValidationError: Empty input, missing file, directory or OS error
    """
    if not text or not text.strip():
        raise ValidationError("Please enter a file path")

    path = Path(text.strip()).expanduser()
    try:
        if not path.exists():
            raise ValidationError("File does not exist")
        resolved = path.resolve(strict=True)
        if resolved.is_dir():
            raise ValidationError("Path is a directory, not a file")
        if not resolved.is_file():
            raise ValidationError("Path is not a regular file")
    except OSError as e:
        raise ValidationError(str(e)) from e
    return str(resolved)


class Wizard:
    """
    Upload wizard.

    Args:
        settings: Paths and defaults
        activity: Activity log shared with auth and upload
        authorize: Returns credentials (default: youtube.auth.authorize)
        upload: ``upload(file_path, metadata, credentials, on_progress) -> video_id``
                (default: youtube.uploader.upload_video)
        directory: Directory scanned for video files (default: cwd)
    """

    def __init__(
        self,
        settings: Settings,
        activity: ActivityLogger,
        authorize: Optional[Callable[[], object]] = None,
        upload: Optional[Callable[..., str]] = None,
        directory: str = ".",
    ):
        self.settings = settings
        self.activity = activity
        self.directory = directory
        self._authorize = authorize or self._default_authorize
        self._upload = upload or self._default_upload
        self.state = self._fresh_state()
        self.exit_requested = False
        self.on_change: Optional[Callable[[WizardState], None]] = None

    def _default_authorize(self):
        return auth.authorize(
            self.activity,
            tokens_path=self.settings.tokens_path,
            client_secrets_path=self.settings.client_secrets_path,
            scopes=self.settings.scopes,
        )

    def _default_upload(self, file_path, metadata, credentials, on_progress):
        return uploader.upload_video(
            file_path,
            metadata,
            credentials,
            on_progress,
            activity=self.activity,
            chunk_size=self.settings.upload_chunk_size,
        )

    def _fresh_state(self, is_authenticated: bool = False) -> WizardState:
        return WizardState(
            privacy=self.settings.default_privacy,
            category_id=self.settings.default_category_id,
            is_authenticated=is_authenticated,
        )

    # -- transitions ------------------------------------------------------

    @property
    def step(self) -> Step:
        return self.state.step

    def _go(self, step: Step):
        if step not in TRANSITIONS[self.state.step]:
            raise WizardTransitionError(
                f"Cannot go from {self.state.step.name} to {step.name}"
            )
        self.state.step = step
        if step is Step.SELECT_FILES:
            self._enter_select_files()
        else:
            self._changed()

    def _changed(self):
        if self.on_change:
            self.on_change(self.state)

    def _fail(self, message: str):
        self.state.error = message
        self.state.loading = False
        self._go(Step.ERROR)

    def _require(self, *steps: Step):
        if self.state.step not in steps:
            raise WizardTransitionError(
                f"Handler not valid in step {self.state.step.name}"
            )

    def options(self) -> List[Option]:
        """Selectable options for the current step (empty for text steps)."""
        return {
            Step.MAIN_MENU: MAIN_MENU_OPTIONS,
            Step.FILE_INPUT_METHOD: FILE_INPUT_METHOD_OPTIONS,
            Step.SELECT_FILES: self.state.files,
            Step.SELECT_PRIVACY: PRIVACY_OPTIONS,
        }.get(self.state.step, [])

    # -- main menu --------------------------------------------------------

    def select_main_menu(self, option: Option[MenuAction]):
        self._require(Step.MAIN_MENU)
        if option.value is MenuAction.UPLOAD:
            self.state = self._fresh_state(self.state.is_authenticated)
            self._go(Step.FILE_INPUT_METHOD)
        elif option.value is MenuAction.LOGIN:
            self._go(Step.LOGIN)
        elif option.value is MenuAction.HELP:
            self._go(Step.HELP)
        elif option.value is MenuAction.EXIT:
            self.exit_requested = True

    def back_to_menu(self):
        """Help, Error and Success all return to the main menu on Enter."""
        self._require(Step.HELP, Step.ERROR, Step.SUCCESS)
        step = self.state.step
        if step is not Step.HELP:
            # a new upload always starts from file selection
            self.state = replace(self._fresh_state(self.state.is_authenticated), step=step)
        self._go(Step.MAIN_MENU)

    # -- file selection ---------------------------------------------------

    def select_file_input_method(self, option: Option[FileInputMethod]):
        self._require(Step.FILE_INPUT_METHOD)
        self.state.file_input_method = option.value
        if option.value is FileInputMethod.BROWSE:
            self._go(Step.SELECT_FILES)
        else:
            self._go(Step.ENTER_FILE_PATH)

    def _enter_select_files(self):
        try:
            self.state.files = list_video_files(self.directory)
        except OSError as e:
            self.state.files = []
            self.activity.error(
                "Could not list video files",
                e,
                {"operation": "browse", "directory": os.path.abspath(self.directory)},
            )
            self._fail(str(e))
            return
        self.activity.debug(
            "Scanned directory for video files",
            {"directory": os.path.abspath(self.directory), "count": len(self.state.files)},
        )
        if len(self.state.files) == 1:
            self.state.file_path = self.state.files[0].value
            self._go(Step.ENTER_TITLE)
        else:
            self._changed()

    def rescan_files(self):
        """Scan the directory again (SELECT_FILES with no matches)."""
        self._require(Step.SELECT_FILES)
        self._enter_select_files()

    def select_file(self, option: Option[str]):
        self._require(Step.SELECT_FILES)
        self.state.file_path = option.value
        self._go(Step.ENTER_TITLE)

    def submit_file_path(self, text: str):
        self._require(Step.ENTER_FILE_PATH)
        self.state.file_path = text
        try:
            resolved = validate_file_path(text)
        except ValidationError as e:
            if text and text.strip():
                self.activity.log_file_validation(text.strip(), False, str(e))
            self._fail(str(e))
            return
        self.activity.log_file_validation(resolved, True)
        self.state.file_path = resolved
        self._go(Step.ENTER_TITLE)

    # -- metadata ---------------------------------------------------------

    def submit_title(self, text: str):
        self._require(Step.ENTER_TITLE)
        self.state.title = text
        self._go(Step.ENTER_DESCRIPTION)

    def submit_description(self, text: str):
        self._require(Step.ENTER_DESCRIPTION)
        self.state.description = text
        self._go(Step.ENTER_TAGS)

    def submit_tags(self, text: str):
        self._require(Step.ENTER_TAGS)
        self.state.tags = parse_tags(text)
        self._go(Step.SELECT_PRIVACY)

    def select_privacy(self, option: Option[Privacy]):
        self._require(Step.SELECT_PRIVACY)
        self.state.privacy = option.value
        self._go(Step.CONFIRM_UPLOAD)

    # -- boundary calls ---------------------------------------------------

    def confirm_upload(self):
        """Authorize (cached token when present) and upload the video."""
        self._require(Step.CONFIRM_UPLOAD)
        metadata = self.state.metadata()

        missing = []
        if not self.state.file_path:
            missing.append("file path")
        if metadata.validate():
            missing.append("title")
        if missing:
            self.activity.log_metadata_validation(
                metadata.summary(), False, [f"{name} is required" for name in missing]
            )
            self._fail(f"Missing required fields: {', '.join(missing)}")
            return
        self.activity.log_metadata_validation(metadata.summary(), True)

        file_path = self.state.file_path
        self.state.progress = 0.0
        self.state.error = None
        self.state.loading = True
        self._go(Step.UPLOADING)

        try:
            credentials = self._authorize()
            self.state.is_authenticated = True
            video_id = self._upload(file_path, metadata, credentials, self._on_progress)
        except Exception as e:
            self.activity.log_upload_error(e, file_path, {"operation": "upload"})
            self._fail(_user_message(e))
            return

        self.state.video_id = video_id
        self.state.loading = False
        self._go(Step.SUCCESS)

    def _on_progress(self, fraction: float):
        self.state.progress = max(self.state.progress, min(1.0, fraction))
        self._changed()

    def login(self):
        self._require(Step.LOGIN)
        self.state.error = None
        self.state.loading = True
        self._go(Step.AUTHENTICATING)

        try:
            self._authorize()
        except Exception as e:
            self.activity.error("Login failed", e, {"operation": "login"})
            self._fail(_user_message(e))
            return

        self.state.is_authenticated = True
        self.state.loading = False
        self._go(Step.MAIN_MENU)


def _user_message(error: Exception) -> str:
    if isinstance(error, UploaderError):
        return str(error)
    return f"{type(error).__name__}: {error}"
