"""Rendering of each wizard step as a rich renderable."""

import math
from typing import Callable, Dict, List

from rich.console import Group, RenderableType
from rich.spinner import Spinner
from rich.text import Text

from . import __version__
from .config import YOUTUBE_CATEGORIES
from .models import Privacy
from .wizard import (
    FILE_INPUT_METHOD_OPTIONS,
    MAIN_MENU_OPTIONS,
    PRIVACY_OPTIONS,
    Option,
    Step,
    WizardState,
)
from .youtube.uploader import watch_url

BAR_WIDTH = 20
FILLED_CELL = "█"
EMPTY_CELL = "░"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def progress_percent(fraction: float) -> int:
    return _round_half_up(max(0.0, min(1.0, fraction)) * 100)


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """Fixed-width bar; each cell stands for 100/width percent."""
    percent = max(0.0, min(1.0, fraction)) * 100
    filled = min(width, _round_half_up(percent / (100 / width)))
    return FILLED_CELL * filled + EMPTY_CELL * (width - filled)


def option_lines(options: List[Option]) -> List[Text]:
    return [Text(f"  {i}. {option.label}") for i, option in enumerate(options, 1)]


def _blank() -> Text:
    return Text("")


def render_main_menu(state: WizardState) -> RenderableType:
    lines = [
        Text("YouTube Video Uploader CLI", style="bold underline"),
        Text(f"v{__version__}", style="dim"),
        _blank(),
    ]
    if state.is_authenticated:
        lines.append(Text("Logged in to YouTube", style="green"))
        lines.append(_blank())
    lines.append(Text("Main Menu", style="bold"))
    lines.extend(option_lines(MAIN_MENU_OPTIONS))
    return Group(*lines)


def render_help(state: WizardState) -> RenderableType:
    category = YOUTUBE_CATEGORIES.get(state.category_id, state.category_id)
    return Group(
        Text("Help and Documentation", style="bold underline"),
        _blank(),
        Text("Features:", style="bold"),
        Text(" - Upload videos to YouTube"),
        Text(" - Set privacy level (public, private, unlisted)"),
        Text(" - Add title, description, and tags"),
        Text(f" - Videos are filed under the '{category}' category"),
        Text(" - Track upload progress in real-time"),
        _blank(),
        Text("Requirements:", style="bold"),
        Text(" - credentials.json (from YouTube API setup)"),
        Text(" - Video file in MP4, MOV, AVI, or WMV format"),
        _blank(),
        Text("Getting Started:", style="bold"),
        Text(' 1. Select "Login to YouTube" from main menu'),
        Text(" 2. Authenticate with your Google account"),
        Text(' 3. Select "Upload Video" to begin uploading'),
        Text(" 4. Follow the prompts to add metadata"),
        _blank(),
        Text("Activity is logged to ./logs (see `youtube-uploader logs`).", style="dim"),
    )


def render_login(state: WizardState) -> RenderableType:
    return Group(
        Text("YouTube Authentication", style="bold"),
        _blank(),
        Text("Press Enter to authenticate with your Google account."),
        Text("A browser window will open for you to authorize this app."),
    )


def render_authenticating(state: WizardState) -> RenderableType:
    return Group(
        Spinner("dots", text=Step.AUTHENTICATING.value),
        Text("Opening browser for authentication..."),
    )


def render_file_input_method(state: WizardState) -> RenderableType:
    return Group(
        Text("Choose File Input Method", style="bold"),
        _blank(),
        *option_lines(FILE_INPUT_METHOD_OPTIONS),
    )


def render_select_files(state: WizardState) -> RenderableType:
    lines = [
        Text("Select Video File", style="bold"),
        Text("Choose a video from current directory:", style="dim"),
    ]
    if state.files:
        lines.extend(option_lines(state.files))
    else:
        lines.append(Text("No video files found in current directory.", style="red"))
    return Group(*lines)


def render_enter_file_path(state: WizardState) -> RenderableType:
    return Group(
        Text("Enter File Path", style="bold"),
        Text("Enter the full path to your video file:", style="dim"),
        Text("(Examples: /home/user/video.mp4 or ~/Videos/myfile.mov)"),
    )


def render_enter_title(state: WizardState) -> RenderableType:
    return Group(
        Text(f"File: {state.file_path}", style="dim"),
        Text("Enter video title:"),
    )


def render_enter_description(state: WizardState) -> RenderableType:
    return Text("Enter description:")


def render_enter_tags(state: WizardState) -> RenderableType:
    return Text("Enter tags (comma-separated):")


def render_select_privacy(state: WizardState) -> RenderableType:
    return Group(Text("Privacy setting:"), *option_lines(PRIVACY_OPTIONS))


def render_confirm_upload(state: WizardState) -> RenderableType:
    category = YOUTUBE_CATEGORIES.get(state.category_id, state.category_id)
    return Group(
        Text(f'Ready to upload "{state.title}"?'),
        Text(f"  File:     {state.file_path}", style="dim"),
        Text(f"  Privacy:  {Privacy(state.privacy).value}", style="dim"),
        Text(f"  Tags:     {', '.join(state.tags) or '-'}", style="dim"),
        Text(f"  Category: {category}", style="dim"),
        Text("Press Enter to start or Ctrl+C to cancel."),
    )


def render_uploading(state: WizardState) -> RenderableType:
    return Group(
        Spinner("dots", text=Step.UPLOADING.value),
        Text(f"{progress_percent(state.progress)}% Complete"),
        Text(progress_bar(state.progress)),
    )


def render_success(state: WizardState) -> RenderableType:
    return Group(
        Text(Step.SUCCESS.value, style="green"),
        Text(f"Video ID: {state.video_id}"),
        Text(f"Watch: {watch_url(state.video_id)}"),
        _blank(),
        Text("Press Enter to return to menu.", style="dim"),
    )


def render_error(state: WizardState) -> RenderableType:
    return Group(
        Text(f"{Step.ERROR.value}: {state.error}", style="red"),
        Text("Press Enter to return to menu or Ctrl+C to exit."),
    )


def render_unknown(state: WizardState) -> RenderableType:
    return Text("Unknown step")


SCREENS: Dict[Step, Callable[[WizardState], RenderableType]] = {
    Step.MAIN_MENU: render_main_menu,
    Step.HELP: render_help,
    Step.LOGIN: render_login,
    Step.AUTHENTICATING: render_authenticating,
    Step.FILE_INPUT_METHOD: render_file_input_method,
    Step.SELECT_FILES: render_select_files,
    Step.ENTER_FILE_PATH: render_enter_file_path,
    Step.ENTER_TITLE: render_enter_title,
    Step.ENTER_DESCRIPTION: render_enter_description,
    Step.ENTER_TAGS: render_enter_tags,
    Step.SELECT_PRIVACY: render_select_privacy,
    Step.CONFIRM_UPLOAD: render_confirm_upload,
    Step.UPLOADING: render_uploading,
    Step.SUCCESS: render_success,
    Step.ERROR: render_error,
}


def render(state: WizardState) -> RenderableType:
    return SCREENS.get(state.step, render_unknown)(state)
