"""Session persistence: config, lyrics and transcribed lines as JSON."""

import json
import logging
import os
import tempfile
from pathlib import Path

from svaralekhini.engine import EngineConfig, SessionState
from svaralekhini.types import Language, Line

logger = logging.getLogger(__name__)

SESSION_DIR = Path(os.environ.get("SVARALEKHINI_SESSION_DIR", "~/.local/share/svaralekhini")).expanduser()
FORMAT_VERSION = 1


def _atomic_write(target: Path, data: bytes) -> None:
    """Write data to target atomically via temp file + rename."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except Exception:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def session_path(name: str) -> Path:
    return SESSION_DIR / f"{name}.json"


def session_to_dict(config: EngineConfig, state: SessionState) -> dict:
    return {
        "version": FORMAT_VERSION,
        "config": config.to_dict(),
        "language": state.language.value,
        "lyric_lines": [list(s) for s in state.lyric_lines],
        "lines": [line.to_dict() for line in state.lines],
        "current_line_index": state.current_line_index,
    }


def session_from_dict(data: dict) -> tuple[EngineConfig, SessionState]:
    """Rebuild config and state. Edit history is not persisted."""
    version = data.get("version", FORMAT_VERSION)
    if version > FORMAT_VERSION:
        raise ValueError(f"Unsupported session format version {version}")

    config = EngineConfig.from_dict(data.get("config", {}))
    state = SessionState.from_config(config)
    state.language = Language(data.get("language", Language.ENGLISH))
    state.lyric_lines = [list(s) for s in data.get("lyric_lines", [])]
    state.lines = [Line.from_dict(d) for d in data.get("lines", [])]
    state.current_line_index = data.get("current_line_index", 0)
    return config, state


def save_session(
    config: EngineConfig,
    state: SessionState,
    path: Path | None = None,
    name: str = "session",
) -> Path:
    """Save to ``path``, or to the session directory under ``name``."""
    target = Path(path) if path is not None else session_path(name)
    payload = json.dumps(session_to_dict(config, state), ensure_ascii=False, indent=2)
    _atomic_write(target, payload.encode("utf-8"))
    logger.info(f"Saved session: {target} ({len(state.lines)} lines)")
    return target


def load_session(path: Path | None = None, name: str = "session") -> tuple[EngineConfig, SessionState]:
    """Load a saved session. Raises FileNotFoundError if it does not exist."""
    source = Path(path) if path is not None else session_path(name)
    if not source.exists():
        raise FileNotFoundError(f"Session not found: {source}")
    data = json.loads(source.read_text(encoding="utf-8"))
    config, state = session_from_dict(data)
    logger.info(f"Loaded session: {source} ({len(state.lines)} lines)")
    return config, state
