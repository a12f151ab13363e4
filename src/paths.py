from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectPaths:
    raw_dir: Path
    ratings_path: Path
    artifacts_dir: Path
    user_cf_dir: Path

    @classmethod
    def from_repo_root(
        cls,
        repo_root: Path,
        *,
        raw_dir: Path | str = "data/raw",
        ratings_file: str = "ratings.csv",
        artifacts_dir: Path | str = "artifacts",
    ) -> "ProjectPaths":
        raw_dir_p = resolve_path(repo_root, raw_dir)
        artifacts_dir_p = resolve_path(repo_root, artifacts_dir)
        return cls(
            raw_dir=raw_dir_p,
            ratings_path=raw_dir_p / ratings_file,
            artifacts_dir=artifacts_dir_p,
            user_cf_dir=artifacts_dir_p / "user_cf",
        )


def resolve_path(repo_root: Path, p: Path | str) -> Path:
    """Resolve `p` against `repo_root` unless it is already absolute."""
    p_path = Path(p) if isinstance(p, str) else p
    if not p_path.is_absolute():
        p_path = repo_root / p_path
    return p_path.resolve()


def get_repo_root() -> Path:
    """Return repo root by searching upwards for `config.yaml` or `.git`."""
    start = Path.cwd().resolve()
    if start.is_file():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    # Fallback: search upwards from this file (useful if called from elsewhere).
    start = Path(__file__).resolve().parent
    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    raise FileNotFoundError("Could not locate repo root (expected `config.yaml` or `.git`).")
