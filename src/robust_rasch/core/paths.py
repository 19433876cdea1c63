from pathlib import Path

PACKAGE_NAME = "robust_rasch"


class ProjectRootNotFound(Exception):
    pass


def get_project_root_dir() -> Path:
    """Look for the pyproject.toml that sits next to src/robust_rasch"""
    current = Path(__file__).parent

    # Walk up until we hit the filesystem root
    while True:
        candidate = current / "pyproject.toml"
        if candidate.exists() and (current / "src" / PACKAGE_NAME).is_dir():
            return current

        parent = current.parent
        if parent == current:
            raise ProjectRootNotFound

        current = parent
