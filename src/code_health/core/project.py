"""Project discovery: module path detection and package loading."""

import fnmatch
import os
from pathlib import Path, PurePosixPath

from loguru import logger

from ..config.defaults import DEFAULT_EXCLUDE_DIRS, GO_MOD_FILE
from ..parsers.go import GoFactExtractor
from .exceptions import ParsingError, TargetNotFoundError, TargetNotReadableError
from .facts import PackageFacts, ProjectFacts


def determine_module_path(root: Path) -> str:
    """Read the module path from ``go.mod``.

    Falls back to the root directory name when there is no ``go.mod`` or it
    has no ``module`` directive.

    Args:
        root: Project root directory

    Returns:
        Module path, e.g. "github.com/acme/shop"
    """
    go_mod = root / GO_MOD_FILE
    try:
        with open(go_mod, encoding="utf-8", errors="replace") as f:
            for line in f:
                parts = line.split("//", 1)[0].split()
                if len(parts) >= 2 and parts[0] == "module":
                    return parts[1].strip('"`')
    except FileNotFoundError:
        logger.debug(f"No {GO_MOD_FILE} in {root}, using directory name")
    except OSError as e:
        logger.warning(f"Failed to read {go_mod}: {e}")

    return root.resolve().name


class ProjectLoader:
    """Walk a project tree and extract the facts of every package."""

    def __init__(
        self,
        root: Path,
        exclude_dirs: list[str] | None = None,
        extractor: GoFactExtractor | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            root: Project root directory
            exclude_dirs: Extra directory names, relative paths or globs to skip
            extractor: Fact extractor (a default Go extractor if None)
        """
        self.root = Path(root)
        self.exclude_patterns = list(DEFAULT_EXCLUDE_DIRS) + list(exclude_dirs or [])
        self.extractor = extractor or GoFactExtractor()

    def _validate_root(self) -> None:
        if not self.root.exists():
            raise TargetNotFoundError(
                f"Target directory does not exist: {self.root}",
                context={"path": str(self.root)},
            )
        if not self.root.is_dir() or not os.access(self.root, os.R_OK | os.X_OK):
            raise TargetNotReadableError(
                f"Target is not a readable directory: {self.root}",
                context={"path": str(self.root)},
            )

    def should_exclude(self, rel_path: str) -> bool:
        """Check if a directory is excluded.

        Hidden directories are always excluded. Patterns match the base name
        or the slash-normalized relative path, literally or as globs.

        Args:
            rel_path: Project-relative directory path

        Returns:
            True if the directory and everything below it is skipped
        """
        name = PurePosixPath(rel_path).name
        if name.startswith("."):
            return True

        for pattern in self.exclude_patterns:
            pattern = pattern.strip().strip("/")
            if not pattern:
                continue
            if name == pattern or rel_path == pattern:
                return True
            if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(rel_path, pattern):
                return True
        return False

    def iter_package_dirs(self):
        """Yield (directory, relative path) pairs in sorted walk order."""
        for current, dirs, _files in os.walk(self.root):
            current_path = Path(current)
            rel = current_path.relative_to(self.root).as_posix()
            rel = "" if rel == "." else rel

            # Prune excluded directories in place so os.walk skips them
            dirs[:] = sorted(
                d
                for d in dirs
                if not self.should_exclude(f"{rel}/{d}" if rel else d)
            )
            yield current_path, rel

    def load(self) -> ProjectFacts:
        """Load the fact model of the whole project.

        Returns:
            ProjectFacts with one entry per directory holding Go sources

        Raises:
            TargetNotFoundError: If the root does not exist
            TargetNotReadableError: If the root is not a readable directory
        """
        self._validate_root()
        module_path = determine_module_path(self.root)
        logger.info(f"Analyzing module {module_path} at {self.root}")

        packages: list[PackageFacts] = []
        skipped: list[str] = []

        for directory, rel_path in self.iter_package_dirs():
            try:
                package = self.extractor.extract_package(directory, rel_path)
            except ParsingError as e:
                logger.warning(f"Skipping {rel_path or '.'}: {e}")
                skipped.append(rel_path or ".")
                continue
            except OSError as e:
                logger.warning(f"Skipping unreadable directory {rel_path or '.'}: {e}")
                skipped.append(rel_path or ".")
                continue

            if package is not None:
                packages.append(package)

        logger.debug(f"Loaded {len(packages)} package(s), skipped {len(skipped)}")

        return ProjectFacts(
            module_path=module_path,
            packages=tuple(packages),
            skipped_directories=tuple(skipped),
        )
