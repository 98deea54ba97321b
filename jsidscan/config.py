"""Configuration management for jsidscan.

Loads environment variables and provides centralized config access.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

__version__ = "1.0.0"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ScanOptions:
    """Explicit run configuration handed to the traversal driver and reporter."""
    debug: bool = False
    verbose: bool = False    # only honoured together with debug
    dump_ast: bool = False   # only honoured together with debug
    keep_going: bool = False
    jobs: int = 1

    def __post_init__(self):
        # frozen dataclass: bypass __setattr__ to normalise the debug-only flags
        object.__setattr__(self, "verbose", self.debug and self.verbose)
        object.__setattr__(self, "dump_ast", self.debug and self.dump_ast)
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")

    @property
    def record_paths(self) -> bool:
        """Whether every record carries its structural path (not just Unknowns)."""
        return self.debug


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Path = None):
        """Initialize config by loading .env file.

        Args:
            env_path: Optional explicit .env location. Defaults to the
                project root next to the package directory.
        """
        if env_path is None:
            env_path = Path(__file__).parent.parent / ".env"
        load_dotenv(env_path)

    @staticmethod
    def _flag(name: str) -> bool:
        return os.getenv(name, "").strip().lower() in _TRUTHY

    @property
    def debug(self) -> bool:
        """Echo structural paths with every record (JSIDSCAN_DEBUG)."""
        return self._flag("JSIDSCAN_DEBUG")

    @property
    def verbose(self) -> bool:
        """Report tolerated parse errors (JSIDSCAN_VERBOSE, needs debug)."""
        return self._flag("JSIDSCAN_VERBOSE")

    @property
    def dump_ast(self) -> bool:
        """Dump the whole syntax tree as JSON (JSIDSCAN_DUMP_AST, needs debug)."""
        return self._flag("JSIDSCAN_DUMP_AST")

    @property
    def keep_going(self) -> bool:
        """Skip files with syntax errors instead of aborting (JSIDSCAN_KEEP_GOING)."""
        return self._flag("JSIDSCAN_KEEP_GOING")

    @property
    def jobs(self) -> int:
        """Number of files read and parsed concurrently.

        Raises:
            ValueError: If JSIDSCAN_JOBS is not an integer
        """
        raw = os.getenv("JSIDSCAN_JOBS", "1").strip() or "1"
        try:
            return int(raw)
        except ValueError:
            raise ValueError(
                f"JSIDSCAN_JOBS must be an integer, got {raw!r}"
            ) from None

    def scan_options(self, **overrides) -> ScanOptions:
        """Build ScanOptions from the environment, letting set CLI values win.

        Args:
            **overrides: Field values; None means "not given, use environment"

        Returns:
            ScanOptions instance
        """
        raw = {
            "debug": self.debug,
            "verbose": self.verbose,
            "dump_ast": self.dump_ast,
            "keep_going": self.keep_going,
            "jobs": self.jobs,
        }
        raw.update({key: value for key, value in overrides.items() if value is not None})
        return ScanOptions(**raw)


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
