"""Build metadata for kubesh."""

from __future__ import annotations

from dataclasses import dataclass

from kubesh import __version__, _build


@dataclass(frozen=True)
class BuildInfo:
    """Version, commit and build date of this kubesh build."""

    version: str
    commit: str
    build_date: str

    @classmethod
    def current(cls) -> BuildInfo:
        """Build info stamped into the installed package."""
        return cls(
            version=__version__,
            commit=_build.COMMIT,
            build_date=_build.BUILD_DATE,
        )

    def lines(self) -> list[str]:
        """Human readable lines for --build-info."""
        return [
            f"Version: {self.version}",
            f"Commit: {self.commit}",
            f"Build Date: {self.build_date}",
        ]
