"""
Exceptions that are used throughout
"""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path
from typing import Any


class MissingOptionalDependencyError(ImportError):
    """
    Raised when an optional dependency is missing

    For example, plotting dependencies like seaborn
    """

    def __init__(self, callable_name: str, requirement: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        callable_name
            The name of the callable that requires the dependency

        requirement
            The name of the requirement
        """
        error_msg = f"`{callable_name}` requires {requirement} to be installed"
        super().__init__(error_msg)


class SourceFormatError(ValueError):
    """
    Raised when a source spreadsheet does not have the shape we expect

    This covers missing files and sheets, missing columns,
    malformed week numbers and duplicated records.
    All of these are fatal: we never try to recover partial rows.
    """

    def __init__(
        self,
        problem: str,
        source: str | Path | None = None,
        sheet_name: str | int | None = None,
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        problem
            Description of what is wrong

        source
            The source (normally a path) in which the problem was found

        sheet_name
            The sheet of `source` in which the problem was found
        """
        location = []
        if source is not None:
            location.append(f"{source=!s}")

        if sheet_name is not None:
            location.append(f"{sheet_name=}")

        if location:
            error_msg = f"{problem} ({', '.join(location)})"
        else:
            error_msg = problem

        super().__init__(error_msg)


class MissingColumnsError(SourceFormatError):
    """
    Raised when expected columns are not in the data
    """

    def __init__(
        self,
        missing: Collection[str],
        available: Collection[Any],
        source: str | Path | None = None,
        sheet_name: str | int | None = None,
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        missing
            Columns which we expected but could not find

        available
            Columns which are available

        source
            The source (normally a path) in which the problem was found

        sheet_name
            The sheet of `source` in which the problem was found
        """
        # Sort to make the error message deterministic
        problem = (
            f"Missing expected columns: {sorted(missing)}. "
            f"Available columns: {[str(v) for v in available]}"
        )
        super().__init__(problem, source=source, sheet_name=sheet_name)
