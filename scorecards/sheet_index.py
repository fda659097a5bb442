"""Sheet Index — read-only view of a workbook as named 2-D cell grids.

The rest of the engine never touches openpyxl objects: a workbook is
loaded once into a :class:`SheetIndex` (sheet names in workbook order plus
``name -> rows of cell values``) and the workbook is closed immediately.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

import openpyxl

logger = logging.getLogger(__name__)

Row = tuple[Any, ...]
Grid = tuple[Row, ...]

_EMPTY_GRID: Grid = ()


class DocumentUnreadableError(Exception):
    """The workbook could not be opened or parsed."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"{path}: {type(cause).__name__}: {cause}")
        self.path = path
        self.error_type = type(cause).__name__
        self.detail = str(cause)


class SheetIndex:
    """Immutable sheet-name -> cell-grid mapping.

    Args:
        sheet_names: Sheet names in workbook order.
        grids: Mapping of sheet name to rows of cell values.  Names with no
            grid get an empty one.
    """

    __slots__ = ("_names", "_grids")

    def __init__(self, sheet_names: Iterable[str],
                 grids: Mapping[str, Sequence[Sequence[Any]]] | None = None):
        names = tuple(sheet_names)
        grids = grids or {}
        frozen = {name: tuple(tuple(row) for row in grids.get(name, ())) for name in names}
        object.__setattr__(self, "_names", names)
        object.__setattr__(self, "_grids", MappingProxyType(frozen))

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("SheetIndex is immutable")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Sequence[Sequence[Any]]]) -> "SheetIndex":
        """Build an index from ``{sheet_name: rows}``, keeping mapping order."""
        return cls(mapping.keys(), mapping)

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return self._names

    def has_sheet(self, name: str) -> bool:
        return name in self._grids

    def grid(self, name: str) -> Grid:
        """Rows of the named sheet; unknown sheets yield an empty grid."""
        return self._grids.get(name, _EMPTY_GRID)

    def find_sheet(self, keywords: Iterable[str],
                   exclude: Iterable[str] = ()) -> str | None:
        """First sheet (workbook order) whose lower-cased name contains any keyword."""
        keywords = tuple(keywords)
        skip = set(exclude)
        for name in self._names:
            if name in skip:
                continue
            lowered = name.lower()
            if any(keyword in lowered for keyword in keywords):
                return name
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SheetIndex):
            return NotImplemented
        return self._names == other._names and dict(self._grids) == dict(other._grids)

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"SheetIndex({list(self._names)!r})"


def load_sheet_index(path: Path | str) -> SheetIndex:
    """Load every worksheet of an ``.xlsx``/``.xlsm`` file into a SheetIndex.

    Cached formula results are read (``data_only=True``) since scorecards
    compute their totals with formulas.

    Raises:
        DocumentUnreadableError: If openpyxl cannot open or read the file.
    """
    path_str = str(path)
    try:
        wb = openpyxl.load_workbook(path_str, read_only=True, data_only=True)
    except Exception as e:
        raise DocumentUnreadableError(path_str, e) from e

    try:
        names = list(wb.sheetnames)
        grids: dict[str, list[Row]] = {}
        for sheet_name in names:
            ws = wb[sheet_name]
            if not hasattr(ws, "iter_rows"):
                # Chartsheets carry no cells
                logger.debug("%s: sheet %r has no cells", path_str, sheet_name)
                continue
            grids[sheet_name] = [tuple(row) for row in ws.iter_rows(values_only=True)]
    except Exception as e:
        raise DocumentUnreadableError(path_str, e) from e
    finally:
        wb.close()

    logger.debug("Loaded %s (%d sheets)", path_str, len(names))
    return SheetIndex(names, grids)
