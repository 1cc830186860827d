"""Filter & Selection Engine: unit inventory, predicates and selection cursor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...exceptions import SourceError
from ...models import Scope, Unit, UnitType

if TYPE_CHECKING:
    from .types import UnitSource

logger = logging.getLogger("unitdeck")

FILTER_FIELDS = ("search", "sub_state", "file_state")


def filter_indices(
    units: list[Unit],
    *,
    search: str = "",
    sub_state: str | None = None,
    file_state: str | None = None,
) -> list[int]:
    """Return indices of units passing every active predicate, in original order.

    Predicates are applied in order: text match over name and description
    (case-insensitive), sub-state match, file-state match.
    """
    query = search.lower()
    indices = []
    for idx, unit in enumerate(units):
        if query and not unit.matches_text(query):
            continue
        if sub_state is not None and unit.sub != sub_state:
            continue
        if file_state is not None and unit.file_state != file_state:
            continue
        indices.append(idx)
    return indices


class UnitFilter:
    """Owns the unit list, active filters, filtered view and selection.

    Invariants: `filtered` is strictly increasing and every entry is a valid
    index into `units`; `selected` is None or a valid index into `filtered`.
    """

    def __init__(
        self,
        source: UnitSource,
        *,
        unit_type: UnitType = UnitType.SERVICE,
        scope: Scope = Scope.SYSTEM,
    ) -> None:
        self.source = source
        self.unit_type = unit_type
        self.scope = scope
        self.units: list[Unit] = []
        self.search = ""
        self.sub_state: str | None = None
        self.file_state: str | None = None
        self.filtered: list[int] = []
        self.selected: int | None = None
        self.error: str | None = None

    # -- predicates ---------------------------------------------------------

    def set_filter(self, field: str, value: str | None) -> None:
        """Set one predicate and recompute the filtered view.

        Args:
            field: One of "search", "sub_state", "file_state"
            value: New value; None (or "" for search) disables the predicate
        """
        if field not in FILTER_FIELDS:
            raise ValueError(f"unknown filter field: {field}")
        if field == "search":
            self.search = value or ""
        else:
            setattr(self, field, value)
        self._refilter()

    @property
    def has_active_filter(self) -> bool:
        return bool(self.search) or self.sub_state is not None or self.file_state is not None

    def clear_search(self) -> None:
        self.set_filter("search", "")

    def _refilter(self, previous: Unit | None = None) -> None:
        if previous is None:
            previous = self.selected_unit
        self.filtered = filter_indices(
            self.units,
            search=self.search,
            sub_state=self.sub_state,
            file_state=self.file_state,
        )
        self._reselect(previous)

    def _reselect(self, previous: Unit | None) -> None:
        """Keep the previously selected unit if it still matches, else select 0."""
        if not self.filtered:
            self.selected = None
            return
        if previous is not None:
            for pos, idx in enumerate(self.filtered):
                if self.units[idx].name == previous.name:
                    self.selected = pos
                    return
        self.selected = 0

    # -- inventory ----------------------------------------------------------

    def reload(self) -> bool:
        """Fetch the unit list for the current category and scope.

        A fetch error is stored in `error` and the previous list is kept.
        Returns True on success.
        """
        try:
            units = self.source.list_units(self.unit_type, self.scope)
        except SourceError as e:
            logger.warning("Unit listing failed: %s", e)
            self.error = str(e)
            return False
        self.replace_units(units)
        return True

    def replace_units(self, units: list[Unit]) -> None:
        """Swap in a fresh inventory snapshot, preserving filters."""
        previous = self.selected_unit
        self.units = list(units)
        self.error = None
        self._refilter(previous)

    def set_category(self, unit_type: UnitType) -> bool:
        """Switch category; returns False when it was already active."""
        if unit_type == self.unit_type:
            return False
        self.unit_type = unit_type
        self._reset_for_new_inventory()
        return True

    def set_scope(self, scope: Scope) -> bool:
        """Switch system/user scope; returns False when it was already active."""
        if scope == self.scope:
            return False
        self.scope = scope
        self._reset_for_new_inventory()
        return True

    def _reset_for_new_inventory(self) -> None:
        self.search = ""
        self.sub_state = None
        self.file_state = None
        self.units = []
        self.filtered = []
        self.selected = None
        self.error = None
        self.reload()

    # -- selection ----------------------------------------------------------

    @property
    def selected_unit(self) -> Unit | None:
        if self.selected is None or self.selected >= len(self.filtered):
            return None
        return self.units[self.filtered[self.selected]]

    def filtered_units(self) -> list[Unit]:
        return [self.units[idx] for idx in self.filtered]

    def select(self, position: int) -> None:
        """Select a filtered position directly (e.g. a mouse click)."""
        if 0 <= position < len(self.filtered):
            self.selected = position

    def select_next(self) -> None:
        if not self.filtered:
            return
        if self.selected is None or self.selected >= len(self.filtered) - 1:
            self.selected = 0
        else:
            self.selected += 1

    def select_previous(self) -> None:
        if not self.filtered:
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self.filtered) - 1
        else:
            self.selected -= 1

    def select_first(self) -> None:
        if self.filtered:
            self.selected = 0

    def select_last(self) -> None:
        if self.filtered:
            self.selected = len(self.filtered) - 1

    def page_up(self, page_size: int) -> None:
        if not self.filtered:
            return
        current = self.selected or 0
        self.selected = max(current - max(page_size, 1), 0)

    def page_down(self, page_size: int) -> None:
        if not self.filtered:
            return
        current = self.selected or 0
        self.selected = min(current + max(page_size, 1), len(self.filtered) - 1)
