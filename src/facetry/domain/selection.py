"""Filter-selection state and the re-query loop around it."""

from __future__ import annotations

from collections.abc import Mapping, Set
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

from .facets import derive_facets

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Iterator, KeysView

    from .rows import FacetRowInput
    from .types import ExternalizedSelection, FilterGroup

    FilterChangeCallback: TypeAlias = Callable[[ExternalizedSelection], Awaitable[object]]
    ControllerListener: TypeAlias = Callable[[ControllerEvent, SelectionController], None]


log = getLogger(__name__)


class ControllerEvent(StrEnum):
    SELECTION_CHANGED = "selection-changed"
    LOADING_CHANGED = "loading-changed"
    FILTER_GROUPS_REPLACED = "filter-groups-replaced"


class SelectionView(Mapping[str, Set[str]]):
    """Read-only live view of the selected values per property URI."""

    __slots__ = ("_selected",)

    def __init__(self, selected: dict[str, dict[str, None]]) -> None:
        self._selected = selected

    def __getitem__(self, property_uri: str) -> KeysView[str]:
        return self._selected[property_uri].keys()

    def __iter__(self) -> Iterator[str]:
        return iter(self._selected)

    def __len__(self) -> int:
        return len(self._selected)


class SelectionController:
    """Owns the facet groups, the current selection and the loading flag.

    ``toggle`` mutates the selection and, when a filter-change callback was given,
    awaits it with the externalized selection. The loading flag is cleared once the
    callback settles, whatever the outcome. Overlapping toggles are not serialized.
    """

    def __init__(
        self,
        filter_groups: Iterable[FilterGroup] = (),
        *,
        on_filter_change: FilterChangeCallback | None = None,
    ) -> None:
        self.filter_groups: list[FilterGroup] = list(filter_groups)
        self._selected: dict[str, dict[str, None]] = {}
        self._on_filter_change = on_filter_change
        self._is_loading = False
        self._listeners: list[ControllerListener] = []
        self.selection = SelectionView(self._selected)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[FacetRowInput],
        *,
        on_filter_change: FilterChangeCallback | None = None,
    ) -> SelectionController:
        return cls(derive_facets(rows), on_filter_change=on_filter_change)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def is_selected(self, property_uri: str, value: str) -> bool:
        return value in self._selected.get(property_uri, {})

    def externalize_selection(self) -> ExternalizedSelection:
        """Selected values per property, omitting properties with nothing selected."""

        return {
            property_uri: list(values)
            for property_uri, values in self._selected.items()
            if values
        }

    async def toggle(self, property_uri: str, value: str, checked: bool) -> None:
        values = self._selected.setdefault(property_uri, {})
        if checked:
            values[value] = None
        else:
            values.pop(value, None)
        self._apply_checked(self.filter_groups)
        self._notify(ControllerEvent.SELECTION_CHANGED)

        if self._on_filter_change is None:
            return

        failed = False
        try:
            self._set_loading(True)
            await self._on_filter_change(self.externalize_selection())
        except Exception:
            failed = True
            log.exception("Filter change callback failed after toggling %s", property_uri)
            raise
        finally:
            self._is_loading = False
            self._notify(ControllerEvent.LOADING_CHANGED, suppress_errors=failed)

    def replace_filter_groups(self, filter_groups: Iterable[FilterGroup]) -> None:
        """Swap in freshly derived groups, keeping the list object consumers hold.

        ``checked`` on the new items is set from the current selection.
        """

        groups = list(filter_groups)
        self._apply_checked(groups)
        self.filter_groups[:] = groups
        self._notify(ControllerEvent.FILTER_GROUPS_REPLACED)

    def subscribe(self, listener: ControllerListener) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe function."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply_checked(self, filter_groups: Iterable[FilterGroup]) -> None:
        for group in filter_groups:
            selected = self._selected.get(group.property_uri or "", {})
            for item in group.items:
                item.checked = item.value in selected

    def _set_loading(self, is_loading: bool) -> None:
        self._is_loading = is_loading
        self._notify(ControllerEvent.LOADING_CHANGED)

    def _notify(self, event: ControllerEvent, *, suppress_errors: bool = False) -> None:
        # A callback failure already in flight must reach the caller unchanged.
        for listener in tuple(self._listeners):
            if not suppress_errors:
                listener(event, self)
                continue
            try:
                listener(event, self)
            except Exception:
                log.exception("Listener failed handling %s", event)
