from __future__ import annotations

import asyncio

import pytest

from facetry.domain import (
    ControllerEvent,
    ExternalizedSelection,
    FilterGroup,
    SelectionController,
    derive_facets,
)
from tests.helpers.rows import facet_row


def test_toggle_without_callback_only_mutates_selection() -> None:
    controller = SelectionController()
    events: list[ControllerEvent] = []
    controller.subscribe(lambda event, _controller: events.append(event))

    asyncio.run(controller.toggle("p1", "csv", True))
    assert controller.is_loading is False
    assert set(controller.selection["p1"]) == {"csv"}

    asyncio.run(controller.toggle("p1", "csv", False))

    assert controller.is_loading is False
    assert set(controller.selection["p1"]) == set()
    assert controller.externalize_selection() == {}
    assert events == [ControllerEvent.SELECTION_CHANGED, ControllerEvent.SELECTION_CHANGED]


def test_toggle_passes_externalized_selection_to_callback() -> None:
    received: list[ExternalizedSelection] = []
    loading_during_call: list[bool] = []
    controller: SelectionController

    async def on_filter_change(filters: ExternalizedSelection) -> None:
        loading_during_call.append(controller.is_loading)
        received.append(filters)

    controller = SelectionController(on_filter_change=on_filter_change)

    async def scenario() -> None:
        await controller.toggle("format", "csv", True)
        await controller.toggle("format", "json", True)
        await controller.toggle("theme", "health", True)
        await controller.toggle("theme", "health", False)

    asyncio.run(scenario())

    assert received == [
        {"format": ["csv"]},
        {"format": ["csv", "json"]},
        {"format": ["csv", "json"], "theme": ["health"]},
        {"format": ["csv", "json"]},
    ]
    assert all(key_values for filters in received for key_values in filters.values())
    assert loading_during_call == [True, True, True, True]
    assert controller.is_loading is False


def test_toggle_clears_loading_and_reraises_callback_failure() -> None:
    transitions: list[bool] = []

    async def on_filter_change(_filters: ExternalizedSelection) -> None:
        raise ConnectionError("endpoint unavailable")

    controller = SelectionController(on_filter_change=on_filter_change)
    controller.subscribe(
        lambda event, ctrl: transitions.append(ctrl.is_loading)
        if event is ControllerEvent.LOADING_CHANGED
        else None
    )

    with pytest.raises(ConnectionError, match="endpoint unavailable"):
        asyncio.run(controller.toggle("p1", "csv", True))

    assert transitions == [True, False]
    assert controller.is_loading is False
    assert controller.is_selected("p1", "csv")


def test_overlapping_toggles_are_not_serialized() -> None:
    calls: list[ExternalizedSelection] = []

    async def scenario() -> bool:
        gate = asyncio.Event()

        async def on_filter_change(filters: ExternalizedSelection) -> None:
            calls.append(filters)
            if len(calls) == 1:
                await gate.wait()

        controller = SelectionController(on_filter_change=on_filter_change)
        first = asyncio.create_task(controller.toggle("p1", "a", True))
        await asyncio.sleep(0)
        await controller.toggle("p1", "b", True)
        loading_after_second = controller.is_loading
        gate.set()
        await first
        return loading_after_second

    loading_after_second = asyncio.run(scenario())

    assert calls == [{"p1": ["a"]}, {"p1": ["a", "b"]}]
    assert loading_after_second is False


def test_from_rows_derives_groups_and_replace_keeps_list_identity() -> None:
    controller = SelectionController.from_rows(
        [
            facet_row("p1", "csv", "5"),
            {"prop": "p1", "propLabel": "Format", "val": "json", "valLabel": "JSON", "count": "9"},
        ]
    )
    groups = controller.filter_groups
    events: list[ControllerEvent] = []
    unsubscribe = controller.subscribe(lambda event, _controller: events.append(event))

    assert [item.value for item in groups[0].items] == ["json", "csv"]

    replacement = [FilterGroup(id="Theme", title="Theme", name="Theme", property_uri="p2")]
    controller.replace_filter_groups(replacement)
    unsubscribe()
    controller.replace_filter_groups([])

    assert controller.filter_groups is groups
    assert groups == []
    assert events == [ControllerEvent.FILTER_GROUPS_REPLACED]


def test_selection_view_is_live_and_read_only() -> None:
    controller = SelectionController()
    view = controller.selection

    asyncio.run(controller.toggle("p1", "csv", True))

    assert dict(view) == {"p1": {"csv"}}
    assert "p1" in view
    assert len(view) == 1
    with pytest.raises(TypeError):
        view["p2"] = {"x"}  # type: ignore[index]


def test_toggle_marks_matching_filter_items_checked() -> None:
    controller = SelectionController.from_rows(
        [facet_row("p1", "csv", "5"), facet_row("p1", "json", "9")]
    )
    (group,) = controller.filter_groups

    asyncio.run(controller.toggle("p1", "csv", True))
    assert [(item.value, item.checked) for item in group.items] == [
        ("json", False),
        ("csv", True),
    ]

    asyncio.run(controller.toggle("p1", "csv", False))
    assert [item.checked for item in group.items] == [False, False]


def test_replace_filter_groups_applies_current_selection() -> None:
    controller = SelectionController()
    asyncio.run(controller.toggle("p1", "json", True))
    seen_checked: list[list[bool]] = []
    controller.subscribe(
        lambda _event, ctrl: seen_checked.append(
            [item.checked for item in ctrl.filter_groups[0].items]
        )
    )

    controller.replace_filter_groups(
        derive_facets([facet_row("p1", "csv", "5"), facet_row("p1", "json", "9")])
    )

    assert [(item.value, item.checked) for item in controller.filter_groups[0].items] == [
        ("json", True),
        ("csv", False),
    ]
    assert seen_checked == [[True, False]]


def test_callback_failure_survives_failing_loading_listener() -> None:
    async def on_filter_change(_filters: ExternalizedSelection) -> None:
        raise ConnectionError("endpoint unavailable")

    def listener(event: ControllerEvent, ctrl: SelectionController) -> None:
        if event is ControllerEvent.LOADING_CHANGED and not ctrl.is_loading:
            raise RuntimeError("render failed")

    controller = SelectionController(on_filter_change=on_filter_change)
    controller.subscribe(listener)

    with pytest.raises(ConnectionError, match="endpoint unavailable"):
        asyncio.run(controller.toggle("p1", "csv", True))

    assert controller.is_loading is False


def test_failing_listener_propagates_after_successful_callback() -> None:
    async def on_filter_change(_filters: ExternalizedSelection) -> None:
        return None

    def listener(event: ControllerEvent, ctrl: SelectionController) -> None:
        if event is ControllerEvent.LOADING_CHANGED and not ctrl.is_loading:
            raise RuntimeError("render failed")

    controller = SelectionController(on_filter_change=on_filter_change)
    controller.subscribe(listener)

    with pytest.raises(RuntimeError, match="render failed"):
        asyncio.run(controller.toggle("p1", "csv", True))

    assert controller.is_loading is False
