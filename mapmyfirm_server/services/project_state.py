"""
Services - Project State

The in-memory project model as an explicit state transition function:
reduce_project(state, action) -> new state, over a closed set of actions.
"""

from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field

from mapmyfirm_server.pipeline.checklist_generator import (
    toggle_optimized,
    update_checklist_item,
    update_practice_area,
)
from mapmyfirm_server.schemas.checklist import ChecklistItem
from mapmyfirm_server.schemas.location import GBPLocation
from mapmyfirm_server.schemas.page import SiteNode
from mapmyfirm_server.schemas.project import (
    LocationStructure,
    ProjectConfig,
    ProjectState,
)
from mapmyfirm_server.utils import validated_update


@dataclass(frozen=True)
class InitProject:
    config: ProjectConfig


@dataclass(frozen=True)
class AddNodes:
    """Replaces the whole page collection (a re-scan)."""
    nodes: List[SiteNode]


@dataclass(frozen=True)
class UpdateNode:
    node_id: str
    updates: Dict[str, Any]


@dataclass(frozen=True)
class AddManualTag:
    node_id: str
    tag: str


@dataclass(frozen=True)
class RemoveManualTag:
    node_id: str
    tag: str


@dataclass(frozen=True)
class SetLocations:
    locations: List[GBPLocation]


@dataclass(frozen=True)
class UpdateLocation:
    location_id: str
    updates: Dict[str, Any]


@dataclass(frozen=True)
class GenerateChecklist:
    """Replaces the checklist wholesale; prior manual edits are lost."""
    items: List[ChecklistItem]


@dataclass(frozen=True)
class UpdateChecklistItem:
    item_id: str
    updates: Dict[str, Any]


@dataclass(frozen=True)
class UpdatePracticeArea:
    item_id: str
    practice_area: str
    page_id: Optional[str] = None
    manual_url: Optional[str] = None
    comment: Optional[str] = None
    optimized: Optional[bool] = None


@dataclass(frozen=True)
class ToggleOptimized:
    item_id: str
    practice_area: str


@dataclass(frozen=True)
class AddChecklistItem:
    item: ChecklistItem


@dataclass(frozen=True)
class ImportProject:
    state: ProjectState


@dataclass(frozen=True)
class ResetProject:
    pass


@dataclass(frozen=True)
class SetTreeExpanded:
    node_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SetSelectedNode:
    node_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateLocationStructure:
    structure: LocationStructure


ProjectAction = Union[
    InitProject,
    AddNodes,
    UpdateNode,
    AddManualTag,
    RemoveManualTag,
    SetLocations,
    UpdateLocation,
    GenerateChecklist,
    UpdateChecklistItem,
    UpdatePracticeArea,
    ToggleOptimized,
    AddChecklistItem,
    ImportProject,
    ResetProject,
    SetTreeExpanded,
    SetSelectedNode,
    UpdateLocationStructure,
]


def initial_state() -> ProjectState:
    return ProjectState()


def _map_nodes(state: ProjectState, node_id: str, fn) -> ProjectState:
    nodes = [fn(node) if node.id == node_id else node for node in state.nodes]
    return state.model_copy(update={"nodes": nodes})


def _map_items(state: ProjectState, item_id: str, fn) -> ProjectState:
    items = [fn(item) if item.id == item_id else item for item in state.checklist_items]
    return state.model_copy(update={"checklist_items": items})


def _add_tag(node: SiteNode, tag: str) -> SiteNode:
    if tag in node.manual_tags:
        return node
    return node.model_copy(update={"manual_tags": node.manual_tags + [tag]})


def _remove_tag(node: SiteNode, tag: str) -> SiteNode:
    tags = [t for t in node.manual_tags if t != tag]
    return node.model_copy(update={"manual_tags": tags})


def reduce_project(state: ProjectState, action: ProjectAction) -> ProjectState:
    """
    Apply one action and return the new state.

    The input state is never modified. Updates to an id that does not
    exist leave the state unchanged.

    Raises:
        TypeError: For anything that is not a ProjectAction
    """
    if isinstance(action, InitProject):
        return initial_state().model_copy(update={"config": action.config})

    if isinstance(action, AddNodes):
        return state.model_copy(update={"nodes": list(action.nodes)})

    if isinstance(action, UpdateNode):
        return _map_nodes(
            state, action.node_id, lambda n: validated_update(n, action.updates)
        )

    if isinstance(action, AddManualTag):
        return _map_nodes(state, action.node_id, lambda n: _add_tag(n, action.tag))

    if isinstance(action, RemoveManualTag):
        return _map_nodes(state, action.node_id, lambda n: _remove_tag(n, action.tag))

    if isinstance(action, SetLocations):
        return state.model_copy(update={"gbp_locations": list(action.locations)})

    if isinstance(action, UpdateLocation):
        locations = [
            validated_update(loc, action.updates) if loc.id == action.location_id else loc
            for loc in state.gbp_locations
        ]
        return state.model_copy(update={"gbp_locations": locations})

    if isinstance(action, GenerateChecklist):
        return state.model_copy(update={"checklist_items": list(action.items)})

    if isinstance(action, UpdateChecklistItem):
        return _map_items(
            state, action.item_id, lambda i: update_checklist_item(i, **action.updates)
        )

    if isinstance(action, UpdatePracticeArea):
        return _map_items(
            state,
            action.item_id,
            lambda i: update_practice_area(
                i,
                action.practice_area,
                page_id=action.page_id,
                manual_url=action.manual_url,
                comment=action.comment,
                optimized=action.optimized,
            ),
        )

    if isinstance(action, ToggleOptimized):
        return _map_items(
            state, action.item_id, lambda i: toggle_optimized(i, action.practice_area)
        )

    if isinstance(action, AddChecklistItem):
        return state.model_copy(
            update={"checklist_items": state.checklist_items + [action.item]}
        )

    if isinstance(action, ImportProject):
        return action.state

    if isinstance(action, ResetProject):
        return initial_state()

    if isinstance(action, SetTreeExpanded):
        return state.model_copy(update={"tree_expanded_ids": list(action.node_ids)})

    if isinstance(action, SetSelectedNode):
        return state.model_copy(update={"selected_node_id": action.node_id})

    if isinstance(action, UpdateLocationStructure):
        config = state.config.model_copy(
            update={"location_structure": action.structure}
        )
        return state.model_copy(update={"config": config})

    raise TypeError(f"Unknown project action: {type(action).__name__}")
