"""Effective sidebar tree for a user from role and per-user permissions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol
from uuid import UUID


class _Item(Protocol):
    id: UUID
    title: str
    url: Optional[str]
    icon: Optional[str]
    parent_id: Optional[UUID]
    sort_order: int
    is_active: bool


class _Permission(Protocol):
    sidebar_item_id: UUID
    can_view: bool
    can_edit: bool


@dataclass
class SidebarNode:
    id: UUID
    title: str
    url: Optional[str]
    icon: Optional[str]
    sort_order: int
    can_view: bool = True
    can_edit: bool = False
    children: List["SidebarNode"] = field(default_factory=list)


def _merge(perms: Iterable[_Permission]) -> Dict[UUID, tuple[bool, bool]]:
    merged: Dict[UUID, tuple[bool, bool]] = {}
    for p in perms:
        view, edit = merged.get(p.sidebar_item_id, (False, False))
        merged[p.sidebar_item_id] = (view or bool(p.can_view), edit or bool(p.can_edit))
    return merged


def _sort(nodes: List[SidebarNode]) -> List[SidebarNode]:
    nodes.sort(key=lambda n: (n.sort_order, n.title.lower()))
    for node in nodes:
        _sort(node.children)
    return nodes


# PUBLIC_INTERFACE
def build_sidebar_tree(
    items: Iterable[_Item],
    role_permissions: Iterable[_Permission],
    user_permissions: Iterable,
    is_admin: bool = False,
) -> List[SidebarNode]:
    """
    Return the sidebar tree the user may see.

    Admins see every active item with edit rights. Otherwise, if the user has
    any override permission only the user's own rows count, else the union of
    their roles' rows. Ancestors of a visible item are shown read-only so the
    tree stays navigable; an item whose parent is hidden becomes a root.
    """
    active = {item.id: item for item in items if item.is_active}

    if is_admin:
        granted = {item_id: (True, True) for item_id in active}
    else:
        user_rows = list(user_permissions)
        overrides = [p for p in user_rows if getattr(p, "is_override", False)]
        granted = _merge(overrides) if overrides else _merge(role_permissions)
        granted = {k: v for k, v in granted.items() if v[0] and k in active}

        for item_id in list(granted):
            parent_id = active[item_id].parent_id
            while parent_id is not None and parent_id in active:
                if parent_id not in granted:
                    granted[parent_id] = (True, False)
                parent_id = active[parent_id].parent_id

    nodes: Dict[UUID, SidebarNode] = {}
    for item_id, (view, edit) in granted.items():
        item = active[item_id]
        nodes[item_id] = SidebarNode(
            id=item.id,
            title=item.title,
            url=item.url,
            icon=item.icon,
            sort_order=item.sort_order or 0,
            can_view=view,
            can_edit=edit,
        )

    roots: List[SidebarNode] = []
    for item_id, node in nodes.items():
        parent_id = active[item_id].parent_id
        if parent_id is not None and parent_id in nodes:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)
    return _sort(roots)
