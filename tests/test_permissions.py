from __future__ import annotations

import unittest
from types import SimpleNamespace
from uuid import uuid4

from garment_erp.services.permissions import build_sidebar_tree


def _item(title, parent=None, sort_order=0, active=True):
    return SimpleNamespace(
        id=uuid4(),
        title=title,
        url=f"/{title.lower()}",
        icon=None,
        parent_id=parent.id if parent else None,
        sort_order=sort_order,
        is_active=active,
    )


def _perm(item, view=True, edit=False, override=False):
    return SimpleNamespace(sidebar_item_id=item.id, can_view=view, can_edit=edit, is_override=override)


class SidebarTreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.orders = _item("Orders", sort_order=2)
        self.dashboard = _item("Dashboard", sort_order=1)
        self.custom = _item("Custom", parent=self.orders, sort_order=1)
        self.archive = _item("Archive", parent=self.orders, sort_order=2, active=False)
        self.items = [self.orders, self.dashboard, self.custom, self.archive]

    def test_admin_sees_every_active_item(self) -> None:
        tree = build_sidebar_tree(self.items, [], [], is_admin=True)
        self.assertEqual([n.title for n in tree], ["Dashboard", "Orders"])
        self.assertEqual([c.title for c in tree[1].children], ["Custom"])
        self.assertTrue(all(n.can_edit for n in tree))

    def test_ancestors_of_granted_items_are_read_only(self) -> None:
        tree = build_sidebar_tree(self.items, [_perm(self.custom, edit=True)], [])
        self.assertEqual([n.title for n in tree], ["Orders"])
        self.assertFalse(tree[0].can_edit)
        self.assertTrue(tree[0].children[0].can_edit)

    def test_user_overrides_replace_role_permissions(self) -> None:
        roles = [_perm(self.custom), _perm(self.dashboard)]
        overrides = [_perm(self.dashboard, override=True)]
        tree = build_sidebar_tree(self.items, roles, overrides)
        self.assertEqual([n.title for n in tree], ["Dashboard"])

    def test_roles_merge_and_hidden_rows_are_dropped(self) -> None:
        roles = [_perm(self.dashboard, view=False), _perm(self.dashboard, edit=True, view=False), _perm(self.archive)]
        self.assertEqual(build_sidebar_tree(self.items, roles, []), [])

    def test_item_with_inactive_parent_becomes_root(self) -> None:
        hidden = _item("Hidden", active=False)
        orphan = _item("Orphan", parent=hidden)
        tree = build_sidebar_tree(self.items + [hidden, orphan], [_perm(orphan)], [])
        self.assertEqual([n.title for n in tree], ["Orphan"])
