from __future__ import annotations

from stepscene.controller.store import StepGraphStore
from stepscene.model.scene import display_label, project_scene


def test_shapes_follow_display_order(store: StepGraphStore) -> None:
    a = store.add_step()
    b = store.add_step()
    sub = store.add_sub_step(a.id)

    scene = project_scene(store.state)
    assert [s.node_id for s in scene.shapes] == [a.id, sub.id, b.id]
    assert [s.selected for s in scene.shapes] == [False, True, False]
    assert scene.shapes[1].is_sub_step


def test_implicit_links(store: StepGraphStore) -> None:
    a = store.add_step()
    b = store.add_step()
    c = store.add_step()
    s1 = store.add_sub_step(b.id)
    s2 = store.add_sub_step(b.id)

    pairs = [(link.from_id, link.to_id) for link in project_scene(store.state).implicit_links]
    assert pairs == [(a.id, b.id), (b.id, c.id), (b.id, s1.id), (s1.id, s2.id)]


def test_explicit_links_carry_connection(store: StepGraphStore) -> None:
    a = store.add_step()
    b = store.add_step()
    conn = store.add_connection(b.id, a.id, "back")

    [link] = project_scene(store.state).explicit_links
    assert (link.from_id, link.to_id, link.connection_id) == (b.id, a.id, conn.id)
    assert link.description == "back"
    assert link.start == b.position and link.end == a.position


def test_empty_scene(store: StepGraphStore) -> None:
    scene = project_scene(store.state)
    assert scene.shapes == [] and scene.links == []


def test_display_label(store: StepGraphStore) -> None:
    store.add_step()
    b = store.add_step()
    store.add_sub_step(b.id)
    sub = store.add_sub_step(b.id)

    assert display_label(store.state, b.id) == "2. Step 2"
    assert display_label(store.state, sub.id) == "2.2 Substep 2"
    assert display_label(store.state, "missing") == ""
