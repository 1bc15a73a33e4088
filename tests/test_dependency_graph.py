import random

import pytest

from geoconstruct.dependency_graph import DependencyGraph, link_definition, unlink_definition
from geoconstruct.errors import DependencyCycleError
from geoconstruct.geometry import Vector2
from geoconstruct.symbolic import CenterRadius, Free, MidPoint, Segment


def _assert_topological(graph: DependencyGraph, order):
    position = {entity: idx for idx, entity in enumerate(order)}
    for dependency, dependent in graph.edges():
        if dependency in position and dependent in position:
            assert position[dependency] < position[dependent], (dependency, dependent, order)


def test_add_is_idempotent():
    graph = DependencyGraph()
    graph.add("A", "M")
    graph.add("A", "M")
    assert graph.dependents("A") == {"M"}
    assert list(graph.edges()) == [("A", "M")]


def test_remove_only_drops_own_dependents():
    graph = DependencyGraph()
    graph.add("A", "B")
    graph.add("B", "C")
    graph.remove("B")
    assert "B" not in graph
    assert graph.dependents("A") == {"B"}

    graph.remove_dependent("A", "B")
    assert graph.dependents("A") == set()
    # removing a missing edge is a no-op
    graph.remove_dependent("A", "B")


def test_recompute_order_handles_uneven_path_lengths():
    # A -> B -> C -> D and A -> D: a plain level order would place D before C
    graph = DependencyGraph()
    graph.add("A", "B")
    graph.add("B", "C")
    graph.add("C", "D")
    graph.add("A", "D")

    order = graph.recompute_order({"A"})
    assert order == ["A", "B", "C", "D"]


def test_recompute_order_visits_each_entity_once():
    graph = DependencyGraph()
    for dependent in ("M", "N"):
        graph.add("A", dependent)
        graph.add("B", dependent)
    graph.add("M", "X")
    graph.add("N", "X")

    order = graph.recompute_order(["A", "B", "A"])
    assert sorted(order) == ["A", "B", "M", "N", "X"]
    assert len(order) == len(set(order))
    _assert_topological(graph, order)


def test_recompute_order_only_includes_downstream_entities():
    graph = DependencyGraph()
    graph.add("A", "M")
    graph.add("B", "M")
    graph.add("C", "L")
    assert graph.recompute_order(["M"]) == ["M"]
    assert graph.recompute_order(["C"]) == ["C", "L"]
    assert graph.recompute_order([]) == []


def test_cycle_is_detected_instead_of_looping():
    graph = DependencyGraph()
    graph.add("A", "B")
    graph.add("B", "C")
    graph.add("C", "A")
    with pytest.raises(DependencyCycleError):
        graph.recompute_order(["A"])

    with pytest.raises(DependencyCycleError):
        graph.add("A", "A")


def test_random_acyclic_graphs_produce_topological_orders():
    rng = random.Random(1234)
    for _ in range(20):
        graph = DependencyGraph()
        entities = list(range(30))
        for dependent in entities[1:]:
            # only reference entities created earlier
            for dependency in rng.sample(entities[:dependent], k=min(2, dependent)):
                graph.add(dependency, dependent)
        for _ in range(5):
            victim = rng.choice(entities)
            graph.remove(victim)
        seed = rng.sample(entities, k=3)
        order = graph.recompute_order(seed)
        assert len(order) == len(set(order))
        assert set(seed) <= set(order)
        _assert_topological(graph, order)


def test_link_and_unlink_mirror_definition_references():
    graph = DependencyGraph()
    link_definition(graph, "A", Free(Vector2(0, 0)))
    link_definition(graph, "M", MidPoint("A", "B"))
    link_definition(graph, "S", Segment("A", "B"))
    link_definition(graph, "C", CenterRadius("M", "A"))

    assert graph.dependents("A") == {"M", "S", "C"}
    assert graph.dependents("B") == {"M", "S"}
    assert graph.dependents("M") == {"C"}

    unlink_definition(graph, "M", MidPoint("A", "B"))
    assert graph.dependents("A") == {"S", "C"}
    assert graph.dependents("B") == {"S"}
    assert "M" not in graph
