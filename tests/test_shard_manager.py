import pytest

from record_gateway.shard_manager import HashRing

NODES = ["http://shard1:8000", "http://shard2:8000", "http://shard3:8000"]


def test_same_key_same_node():
    ring = HashRing(NODES)
    assert all(ring.node_for(f"s{i}") == HashRing(NODES).node_for(f"s{i}") for i in range(50))


def test_keys_spread_over_nodes():
    ring = HashRing(NODES)
    assert {ring.node_for(f"student-{i}") for i in range(300)} == set(NODES)


def test_removing_a_node_only_moves_its_keys():
    ring = HashRing(NODES)
    before = {f"k{i}": ring.node_for(f"k{i}") for i in range(200)}

    ring.remove_node("http://shard3:8000")

    assert ring.nodes == NODES[:2]
    for key, node in before.items():
        if node != "http://shard3:8000":
            assert ring.node_for(key) == node


def test_empty_ring():
    ring = HashRing([])
    with pytest.raises(LookupError):
        ring.node_for("s1")
    ring.add_node("http://shard1:8000")
    assert ring.node_for("s1") == "http://shard1:8000"
