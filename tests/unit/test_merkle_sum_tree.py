"""
Merkle Sum Tree Unit Tests
Tests for sumtree/merkle/merkle_sum_tree.py

Tests:
1. Construction - height, padding, zero index, sums, storage layout
2. Insert - slot reuse and growth
3. Update / remove - path recomputation, idempotence, no shrink
4. Atomicity - failed mutations leave the tree untouched
5. Incremental updates agree with a full rebuild
6. Accessors and index errors
"""
import random

import pytest

from fixtures.common import (
    make_leaves,
    make_numbered_leaves,
    make_tree,
    sha_pair_hasher,
    snapshot_tree,
)
from sumtree.crypto.field import BN254, PASTA
from sumtree.crypto.mimc_sponge import MimcSponge
from sumtree.merkle import (
    MAX_VALUE,
    Leaf,
    MerkleSumTree,
    Node,
    Position,
    build_parent,
    compute_height,
)
from sumtree.schemas.errors import (
    EmptyInputException,
    ErrorCodes,
    HeightExceededException,
    IndexOutOfRangeException,
    SumOverflowException,
)


class TestScenarios:
    """Worked examples."""

    def test_two_leaves(self):
        """[a:3, b:5] gives height 1, sum 8 and a one-step proof."""
        tree = MerkleSumTree.from_values([("a", 3), ("b", 5)])
        a, b = tree.get_leaf(0), tree.get_leaf(1)

        assert tree.height == 1
        assert tree.root_sum == 8
        assert tree.root_hash == MimcSponge()(a.node.hash, b.node.hash)

        proof = tree.get_proof(0)
        assert len(proof.path) == 1
        assert proof.path[0].position is Position.RIGHT
        assert proof.path[0].node == b.node
        assert tree.verify_proof(proof)

    def test_single_leaf_is_padded(self):
        """A single leaf is paired with one zero leaf."""
        tree = MerkleSumTree.from_values([("a", 1)])

        assert tree.height == 1
        assert tree.size == 2
        assert tree.root_sum == 1
        assert tree.get_leaf(1) == Leaf.zero()
        assert tree.zero_index == (1,)

    def test_remove_first_of_four(self, tree):
        """Removing a leaf zeroes it and subtracts its value."""
        before = tree.root_sum
        removed = tree.get_leaf(0).value

        tree.remove(0)

        assert tree.get_leaf(0).is_none()
        assert tree.root_sum == before - removed
        assert tree.height == 2
        assert 0 in tree.zero_index


class TestConstruction:
    """Tests for building a tree from leaves."""

    def test_empty_raises(self):
        with pytest.raises(EmptyInputException) as exc_info:
            MerkleSumTree([])
        assert exc_info.value.code == ErrorCodes.EMPTY_INPUT

    @pytest.mark.parametrize("count,height", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4)])
    def test_height_and_padding(self, count, height, fast_hasher):
        """Padded size is 2^height and height = max(1, ceil(log2(count)))."""
        tree = MerkleSumTree(make_numbered_leaves(count), hasher=fast_hasher)

        assert tree.height == height
        assert tree.size == 2 ** height
        assert len(tree) == tree.size
        assert len(tree.nodes) == 2 ** (height + 1) - 1
        assert tree.zero_index == tuple(range(count, 2 ** height))

    def test_root_sum_is_leaf_total(self, tree):
        assert tree.root_sum == 100 + 200 + 150 + 75

    def test_storage_layout(self, fast_hasher):
        """Leaves first, then each parent level, root last."""
        leaves = make_leaves()
        tree = MerkleSumTree(leaves, hasher=fast_hasher)
        nodes = tree.nodes

        assert nodes[:4] == tuple(leaf.node for leaf in leaves)
        assert nodes[4] == build_parent(nodes[0], nodes[1], fast_hasher)
        assert nodes[5] == build_parent(nodes[2], nodes[3], fast_hasher)
        assert nodes[6] == build_parent(nodes[4], nodes[5], fast_hasher)
        assert tree.root == nodes[6]

    def test_every_parent_sums_children(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(5, value=7), hasher=fast_hasher)
        nodes = tree.nodes
        start, size = 0, tree.size
        while size > 1:
            parents = nodes[start + size:start + size + size // 2]
            for j, parent in enumerate(parents):
                left, right = nodes[start + 2 * j], nodes[start + 2 * j + 1]
                assert parent.value == left.value + right.value
                assert parent.hash == fast_hasher(left.hash, right.hash)
            start, size = start + size, size // 2

    def test_deterministic(self):
        assert make_tree().root == make_tree().root

    def test_input_zero_leaves_are_recorded(self, fast_hasher):
        leaves = [Leaf.create("a", 1), Leaf.zero(), Leaf.create("b", 2)]
        tree = MerkleSumTree(leaves, hasher=fast_hasher)
        assert tree.zero_index == (1, 3)

    def test_overflow_at_construction(self):
        with pytest.raises(SumOverflowException) as exc_info:
            MerkleSumTree.from_values([("a", MAX_VALUE), ("b", 1)])
        assert exc_info.value.details["max_value"] == MAX_VALUE

    def test_custom_max_value(self):
        with pytest.raises(SumOverflowException):
            make_tree(fast=True, max_value=500)

    def test_exact_max_value_allowed(self, fast_hasher):
        tree = MerkleSumTree.from_values([("a", MAX_VALUE - 1), ("b", 1)], hasher=fast_hasher)
        assert tree.root_sum == MAX_VALUE

    def test_height_exceeded_by_limit(self, fast_hasher):
        with pytest.raises(HeightExceededException) as exc_info:
            MerkleSumTree(make_numbered_leaves(5), hasher=fast_hasher, max_height=2)
        assert exc_info.value.details == {"required_height": 3, "max_height": 2}

    @pytest.mark.parametrize("kwargs", [{"max_value": MAX_VALUE + 1}, {"max_value": -1}, {"max_height": 0}, {"max_height": 65}])
    def test_invalid_limits(self, kwargs):
        with pytest.raises(ValueError):
            make_tree(fast=True, **kwargs)

    def test_mixed_fields_rejected(self):
        leaves = [Leaf.create("a", 1, PASTA), Leaf.create("b", 2, BN254)]
        with pytest.raises(ValueError, match="field"):
            MerkleSumTree(leaves)

    def test_empty_leaf_id_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            Leaf.create("", 1)
        with pytest.raises(ValueError, match="non-empty"):
            Leaf(id="", node=Leaf.create("a", 1).node)

    def test_default_hasher_matches_field(self):
        tree = MerkleSumTree.from_values([("a", 1), ("b", 2)], field=BN254)
        assert isinstance(tree.hasher, MimcSponge)
        assert tree.hasher.field is BN254
        assert tree.root_hash.field is BN254


class TestComputeHeight:
    """Tests for compute_height()."""

    @pytest.mark.parametrize("count,height", [(1, 1), (2, 1), (3, 2), (1024, 10), (1025, 11)])
    def test_values(self, count, height):
        assert compute_height(count) == height

    def test_zero_count(self):
        with pytest.raises(EmptyInputException):
            compute_height(0)

    def test_largest_allowed(self):
        assert compute_height(2 ** 64) == 64

    def test_beyond_64(self):
        with pytest.raises(HeightExceededException):
            compute_height(2 ** 64 + 1)


class TestBuildParent:
    """Tests for build_parent()."""

    def test_sum_and_hash(self, fast_hasher):
        left, right = Leaf.create("a", 3).node, Leaf.create("b", 4).node
        parent = build_parent(left, right, fast_hasher)

        assert parent.value == 7
        assert parent.hash == fast_hasher(left.hash, right.hash)

    def test_overflow(self, fast_hasher):
        left, right = Leaf.create("a", 10).node, Leaf.create("b", 10).node
        with pytest.raises(SumOverflowException):
            build_parent(left, right, fast_hasher, max_value=19)


class TestPush:
    """Tests for inserting leaves."""

    def test_reuses_free_slot(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(3), hasher=fast_hasher)
        root_before = tree.root

        index = tree.push(Leaf.create("new", 9))

        assert index == 3
        assert tree.height == 2
        assert tree.zero_index == ()
        assert tree.root_sum == 3 + 9
        assert tree.root != root_before

    def test_reuses_lowest_free_slot(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(4), hasher=fast_hasher)
        tree.remove(2)
        tree.remove(1)

        assert tree.push(Leaf.create("x", 1)) == 1
        assert tree.zero_index == (2,)

    def test_grows_when_full(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(4), hasher=fast_hasher)
        root_before = tree.root

        index = tree.push(Leaf.create("new", 5))

        assert index == 4
        assert tree.height == 3
        assert tree.size == 8
        assert tree.zero_index == (5, 6, 7)
        assert tree.root_sum == 4 + 5
        assert tree.root != root_before
        assert tree.leafs[:4] == tuple(make_numbered_leaves(4))

    def test_grown_tree_matches_fresh_build(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(2), hasher=fast_hasher)
        tree.push(Leaf.create("c", 3))

        fresh = MerkleSumTree(make_numbered_leaves(2) + [Leaf.create("c", 3)], hasher=fast_hasher)
        assert tree.nodes == fresh.nodes

    def test_push_then_prove(self):
        tree = make_tree()
        index = tree.push(Leaf.create("erin", 10))
        assert tree.verify_proof(tree.get_proof(index))

    def test_push_zero_leaf_rejected(self, fast_hasher):
        """The padding leaf cannot occupy a slot, so each push gets a fresh index."""
        tree = MerkleSumTree(make_numbered_leaves(1), hasher=fast_hasher)
        before = snapshot_tree(tree)

        with pytest.raises(ValueError, match="zero leaf"):
            tree.push(Leaf.zero())

        assert snapshot_tree(tree) == before
        assert tree.push(Leaf.create("b", 2)) == 1
        assert tree.push(Leaf.create("c", 3)) == 2
        assert tree.zero_index == (3,)

    def test_push_wrong_field(self, tree):
        with pytest.raises(ValueError):
            tree.push(Leaf.create("x", 1, BN254))


class TestSetLeaf:
    """Tests for in-place updates."""

    def test_updates_path_and_sum(self, fast_hasher):
        tree = make_tree(fast=True)
        tree.set_leaf(2, Leaf.create("carol", 10))

        assert tree.get_leaf(2).value == 10
        assert tree.root_sum == 100 + 200 + 10 + 75
        assert tree.verify_proof(tree.get_proof(2))

    def test_only_path_nodes_change(self):
        tree = make_tree(fast=True)
        before = tree.nodes
        tree.set_leaf(0, Leaf.create("alice", 1))
        after = tree.nodes

        changed = {i for i, (a, b) in enumerate(zip(before, after)) if a != b}
        assert changed == {0, 4, 6}

    def test_setting_zero_leaf_frees_slot(self):
        tree = make_tree(fast=True)
        tree.set_leaf(3, Leaf.zero())
        assert tree.zero_index == (3,)

    def test_filling_zero_slot_clears_it(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(3), hasher=fast_hasher)
        tree.set_leaf(3, Leaf.create("x", 1))
        assert tree.zero_index == ()

    @pytest.mark.parametrize("index", [-1, 4, 100])
    def test_index_out_of_range(self, index):
        tree = make_tree(fast=True)
        with pytest.raises(IndexOutOfRangeException) as exc_info:
            tree.set_leaf(index, Leaf.create("x", 1))
        assert exc_info.value.details["index"] == index

    def test_index_error_is_index_error(self):
        tree = make_tree(fast=True)
        with pytest.raises(IndexError):
            tree.set_leaf(4, Leaf.create("x", 1))


class TestRemove:
    """Tests for removing leaves."""

    def test_remove_is_idempotent(self):
        tree = make_tree(fast=True)
        tree.remove(1)
        root = tree.root
        zero_index = tree.zero_index

        tree.remove(1)

        assert tree.root == root
        assert tree.zero_index == zero_index

    def test_remove_padding_is_noop(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(3), hasher=fast_hasher)
        root = tree.root
        tree.remove(3)
        assert tree.root == root

    def test_height_never_shrinks(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(5), hasher=fast_hasher)
        for i in range(5):
            tree.remove(i)

        assert tree.height == 3
        assert tree.root_sum == 0
        assert tree.zero_index == tuple(range(8))

    def test_remove_out_of_range(self, tree):
        with pytest.raises(IndexOutOfRangeException):
            tree.remove(tree.size)


class TestAtomicity:
    """Failed mutations leave every observable part of the tree unchanged."""

    def test_set_leaf_overflow(self):
        tree = make_tree(fast=True, max_value=600)
        before = snapshot_tree(tree)

        with pytest.raises(SumOverflowException):
            tree.set_leaf(0, Leaf.create("alice", 200))

        assert snapshot_tree(tree) == before

    def test_push_overflow_into_free_slot(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(3, value=10), hasher=fast_hasher, max_value=35)
        before = snapshot_tree(tree)

        with pytest.raises(SumOverflowException):
            tree.push(Leaf.create("big", 6))

        assert snapshot_tree(tree) == before

    def test_push_overflow_on_growth(self):
        tree = make_tree(fast=True, max_value=600)
        before = snapshot_tree(tree)

        with pytest.raises(SumOverflowException):
            tree.push(Leaf.create("erin", 100))

        assert snapshot_tree(tree) == before

    def test_push_height_exceeded(self, fast_hasher):
        tree = MerkleSumTree(make_numbered_leaves(2), hasher=fast_hasher, max_height=1)
        before = snapshot_tree(tree)

        with pytest.raises(HeightExceededException):
            tree.push(Leaf.create("c", 1))

        assert snapshot_tree(tree) == before

    def test_index_error(self):
        tree = make_tree(fast=True)
        before = snapshot_tree(tree)

        with pytest.raises(IndexOutOfRangeException):
            tree.set_leaf(99, Leaf.create("x", 1))

        assert snapshot_tree(tree) == before

    def test_replacing_within_limit_is_allowed(self):
        """The old value is released before the limit is checked."""
        tree = make_tree(fast=True, max_value=525)
        tree.set_leaf(1, Leaf.create("bob", 150))
        tree.set_leaf(0, Leaf.create("alice", 150))
        assert tree.root_sum == 525


class TestIncrementalMatchesRebuild:
    """After any sequence of mutations, stored nodes equal a fresh build."""

    def test_random_mutations(self):
        rng = random.Random(1234)
        hasher = sha_pair_hasher()
        tree = MerkleSumTree(make_numbered_leaves(3, value=5), hasher=hasher)

        for step in range(200):
            action = rng.choice(["push", "set", "remove"])
            if action == "push":
                tree.push(Leaf.create(f"p{step}", rng.randint(0, 1000)))
            elif action == "set":
                tree.set_leaf(rng.randrange(tree.size), Leaf.create(f"s{step}", rng.randint(0, 1000)))
            else:
                tree.remove(rng.randrange(tree.size))

            live = [leaf for leaf in tree.leafs if not leaf.is_none()]
            assert tree.root_sum == sum(leaf.value for leaf in live)
            assert tree.zero_index == tuple(i for i, leaf in enumerate(tree.leafs) if leaf.is_none())

        rebuilt = MerkleSumTree(tree.leafs, hasher=hasher)
        assert rebuilt.height == tree.height
        assert rebuilt.nodes == tree.nodes

        for index in range(tree.size):
            assert tree.verify_proof(tree.get_proof(index))


class TestAccessors:
    """Tests for read-only accessors."""

    def test_get_node_bounds(self, tree):
        assert tree.get_node(len(tree.nodes) - 1) == tree.root
        with pytest.raises(IndexOutOfRangeException) as exc_info:
            tree.get_node(len(tree.nodes))
        assert exc_info.value.details["kind"] == "node"

    def test_get_leaf_bounds(self, tree):
        assert tree.get_leaf(0).id == "alice"
        with pytest.raises(IndexOutOfRangeException, match="Leaf index -1"):
            tree.get_leaf(-1)

    def test_views_are_tuples(self, tree):
        assert isinstance(tree.leafs, tuple)
        assert isinstance(tree.nodes, tuple)
        assert isinstance(tree.zero_index, tuple)

    def test_root_node_fields(self, tree):
        assert tree.root == Node(tree.root_hash, tree.root_sum)

    def test_limits_exposed(self):
        tree = make_tree(fast=True, max_value=1000, max_height=10)
        assert tree.max_value == 1000
        assert tree.max_height == 10
        assert tree.field is PASTA

    def test_repr(self, tree):
        assert "root_sum=525" in repr(tree)
