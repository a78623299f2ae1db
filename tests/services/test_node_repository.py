"""
Tests for NodeRepository: node/edge CRUD, owner scoping and cascade delete.
"""

from unittest.mock import AsyncMock

import pytest

from zettelgraph.models.edge import Edge
from zettelgraph.models.node import NodeCreate, NodeKind, Position, SourceKind
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.utils.exceptions import NotFoundError, ValidationError

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


def note(content: str, **fields) -> NodeCreate:
    return NodeCreate(kind=NodeKind.NOTE, content=content, x=0, y=0, **fields)


@pytest.mark.unit
class TestCreateNode:
    async def test_defaults_filled_in(self, repository):
        node = await repository.create_node(
            OWNER, {"kind": "text", "content": "hello", "x": 10, "y": 20}
        )

        assert node.id.startswith("node_")
        assert node.owner_id == OWNER
        assert node.size.width == 300.0
        assert node.size.height == 150.0
        assert node.source_kind == SourceKind.MANUAL
        assert node.created_at == node.updated_at
        assert node.embedding is None

        stored = await repository.get_node(node.id)
        assert stored.position == Position(x=10, y=20)
        assert stored.kind == NodeKind.TEXT

    async def test_outgoing_links_derived_from_content(self, repository):
        node = await repository.create_node(
            OWNER, note("# Ideas\n\nSee [[Beta]], [[beta]] and [[Gamma Ray]]")
        )

        assert node.outgoing_links == ["beta", "gamma ray"]

    async def test_missing_required_field(self, repository):
        with pytest.raises(ValidationError):
            await repository.create_node(OWNER, {"kind": "note", "content": "no position"})

    async def test_invalid_kind(self, repository):
        with pytest.raises(ValidationError):
            await repository.create_node(OWNER, {"kind": "image", "content": "x", "x": 0, "y": 0})

    async def test_blank_owner(self, repository):
        with pytest.raises(ValidationError):
            await repository.create_node("  ", note("# Orphan"))


@pytest.mark.unit
class TestGetNode:
    async def test_owner_scoping(self, repository):
        node = await repository.create_node(OWNER, note("# Private"))

        assert (await repository.get_node(node.id, OWNER)).id == node.id
        with pytest.raises(NotFoundError):
            await repository.get_node(node.id, OTHER_OWNER)

    async def test_missing_node(self, repository):
        with pytest.raises(NotFoundError):
            await repository.get_node("node_missing")
        assert await repository.find_node("node_missing") is None


@pytest.mark.unit
class TestUpdateNode:
    async def test_content_change_recomputes_links(self, repository):
        node = await repository.create_node(OWNER, note("# Draft\n\n[[Old Link]]"))

        updated = await repository.update_node(
            node.id, {"content": "# Draft\n\n[[New Link]]"}, OWNER
        )

        assert updated.content == "# Draft\n\n[[New Link]]"
        assert updated.outgoing_links == ["new link"]
        assert updated.updated_at >= node.updated_at

    async def test_partial_position_update(self, repository):
        node = await repository.create_node(OWNER, NodeCreate(kind="text", content="t", x=1, y=2))

        updated = await repository.update_node(node.id, {"x": 50})

        assert updated.position == Position(x=50, y=2)
        assert updated.content == "t"

    async def test_other_owner_cannot_update(self, repository):
        node = await repository.create_node(OWNER, note("# Mine"))

        with pytest.raises(NotFoundError):
            await repository.update_node(node.id, {"content": "# Theirs"}, OTHER_OWNER)

        assert (await repository.get_node(node.id)).content == "# Mine"

    async def test_missing_node(self, repository):
        with pytest.raises(NotFoundError):
            await repository.update_node("node_missing", {"content": "x"})

    async def test_invalid_value(self, repository):
        node = await repository.create_node(OWNER, note("# Mine"))

        with pytest.raises(ValidationError):
            await repository.update_node(node.id, {"x": "left"})


@pytest.mark.unit
class TestDeleteNode:
    async def test_cascade_removes_incident_edges(self, repository):
        a = await repository.create_node(OWNER, note("# A"))
        b = await repository.create_node(OWNER, note("# B"))
        c = await repository.create_node(OWNER, note("# C"))
        await repository.create_edge(a.id, b.id)
        await repository.create_edge(c.id, a.id)
        kept = await repository.create_edge(b.id, c.id)

        await repository.delete_node(a.id, OWNER)

        assert await repository.find_node(a.id) is None
        remaining = await repository.list_edges()
        assert [edge.id for edge in remaining] == [kept.id]

    async def test_index_entry_removed(self, graph_store):
        index = AsyncMock()
        repository = NodeRepository(graph_store, index)
        node = await repository.create_node(OWNER, note("# Indexed"))

        await repository.delete_node(node.id)

        index.delete_node.assert_awaited_once_with(node.id)

    async def test_other_owner_cannot_delete(self, repository):
        node = await repository.create_node(OWNER, note("# Keep me"))

        with pytest.raises(NotFoundError):
            await repository.delete_node(node.id, OTHER_OWNER)

        assert await repository.find_node(node.id) is not None

    async def test_missing_node(self, repository):
        with pytest.raises(NotFoundError):
            await repository.delete_node("node_missing")


@pytest.mark.unit
class TestEmbedding:
    async def test_update_embedding(self, graph_store):
        index = AsyncMock()
        repository = NodeRepository(graph_store, index)
        node = await repository.create_node(OWNER, note("# Vector"))

        updated = await repository.update_embedding(node.id, [0.1, 0.2, 0.3])

        assert updated.embedding == [0.1, 0.2, 0.3]
        assert updated.updated_at == node.updated_at
        index.upsert_node.assert_awaited_once()

    async def test_empty_embedding(self, repository):
        node = await repository.create_node(OWNER, note("# Vector"))

        with pytest.raises(ValidationError):
            await repository.update_embedding(node.id, [])

    async def test_missing_node(self, repository):
        with pytest.raises(NotFoundError):
            await repository.update_embedding("node_missing", [1.0])


@pytest.mark.unit
class TestListing:
    async def test_list_notes_most_recent_first(self, repository):
        first = await repository.create_node(OWNER, note("# First"))
        await repository.create_node(OWNER, note("# Second"))
        await repository.create_node(OWNER, NodeCreate(kind="text", content="not a note", x=0, y=0))
        await repository.create_node(OTHER_OWNER, note("# Elsewhere"))
        await repository.update_node(first.id, {"content": "# First, edited"})

        notes = await repository.list_notes(OWNER)

        assert len(notes) == 2
        assert notes[0].id == first.id
        assert len(await repository.list_notes(OWNER, limit=1)) == 1

    async def test_nodes_by_voice_note(self, repository):
        created = [
            await repository.create_node(
                OWNER, note(f"# Part {i}", source_kind="voice", source_id="voice_abc")
            )
            for i in range(3)
        ]
        await repository.create_node(OWNER, note("# Unrelated"))

        nodes = await repository.get_nodes_by_voice_note("voice_abc", OWNER)

        assert [node.id for node in nodes] == [node.id for node in created]
        assert await repository.get_nodes_by_voice_note("voice_abc", OTHER_OWNER) == []


@pytest.mark.unit
class TestEdges:
    async def test_create_and_get(self, repository):
        a = await repository.create_node(OWNER, note("# A"))
        b = await repository.create_node(OWNER, note("# B"))

        edge = await repository.create_edge(a.id, b.id, label="84%")

        assert edge.id.startswith("edge_")
        assert (await repository.get_edge(edge.id)).label == "84%"

    async def test_self_loop_rejected(self, repository):
        a = await repository.create_node(OWNER, note("# A"))

        with pytest.raises(ValidationError):
            await repository.create_edge(a.id, a.id)

    async def test_duplicate_edges_allowed(self, repository):
        a = await repository.create_node(OWNER, note("# A"))
        b = await repository.create_node(OWNER, note("# B"))

        await repository.create_edge(a.id, b.id)
        await repository.create_edge(a.id, b.id)

        assert len(await repository.list_edges(source=a.id, target=b.id)) == 2

    async def test_missing_edge(self, repository):
        with pytest.raises(NotFoundError):
            await repository.get_edge("edge_missing")
        with pytest.raises(NotFoundError):
            await repository.delete_edge("edge_missing")

    async def test_edge_scoped_to_owner(self, repository):
        a = await repository.create_node(OWNER, note("# A"))
        b = await repository.create_node(OWNER, note("# B"))
        edge = await repository.create_edge(a.id, b.id)

        assert (await repository.get_edge(edge.id, OWNER)).id == edge.id
        with pytest.raises(NotFoundError):
            await repository.get_edge(edge.id, OTHER_OWNER)
        with pytest.raises(NotFoundError):
            await repository.delete_edge(edge.id, OTHER_OWNER)

        assert await repository.list_edges(source=a.id)

    async def test_owner_deletes_own_edge(self, repository):
        a = await repository.create_node(OWNER, note("# A"))
        b = await repository.create_node(OWNER, note("# B"))
        edge = await repository.create_edge(a.id, b.id)

        await repository.delete_edge(edge.id, OWNER)

        assert await repository.list_edges(source=a.id) == []

    async def test_list_edges_filtered_by_owner(self, repository):
        a = await repository.create_node(OWNER, note("# A"))
        b = await repository.create_node(OWNER, note("# B"))
        x = await repository.create_node(OTHER_OWNER, note("# X"))
        y = await repository.create_node(OTHER_OWNER, note("# Y"))
        mine = await repository.create_edge(a.id, b.id)
        await repository.create_edge(x.id, y.id)

        assert [e.id for e in await repository.list_edges(owner_id=OWNER)] == [mine.id]
        assert len(await repository.list_edges()) == 2

    async def test_dangling_source_falls_back_to_target_owner(self, graph_store, repository):
        b = await repository.create_node(OWNER, note("# B"))
        edge = Edge(source="node_gone", target=b.id)
        await graph_store.add_edge(edge)

        assert (await repository.get_edge(edge.id, OWNER)).id == edge.id
        with pytest.raises(NotFoundError):
            await repository.get_edge(edge.id, OTHER_OWNER)
