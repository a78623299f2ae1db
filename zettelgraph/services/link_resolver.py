"""
Link Resolver - turns titles into nodes and computes backlinks.

Titles are not unique. Whenever several notes share a title, the oldest
one (by created_at, then ID) wins.
"""

from zettelgraph.core.content.parser import ContentParser, normalize_title
from zettelgraph.models.edge import Backlink, NoteBacklink
from zettelgraph.models.node import Node, NodeCreate, NodeKind
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.utils.exceptions import ConsistencyError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


def _first_match_order(node: Node) -> tuple:
    return (node.created_at, node.id)


class LinkResolver:
    """Title lookup, get-or-create and backlink queries over notes."""

    def __init__(self, repository: NodeRepository, parser: ContentParser | None = None):
        self.repository = repository
        self.parser = parser or repository.parser

    async def find_node_by_title(self, title: str, owner_id: str | None = None) -> Node | None:
        """
        Find the note whose extracted title matches, case-insensitively.

        Args:
            title: Title to look for
            owner_id: Restrict the search to one owner

        Returns:
            Oldest matching note, or None
        """
        wanted = normalize_title(title or "")
        if not wanted:
            return None

        notes = await self.repository.list_nodes_by_kind(NodeKind.NOTE, owner_id)
        matches = [
            note
            for note in notes
            if normalize_title(self.parser.extract_raw_title(note.content)) == wanted
        ]
        if not matches:
            return None

        return min(matches, key=_first_match_order)

    async def resolve_or_create(self, title: str, owner_id: str) -> str:
        """
        ID of the note with this title, creating a stub note when none exists.

        Raises:
            ValidationError: If title is blank
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title cannot be empty")

        existing = await self.find_node_by_title(title, owner_id)
        if existing is not None:
            return existing.id

        node = await self.repository.create_node(
            owner_id,
            NodeCreate(kind=NodeKind.NOTE, content=f"# {title}\n\n", x=0, y=0),
        )
        logger.info(
            f"Created stub note for [[{title}]]",
            extra={"node_id": node.id, "owner_id": owner_id, "title": title},
        )
        return node.id

    async def get_backlinks(self, node_id: str, strict: bool = False) -> list[Backlink]:
        """
        Nodes with an explicit edge pointing at node_id.

        Edges whose source no longer exists are dropped and logged.

        Args:
            node_id: Target node
            strict: Raise instead of dropping dangling edges

        Raises:
            ConsistencyError: On a dangling edge when strict is set
        """
        backlinks = []
        for edge in await self.repository.list_edges(target=node_id):
            source = await self.repository.find_node(edge.source)
            if source is None:
                error = ConsistencyError(
                    f"Edge {edge.id} points from missing node {edge.source}",
                    context={"edge_id": edge.id, "source": edge.source, "target": node_id},
                )
                if strict:
                    raise error
                logger.warning(error.message, extra=error.context)
                continue

            backlinks.append(Backlink(node=source, edge_id=edge.id, edge_label=edge.label))

        return backlinks

    async def get_textual_backlinks(
        self, title: str, owner_id: str | None = None
    ) -> list[NoteBacklink]:
        """
        Notes that reference a title through a wiki-link.

        Checks the cached outgoing links first and falls back to a live scan
        of the content, so notes with stale caches are still found.
        """
        wanted = normalize_title(title or "")
        if not wanted:
            return []

        notes = await self.repository.list_nodes_by_kind(NodeKind.NOTE, owner_id)

        seen: set[str] = set()
        backlinks = []
        for note in sorted(notes, key=_first_match_order):
            if note.id in seen:
                continue
            cached = any(normalize_title(link) == wanted for link in note.outgoing_links)
            if cached or wanted in self.parser.extract_referenced_titles(note.content):
                seen.add(note.id)
                backlinks.append(
                    NoteBacklink(node=note, title=self.parser.extract_title(note.content))
                )

        return backlinks
