"""
Daily notes: one note per calendar day, titled with its ISO date.
"""

from datetime import date

from zettelgraph.models.node import Node, NodeCreate, NodeKind
from zettelgraph.services.link_resolver import LinkResolver
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.utils.exceptions import ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)

DAILY_NOTE_TEMPLATE = (
    "<h1>{date}</h1>"
    "<h2>{weekday}, {month} {day}, {year}</h2>"
    "<h3>Morning</h3><ul><li><p></p></li></ul>"
    '<h3>Tasks</h3><ul data-type="taskList"><li data-type="taskItem" data-checked="false">'
    '<label><input type="checkbox"><span></span></label><div><p></p></div></li></ul>'
    "<h3>Notes</h3><p></p>"
    "<h3>Evening Reflection</h3><p></p>"
)


def parse_date_string(date_string: str) -> date:
    """
    Parse a YYYY-MM-DD date.

    Raises:
        ValidationError: If the string is not a valid ISO calendar date
    """
    try:
        parsed = date.fromisoformat(date_string)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Invalid date: {date_string!r}, expected YYYY-MM-DD",
            context={"date": date_string},
        ) from e

    if parsed.isoformat() != date_string:
        raise ValidationError(
            f"Invalid date: {date_string!r}, expected YYYY-MM-DD",
            context={"date": date_string},
        )
    return parsed


def render_daily_note(day: date) -> str:
    return DAILY_NOTE_TEMPLATE.format(
        date=day.isoformat(),
        weekday=day.strftime("%A"),
        month=day.strftime("%B"),
        day=day.day,
        year=day.year,
    )


class DailyNoteService:
    """Find or create the note for a given day."""

    def __init__(self, repository: NodeRepository, resolver: LinkResolver):
        self.repository = repository
        self.resolver = resolver

    async def find_daily_note(self, date_string: str, owner_id: str) -> Node | None:
        """Note whose title is exactly the date string, or None."""
        parse_date_string(date_string)

        notes = await self.repository.list_nodes_by_kind(NodeKind.NOTE, owner_id)
        matches = [
            note
            for note in notes
            if self.resolver.parser.extract_title(note.content) == date_string
        ]
        return min(matches, key=lambda note: (note.created_at, note.id)) if matches else None

    async def create_daily_note(self, date_string: str, owner_id: str) -> Node:
        """
        Create a daily note from the template at the canvas origin.

        Raises:
            ValidationError: If the date is invalid
        """
        day = parse_date_string(date_string)

        node = await self.repository.create_node(
            owner_id,
            NodeCreate(kind=NodeKind.NOTE, content=render_daily_note(day), x=0, y=0),
        )
        logger.info(
            f"Created daily note for {date_string}",
            extra={"node_id": node.id, "owner_id": owner_id},
        )
        return node

    async def get_or_create_daily_note(self, date_string: str, owner_id: str) -> Node:
        existing = await self.find_daily_note(date_string, owner_id)
        if existing is not None:
            return existing
        return await self.create_daily_note(date_string, owner_id)
