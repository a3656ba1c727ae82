"""In-memory room and casino registries."""
from typing import Any, Optional

from cardtable.game.exceptions import DuplicateName, NotFound
from cardtable.game.table import Table
from cardtable.utils.ids import generate_id
from cardtable.utils.logger import get_logger

logger = get_logger(__name__)


class Room:
    """A named room holding tables."""
    
    def __init__(self, name: str, room_id: Optional[str] = None):
        if not isinstance(name, str) or not name:
            raise ValueError("Room name must be a non-empty string")
        self.id = room_id or generate_id()
        self.name = name
        self._tables: dict[str, Table] = {}
    
    def create_table(self, **table_kwargs: Any) -> Table:
        """Create a table in this room.
        
        Args:
            **table_kwargs: Passed to Table.
            
        Returns:
            The new table.
        """
        table = Table(**table_kwargs)
        if table.id in self._tables:
            raise DuplicateName(f"Table {table.id} already exists in room {self.name}")
        self._tables[table.id] = table
        logger.info(f"Created table {table.id} in room {self.name}")
        return table
    
    def add_table(self, table: Table) -> Table:
        if table.id in self._tables:
            raise DuplicateName(f"Table {table.id} already exists in room {self.name}")
        self._tables[table.id] = table
        return table
    
    def get_table(self, table_id: str) -> Optional[Table]:
        """Get a table by id.
        
        Returns:
            Table if found.
        """
        return self._tables.get(table_id)
    
    def get_tables(self) -> list[Table]:
        return list(self._tables.values())
    
    def remove_table(self, table_id: str) -> Table:
        """Remove a table.
        
        Raises:
            NotFound: If the room has no such table.
        """
        table = self._tables.pop(table_id, None)
        if table is None:
            raise NotFound(f"No table {table_id} in room {self.name}")
        logger.info(f"Removed table {table_id} from room {self.name}")
        return table
    
    def table_count(self) -> int:
        return len(self._tables)


class Casino:
    """Registry of rooms, unique by name."""
    
    def __init__(self):
        self._rooms: list[Room] = []
    
    def create_room(self, name: str) -> Room:
        """Create and register a room.
        
        Raises:
            DuplicateName: If a room already uses the name.
        """
        if self.get_room_by_name(name) is not None:
            raise DuplicateName(f"A room named '{name}' already exists")
        room = Room(name)
        self._rooms.append(room)
        logger.info(f"Created room {name}")
        return room
    
    def get_room_by_name(self, name: str) -> Optional[Room]:
        for room in self._rooms:
            if room.name == name:
                return room
        return None
    
    def get_rooms(self) -> list[Room]:
        return list(self._rooms)
    
    def remove_room(self, name: str) -> Room:
        """Remove a room by name.
        
        Raises:
            NotFound: If no room has that name.
        """
        room = self.get_room_by_name(name)
        if room is None:
            raise NotFound(f"No room named '{name}'")
        self._rooms.remove(room)
        logger.info(f"Removed room {name}")
        return room
    
    def room_count(self) -> int:
        return len(self._rooms)
