"""
Folio Models
============

Row types for the three backend collections. Rows arrive as untyped JSON
objects; `from_row` checks their shape before anything else sees them.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


class RowShapeError(ValueError):
    """A row from the backend does not have the expected fields or types"""

    def __init__(self, table, message):
        super().__init__(f"Malformed {table} row: {message}")
        self.table = table


_MISSING = object()


def _field(row, table, key, kinds, nullable=False):
    value = row.get(key, _MISSING)
    if value is _MISSING:
        raise RowShapeError(table, f"missing '{key}'")
    if value is None:
        if nullable:
            return None
        raise RowShapeError(table, f"'{key}' must not be null")
    # bool is a subclass of int, so integers must be checked explicitly
    if bool not in kinds and isinstance(value, bool):
        raise RowShapeError(table, f"'{key}' has type bool")
    if not isinstance(value, kinds):
        raise RowShapeError(table, f"'{key}' has type {type(value).__name__}")
    return value


def _row_id(row, table):
    return _field(row, table, 'id', (str, int))


def _require_mapping(row, table):
    if not isinstance(row, dict):
        raise RowShapeError(table, f"expected an object, got {type(row).__name__}")


@dataclass
class Profile:
    id: Any
    name: str
    initials: str
    tagline: str
    about_text: str
    is_available_for_work: bool
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    TABLE = 'profile'

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Profile':
        table = cls.TABLE
        _require_mapping(row, table)
        return cls(
            id=_row_id(row, table),
            name=_field(row, table, 'name', (str,)),
            initials=_field(row, table, 'initials', (str,)),
            tagline=_field(row, table, 'tagline', (str,)),
            about_text=_field(row, table, 'about_text', (str,)),
            is_available_for_work=_field(row, table, 'is_available_for_work', (bool,)),
            github_url=_field(row, table, 'github_url', (str,), nullable=True),
            linkedin_url=_field(row, table, 'linkedin_url', (str,), nullable=True),
            email=_field(row, table, 'email', (str,), nullable=True),
            created_at=_field(row, table, 'created_at', (str,)),
            updated_at=_field(row, table, 'updated_at', (str,)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Project:
    id: Any
    title: str
    description: str
    tags: List[str] = field(default_factory=list)
    url: Optional[str] = None
    github_url: Optional[str] = None
    image_url: Optional[str] = None
    display_order: int = 0
    is_visible: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    TABLE = 'projects'

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Project':
        table = cls.TABLE
        _require_mapping(row, table)
        tags = _field(row, table, 'tags', (list,))
        if not all(isinstance(tag, str) for tag in tags):
            raise RowShapeError(table, "'tags' must be a list of strings")
        return cls(
            id=_row_id(row, table),
            title=_field(row, table, 'title', (str,)),
            description=_field(row, table, 'description', (str,)),
            tags=list(tags),
            url=_field(row, table, 'url', (str,), nullable=True),
            github_url=_field(row, table, 'github_url', (str,), nullable=True),
            image_url=_field(row, table, 'image_url', (str,), nullable=True),
            display_order=_field(row, table, 'display_order', (int,)),
            is_visible=_field(row, table, 'is_visible', (bool,)),
            created_at=_field(row, table, 'created_at', (str,)),
            updated_at=_field(row, table, 'updated_at', (str,)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BlogPost:
    id: Any
    title: str
    slug: str
    description: str
    content: str = ''
    read_time: int = 5
    published_at: Optional[str] = None
    is_published: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    TABLE = 'blog_posts'

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'BlogPost':
        table = cls.TABLE
        _require_mapping(row, table)
        read_time = _field(row, table, 'read_time', (int,))
        if read_time < 1:
            raise RowShapeError(table, "'read_time' must be a positive integer")
        return cls(
            id=_row_id(row, table),
            title=_field(row, table, 'title', (str,)),
            slug=_field(row, table, 'slug', (str,)),
            description=_field(row, table, 'description', (str,)),
            content=_field(row, table, 'content', (str,)),
            read_time=read_time,
            published_at=_field(row, table, 'published_at', (str,), nullable=True),
            is_published=_field(row, table, 'is_published', (bool,)),
            created_at=_field(row, table, 'created_at', (str,)),
            updated_at=_field(row, table, 'updated_at', (str,)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
