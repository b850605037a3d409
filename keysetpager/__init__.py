__version__ = __import__('importlib.metadata').metadata.version('keysetpager')

from .query import BaseQuery, OrderDirective
from .engine import fetch_page, iter_pages, Page, PageQuery, PagerSettings
from .operations import SortKey, SortingDirection, PageCursors, Cursor, CursorKind

from . import exc
