""" Tools for testing """

from .recreate_tables import created_tables, create_tables, drop_tables
from .insert import insert

from .query_logger import QueryCounter, QueryLogger

from .stmt_text import query2sql
from .stmt_text import stmt2sql
