""" Fetch pages of a Base Query

Overview:

* fetch_page() and iter_pages() are the high-level interface
* PageQuery is the low-level interface that binds operations together
"""

from .pager import fetch_page, iter_pages
from .page import Page
from .page_query import PageQuery
from .settings import PagerSettings
from .loader import RowLoaderBase, PrimaryRowLoader
