"""
Historical views of EU4 saves: wars, buildings, ledgers and player tag histories.
"""

from .dates import Eu4Date
from .models import SaveGame, load_save
from .parser import ParseError, parse_save_file
from .query import SaveQuery
from .tag_filter import TagFilter
from .wars import WarNotFoundError

__version__ = '0.1.0'

__all__ = [
    'Eu4Date',
    'ParseError',
    'SaveGame',
    'SaveQuery',
    'TagFilter',
    'WarNotFoundError',
    'load_save',
    'parse_save_file',
]
