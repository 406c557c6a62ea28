"""
Repositories abstract the interactions with external resources (databases, web services, file systems, ...).

They are the only components aware of the actual nature of a resource, and never implement application logic.
"""

# relative
from .docdb import *
from .example_repository import *
from .migrations import *
from .people_repository import *
