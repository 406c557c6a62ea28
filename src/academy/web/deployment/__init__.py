# relative
from .configuration import *
from .deployment import *
