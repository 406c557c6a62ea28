# relative
from .example_service import *
from .people_service import *
