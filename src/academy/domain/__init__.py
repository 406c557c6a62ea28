# relative
from .constants import *
from .exceptions import *
from .models import *
