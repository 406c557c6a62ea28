"""
Resilient dispatching of HTTP requests to a pool of interchangeable hosts.

The entry point is :class:`BaseWebRepository <academy.repositories.web.base_web_repository.BaseWebRepository>`.
"""

# relative
from .base_web_repository import *
from .encoding import *
from .exceptions import *
from .models import *
