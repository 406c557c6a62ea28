"""
This serves as the core module of the `academy` package: a template for layered REST APIs
(path operations → services → repositories → persisted store).

The module encompasses the following submodules:

*  :mod:`academy.domain`: DTOs, problem responses, domain exceptions and constants shared by all layers.

*  :mod:`academy.repositories`: Data access. It includes the local table store with its migrations, and
:mod:`academy.repositories.web`, the multi-host HTTP dispatcher any repository talking to a web service
derives from.

*  :mod:`academy.services`: Business logic, agnostic of both data sources and output formats.

*  :mod:`academy.web`: The FastAPI application: configuration, dependencies, path operations, middlewares
and errors handling.
"""

__version__ = "0.1.0"
__release_version__ = "0.1.0"
