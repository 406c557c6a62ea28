"""
The FastAPI application exposing the services.

The application is created by :func:`create_app <academy.web.app.create_app>` from the configuration set in
:class:`ConfigurationFactory <academy.web.deployment.configuration.ConfigurationFactory>`, and served by the
`academy serve` command.
"""

# relative
from .app import create_app
from .dependencies import Dependencies, DependenciesFactory, dependenciesFactory
from .deployment import Configuration, ConfigurationFactory
from .exceptions import AcademyException, HttpResponseException

__all__ = [
    "AcademyException",
    "Configuration",
    "ConfigurationFactory",
    "Dependencies",
    "DependenciesFactory",
    "HttpResponseException",
    "create_app",
    "dependenciesFactory",
]
