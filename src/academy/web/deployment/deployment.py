# standard library
from collections.abc import Awaitable

# typing
from typing import Callable

# third parties
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from pydantic import BaseModel
from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import BaseRoute, Mount, Route

# Academy
import academy

Probe = Callable[[], Awaitable[None]]


class ProbeFailure(RuntimeError):
    """
    Raised by a probe of :class:`AcademyDeployment`, its message is the status reported by the probe's route.
    """


class ProbeStatus(BaseModel):
    status: str = "ok"


class DeploymentInfo(BaseModel):
    name: str
    version: str


class AcademyDeployment:
    """
    Identity of the running backend, and the probes used by an orchestrator to monitor it.
    """

    name = "academy"

    def __init__(self, dependencies_built: Callable[[], bool]):
        """
        Parameters:
            dependencies_built: Callable returning whether the dependencies of the application are available.
        """
        self.__dependencies_built = dependencies_built

    @property
    def version(self) -> str:
        return academy.__version__

    @property
    def server_header(self) -> str:
        return f"{self.name} {self.version}"

    def info(self) -> DeploymentInfo:
        return DeploymentInfo(name=self.name, version=self.version)

    async def ready(self) -> None:
        if not self.__dependencies_built():
            raise ProbeFailure("dependencies not built")

    async def started(self) -> None:
        await self.ready()

    async def alive(self) -> None:
        # answering the probe is enough
        return None


class ObservabilityRoutes:
    def __init__(self, deployment: AcademyDeployment):
        self.__deployment = deployment

    async def route_version(self, _request: Request) -> Response:
        return JSONResponse(self.__deployment.info().model_dump())

    def routes(self) -> list[BaseRoute]:
        probes: dict[str, Probe] = {
            "/readiness": self.__deployment.ready,
            "/liveness": self.__deployment.alive,
            "/startup": self.__deployment.started,
        }
        return [
            Route("/version", self.route_version),
            *[Route(path, probe_endpoint(probe)) for path, probe in probes.items()],
            Mount("/metrics", app=make_asgi_app()),
        ]

    def app(self) -> FastAPI:
        return FastAPI(routes=self.routes())


def probe_endpoint(probe: Probe):
    """
    Wrap a probe in an endpoint replying `200` if it passes, `503` with the failure's message otherwise.
    """

    async def endpoint(_request: Request) -> Response:
        try:
            await probe()
        except ProbeFailure as e:
            return JSONResponse(ProbeStatus(status=str(e)).model_dump(), status_code=503)
        return JSONResponse(ProbeStatus().model_dump())

    return endpoint


def add_observability_routes(app: FastAPI, deployment: AcademyDeployment):
    """
    Mount the probes & metrics under `/observability`, and tag every response with the `server` header.
    """

    @app.middleware("http")
    async def add_server_header(request: Request, call_next: RequestResponseEndpoint):
        response = await call_next(request)
        response.headers["server"] = deployment.server_header
        return response

    app.mount(path="/observability", app=ObservabilityRoutes(deployment).app())
