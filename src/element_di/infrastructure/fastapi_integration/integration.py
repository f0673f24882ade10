import functools
import inspect
from typing import Any, Awaitable, Callable, Dict

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from element_di.domain import IContainer, ServiceId


def create_fastapi_dependency(container: IContainer, service_id: ServiceId) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves from the container.

    The resolved instance lifetime follows the binding in the container:
    shared bindings yield the same object on every request, non-shared
    bindings are built per request.

    Args:
        container: The container to resolve services from.
        service_id: The id (or class) to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = builder.build()
        >>> get_user_repo = create_fastapi_dependency(container, "user.repository")
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> Any:
        """Resolve the service from the container."""
        return container.get(service_id)

    return dependency


def create_request_dependency(service_id: ServiceId) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that resolves from the request's container.

    The current request is handed to the service as the ``request`` parameter,
    so constructors and factories declaring ``request`` receive it.

    Requires the ContainerMiddleware to be installed.

    Example:
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> get_request_context = create_request_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"path": ctx.request.url.path}
    """

    def request_dependency(request: Request) -> Any:
        """Resolve from the container attached to the request."""
        if not hasattr(request.state, "di_container"):
            raise RuntimeError("Request does not have a DI container. Did you forget to add ContainerMiddleware?")
        container: IContainer = request.state.di_container
        return container.make(service_id, {"request": request})

    return request_dependency


class ContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the container on every request.

    The container is accessible via ``request.state.di_container``.

    Attributes:
        container: The container handed to each request.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ContainerMiddleware, container=builder.build())
    """

    def __init__(self, app: FastAPI, container: IContainer):
        """Initialize the middleware with a container.

        Args:
            app: The FastAPI/Starlette application.
            container: The container to expose.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container to the request and execute the endpoint."""
        request.state.di_container = self.container
        return await call_next(request)


def inject_dependencies(container: IContainer, **service_ids: ServiceId) -> Callable:
    """Decorator that injects services into an endpoint function.

    Each keyword maps a parameter name of the decorated function to the
    service id resolved for it. Injected parameters are hidden from the
    function's public signature so FastAPI does not treat them as inputs.

    Example:
        >>> @app.get("/users")
        >>> @inject_dependencies(container, user_service="user.service")
        >>> async def list_users(user_service):
        ...     return await user_service.get_all()
    """

    def decorator(func: Callable) -> Callable:
        """Wrap the function with dependency injection logic."""
        signature = inspect.signature(func)
        public_signature = signature.replace(
            parameters=[param for name, param in signature.parameters.items() if name not in service_ids]
        )

        def resolve_missing(kwargs: Dict[str, Any]) -> Dict[str, Any]:
            for name, service_id in service_ids.items():
                if name not in kwargs:
                    kwargs[name] = container.get(service_id)
            return kwargs

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await func(*args, **resolve_missing(kwargs))

            async_wrapper.__signature__ = public_signature  # type: ignore[attr-defined]
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return func(*args, **resolve_missing(kwargs))

        wrapper.__signature__ = public_signature  # type: ignore[attr-defined]
        return wrapper

    return decorator
