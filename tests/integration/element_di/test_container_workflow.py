"""Integration tests for container resolution across layers."""

import threading
from abc import ABC, abstractmethod

import pytest

from element_di import (
    CircularReferenceError,
    Container,
    ContainerBag,
    ContextualBindingBuilder,
    NotFoundError,
    ParameterBag,
)


class Config:
    def __init__(self):
        self.dsn = "sqlite://"


class Database:
    def __init__(self, config: Config):
        self.config = config


class Cache(ABC):
    @abstractmethod
    def get(self, key): ...


class MemoryCache(Cache):
    def __init__(self):
        self.items = {}

    def get(self, key):
        return self.items.get(key)


class UserRepository:
    def __init__(self, db: Database, cache: Cache, page_size: int = 20):
        self.db = db
        self.cache = cache
        self.page_size = page_size


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository


class Node:
    def __init__(self, parent: "Parent"):
        self.parent = parent


class Parent:
    def __init__(self, child: "Child"):
        self.child = child


class Child:
    def __init__(self, node: Node):
        self.node = node


class ReportController:
    def __init__(self, cache: Cache):
        self.cache = cache


class TestEndToEndResolution:
    """Test complete dependency chains."""

    def test_deep_dependency_chain(self):
        container = Container()
        container.singleton(Config)
        container.singleton(Database)
        container.singleton(Cache, MemoryCache)

        service = container.make(UserService)

        assert service.repository.db is container.get(Database)
        assert service.repository.db.config is container.get(Config)
        assert isinstance(service.repository.cache, MemoryCache)
        assert service.repository.page_size == 20

    def test_unbound_abstraction_fails(self):
        container = Container()
        with pytest.raises(NotFoundError, match="is not instantiable"):
            container.make(UserService)

    def test_three_step_cycle_reports_whole_path(self):
        container = Container()
        with pytest.raises(CircularReferenceError) as exc_info:
            container.make(Node)

        path = exc_info.value.path
        assert [key.rsplit(".", 1)[-1] for key in path] == ["Node", "Parent", "Child", "Node"]

    def test_factory_mixing_parameters_and_services(self):
        container = Container()
        container.set_parameter("page_size", 50)
        container.singleton(Cache, MemoryCache)
        container.bind(
            UserRepository,
            lambda c: UserRepository(c.make(Database), c.get(Cache), c.get_parameter("page_size")),
        )

        assert container.make(UserService).repository.page_size == 50

    def test_contextual_override_resolved_by_key(self):
        container = Container()
        container.singleton(Cache, MemoryCache)

        class ReportCache(MemoryCache):
            pass

        container.when(ReportController).needs(Cache).give_singleton(ReportCache)
        container.bind(
            ReportController,
            lambda c: ReportController(c.get(ContextualBindingBuilder.binding_key_for(ReportController, Cache))),
        )

        assert isinstance(container.get(ReportController).cache, ReportCache)
        assert type(container.get(Cache)) is MemoryCache

    def test_call_injects_services_and_parameters(self):
        container = Container()
        container.singleton(Cache, MemoryCache)
        container.get(Cache).items["user:1"] = "alice"

        def lookup(cache: Cache, key: str):
            return cache.get(key)

        assert container.call(lookup, {"key": "user:1"}) == "alice"


class TestParameterLayer:
    """Test parameter bags working against a live container."""

    def test_container_bag_dereferences_services(self):
        container = Container()
        container.singleton(Cache, MemoryCache)
        bag = ContainerBag({"cache": f"@{Cache.__module__}.Cache", "size": "%page%", "page": 10})
        bag.set_container(container)

        assert bag.get("cache") is container.get(Cache)
        assert bag.get("size") == 10

    def test_typed_access_after_environment_switch(self):
        bag = ContainerBag({"db.port": "5432", "debug": "off"})
        bag.set_environment_parameters("dev", {"debug": "on"})

        assert bag.resolve("debug", "bool") is False
        bag.load_environment("dev")
        assert bag.resolve("debug", "bool") is True
        assert bag.resolve("db.port", "int") == 5432

    def test_copy_between_bags(self):
        source = ParameterBag({"a": 1, "b": "two"})
        target = ContainerBag().import_from(source, {"a": "alpha"})
        assert target.all() == {"alpha": 1}


class TestConcurrency:
    """Test resolution from several threads."""

    def test_singleton_is_built_once(self):
        container = Container()
        built = []

        def factory(c):
            built.append(1)
            return MemoryCache()

        container.singleton(Cache, factory)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(container.get(Cache))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(built) == 1
        assert all(result is results[0] for result in results)
        assert len(results) == 8
