"""Unit tests for ContextualBindingBuilder."""

import pytest

from element_di.application.container import Container
from element_di.application.contextual_binding import ContextualBindingBuilder
from element_di.domain import ContainerError


class Storage:
    pass


class LocalStorage(Storage):
    pass


class S3Storage(Storage):
    pass


class ReportController:
    def __init__(self, storage: Storage):
        self.storage = storage


class TestContextualBindingBuilder:
    """Test cases for the when/needs/give chain."""

    def test_give_registers_transient_binding(self):
        container = Container()
        returned = ContextualBindingBuilder(container, ReportController).needs(Storage).give(LocalStorage)

        key = ContextualBindingBuilder.binding_key_for(ReportController, Storage)
        assert returned is container
        assert isinstance(container.get(key), LocalStorage)
        assert container.get(key) is not container.get(key)

    def test_give_singleton_registers_shared_binding(self):
        container = Container()
        container.when("reports").needs("storage").give_singleton(S3Storage)

        assert container.get("reports::storage") is container.get("reports::storage")

    def test_give_tagged_behaves_like_give(self):
        container = Container()
        container.when("reports").needs("storage").give_tagged(LocalStorage)
        assert not container.get_contextual_binding("reports", "storage").shared

    def test_give_before_needs_raises(self):
        builder = Container().when(ReportController)
        with pytest.raises(ContainerError, match="needs must be defined before giving"):
            builder.give(LocalStorage)

    def test_give_singleton_before_needs_raises(self):
        with pytest.raises(ContainerError):
            Container().when(ReportController).give_singleton(LocalStorage)

    def test_later_needs_replaces_earlier(self):
        container = Container()
        builder = container.when("reports").needs("first").needs("second")
        assert builder.pending_abstract == "second"

        builder.give(LocalStorage)
        assert "reports::second" in container.get_bindings()
        assert "reports::first" not in container.get_bindings()

    def test_concrete_is_normalized(self):
        builder = Container().when(ReportController)
        assert builder.concrete == f"{__name__}.ReportController"
        assert builder.pending_abstract is None

    def test_binding_key_uses_separator(self):
        assert ContextualBindingBuilder.binding_key_for("a", "b") == "a::b"
