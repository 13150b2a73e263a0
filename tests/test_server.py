"""Tests for roost.server: resolving registrations to mounts."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from roost.application import DEFAULT_ROUTING, Application, application_path, routing_name
from roost.config import DEFAULT_LISTENER, ListenerConfig, ServerConfig
from roost.errors import ConfigurationError
from roost.registration import ApplicationRegistration
from roost.resources import ResourceConfig
from roost.server import Mount, Server, ServerBuilder


class ItemResource:
    pass


@application_path("/shop")
class ShopApp(Application):
    def classes(self):
        return {ItemResource}


@application_path("/admin")
@routing_name("admin", required=True)
class AdminApp(Application):
    pass


@application_path("/status")
@routing_name("metrics")
class StatusApp(Application):
    pass


@routing_name(DEFAULT_ROUTING, required=True)
class DefaultRoutedApp(Application):
    pass


ADMIN = ServerConfig(listeners=(ListenerConfig("admin", port=8081),))


@pytest.fixture
def pool():
    executor = ThreadPoolExecutor(max_workers=1)
    yield executor
    executor.shutdown()


class TestAddApplication:
    def test_class(self) -> None:
        server = ServerBuilder().add_application(ShopApp).build()

        (mount,) = server.mounts
        assert mount.listener == DEFAULT_LISTENER
        assert mount.context_root == "/shop"
        assert mount.app_class_name == f"{__name__}.ShopApp"

    def test_instance(self) -> None:
        app = ShopApp()
        server = ServerBuilder().add_application(app).build()

        assert server.mounts[0].resource_config.application is app

    def test_resource_config(self) -> None:
        config = ResourceConfig(ItemResource)
        server = ServerBuilder().add_application(config, context_root="/items").build()

        assert server.mounts[0].resource_config is config
        assert server.mounts[0].context_root == "/items"

    def test_registration(self) -> None:
        reg = ApplicationRegistration.create(ShopApp)
        server = ServerBuilder().add_application(reg).build()

        assert server.mounts[0].resource_config is reg.resource_config

    def test_context_root_override_on_class(self) -> None:
        server = ServerBuilder().add_application(ShopApp, context_root="/store").build()
        assert server.mounts[0].context_root == "/store"

    def test_context_root_override_on_registration(self) -> None:
        reg = ApplicationRegistration.create(ShopApp)
        server = ServerBuilder().add_application(reg, context_root="/store").build()

        assert server.mounts[0].context_root == "/store"
        assert reg.context_root == "/shop"

    def test_order_preserved(self) -> None:
        server = (
            ServerBuilder(ADMIN)
            .add_application(ShopApp)
            .add_application(AdminApp)
            .build()
        )
        assert [m.context_root for m in server.mounts] == ["/shop", "/admin"]

    def test_empty_server(self) -> None:
        server = ServerBuilder().build()

        assert server.mounts == ()
        assert server.config == ServerConfig()


class TestListenerResolution:
    def test_named_listener(self) -> None:
        server = ServerBuilder(ADMIN).add_application(AdminApp).build()

        assert server.mounts[0].listener == "admin"
        assert server.mounts_for("admin") == server.mounts
        assert server.mounts_for(DEFAULT_LISTENER) == ()

    def test_required_listener_missing(self) -> None:
        builder = ServerBuilder().add_application(AdminApp)

        with pytest.raises(ConfigurationError, match="requires listener 'admin'"):
            builder.build()

    def test_optional_listener_missing_falls_back(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="roost.server"):
            server = ServerBuilder().add_application(StatusApp).build()

        assert server.mounts[0].listener == DEFAULT_LISTENER
        assert "metrics" in caplog.text
        assert "default listener" in caplog.text

    def test_default_routing_name(self) -> None:
        server = ServerBuilder().add_application(DefaultRoutedApp).build()
        assert server.mounts[0].listener == DEFAULT_LISTENER

    def test_explicit_routing_overrides_metadata(self) -> None:
        reg = (
            ApplicationRegistration.builder()
            .application_class(AdminApp)
            .routing_name(DEFAULT_ROUTING)
            .build()
        )
        server = ServerBuilder().add_application(reg).build()

        assert server.mounts[0].listener == DEFAULT_LISTENER


class TestDuplicates:
    def test_same_root_same_listener(self) -> None:
        builder = (
            ServerBuilder()
            .add_application(ShopApp)
            .add_application(ResourceConfig(), context_root="/shop")
        )
        with pytest.raises(ConfigurationError, match="both mounted on '/shop'"):
            builder.build()

    def test_same_root_different_listeners(self) -> None:
        server = (
            ServerBuilder(ADMIN)
            .add_application(AdminApp, context_root="/")
            .add_application(ShopApp, context_root="/")
            .build()
        )
        assert {m.listener for m in server.mounts} == {"admin", DEFAULT_LISTENER}


class TestExecutors:
    def test_registration_executor(self, pool) -> None:
        reg = ApplicationRegistration.builder().application_class(ShopApp).executor(pool).build()
        server = ServerBuilder().add_application(reg).build()

        assert server.mounts[0].executor is pool

    def test_server_default(self, pool) -> None:
        server = ServerBuilder().default_executor(pool).add_application(ShopApp).build()
        assert server.mounts[0].executor is pool

    def test_registration_wins_over_default(self, pool) -> None:
        with ThreadPoolExecutor(max_workers=1) as other:
            reg = (
                ApplicationRegistration.builder()
                .application_class(ShopApp)
                .executor(other)
                .build()
            )
            server = ServerBuilder().default_executor(pool).add_application(reg).build()

            assert server.mounts[0].executor is other

    def test_none_without_default(self) -> None:
        server = ServerBuilder().add_application(ShopApp).build()
        assert server.mounts[0].executor is None

    def test_shared_executor(self, pool) -> None:
        server = (
            ServerBuilder(ADMIN)
            .default_executor(pool)
            .add_application(ShopApp)
            .add_application(AdminApp)
            .build()
        )
        assert all(m.executor is pool for m in server.mounts)
        assert pool.submit(lambda: "alive").result() == "alive"


class TestFreezing:
    def test_descriptors_frozen(self) -> None:
        server = ServerBuilder().add_application(ShopApp).build()
        config = server.mounts[0].resource_config

        assert config.frozen is True
        assert config.classes() == {ItemResource}

    def test_frozen_descriptor_rejects_changes(self) -> None:
        config = ResourceConfig()
        ServerBuilder().add_application(config).build()

        with pytest.raises(ConfigurationError):
            config.register(ItemResource)


class TestFailedBuild:
    def test_missing_listener_leaves_descriptors_unfrozen(self) -> None:
        first = ResourceConfig(name="first")
        builder = ServerBuilder().add_application(first).add_application(AdminApp)

        with pytest.raises(ConfigurationError):
            builder.build()

        assert first.frozen is False
        first.register(ItemResource)
        assert first.classes() == {ItemResource}

    def test_duplicate_root_leaves_descriptors_unfrozen(self) -> None:
        first = ResourceConfig(name="first")
        second = ResourceConfig(name="second")
        builder = (
            ServerBuilder()
            .add_application(first, context_root="/x")
            .add_application(second, context_root="/x")
        )

        with pytest.raises(ConfigurationError):
            builder.build()

        assert first.frozen is False
        assert second.frozen is False

    def test_unconstructible_class_leaves_descriptors_unfrozen(self) -> None:
        class NeedsArgsApp(Application):
            def __init__(self, db: str) -> None:
                self.db = db

        first = ResourceConfig(name="first")
        builder = (
            ServerBuilder()
            .add_application(first)
            .add_application(NeedsArgsApp, context_root="/db")
        )

        with pytest.raises(ConfigurationError, match="NeedsArgsApp"):
            builder.build()

        assert first.frozen is False

    def test_build_again_after_fixing_config(self) -> None:
        first = ResourceConfig(name="first")
        with pytest.raises(ConfigurationError):
            ServerBuilder().add_application(first).add_application(AdminApp).build()

        server = ServerBuilder(ADMIN).add_application(first).add_application(AdminApp).build()

        assert [m.listener for m in server.mounts] == [DEFAULT_LISTENER, "admin"]
        assert first.frozen is True


class TestResourceConfigSubclass:
    def test_providers_survive_mounting(self) -> None:
        class Store:
            pass

        class ProvidingConfig(ResourceConfig):
            def __init__(self) -> None:
                super().__init__(ItemResource)
                self.provide(Store, Store)

        server = ServerBuilder().add_application(ProvidingConfig).build()
        config = server.mounts[0].resource_config

        assert config.providers == {Store: Store}
        assert config.classes() == {ItemResource}


class TestServer:
    def test_builder_factory(self) -> None:
        assert isinstance(Server.builder(ADMIN), ServerBuilder)

    def test_mount_frozen(self) -> None:
        mount = Mount(listener=DEFAULT_LISTENER, context_root="/", resource_config=ResourceConfig())

        with pytest.raises(AttributeError):
            mount.context_root = "/x"  # type: ignore[misc]

    def test_debug_logging(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="roost.server"):
            ServerBuilder().add_application(ShopApp).build()

        assert "Mounted" in caplog.text
        assert "/shop" in caplog.text
