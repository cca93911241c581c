import pytest

from designflow.application.messages import MessageCatalog
from designflow.bootstrap import build_controller, container
from designflow.config import settings
from designflow.infrastructure import hosted
from designflow.infrastructure.event_bus import redis_pubsub
from designflow.interfaces.providers.registry import ProviderRegistry


def test_container_resolves_singleton_record_store():
    first = container.resolve_record_store("memory")
    second = container.resolve_record_store("memory")
    assert first is second
    assert first.change_feed is container.resolve_change_feed()


def test_registry_rejects_duplicates_and_unknown_keys():
    registry: ProviderRegistry[object] = ProviderRegistry()
    registry.register("memory", object)

    with pytest.raises(ValueError):
        registry.register("memory", object)
    with pytest.raises(KeyError):
        registry.resolve("sqlite")

    first = registry.resolve("memory")
    registry.reset()
    assert registry.resolve("memory") is not first


def test_build_controller_uses_configured_backends():
    controller = build_controller("revision", record_store="memory", object_storage="memory")

    assert controller.view.key == "revision"
    assert controller.bucket == "hasil_desain"
    assert controller.store is container.resolve_record_store("memory")
    assert controller.storage is container.resolve_object_storage("memory")


def test_build_controller_rejects_unknown_view():
    with pytest.raises(KeyError):
        build_controller("archive")


def test_message_catalog_falls_back_to_default_locale():
    assert MessageCatalog("en").title("completed") == "Completed Designs"
    assert MessageCatalog("fr").get("fetch_failed") == "Gagal memuat data desain."
    assert MessageCatalog("en").get("no.such.key") == "no.such.key"


def test_adapters_read_configuration_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "BACKEND_URL", "https://backend.example.com/")
    monkeypatch.setattr(settings, "BACKEND_TIMEOUT_SECONDS", 5.0)
    monkeypatch.setattr(settings, "CHANGE_FEED_CHANNEL_PREFIX", "designflow")
    monkeypatch.setattr(settings, "CHANGE_FEED_POLL_SECONDS", 0.25)

    backend = hosted.from_env()
    feed = redis_pubsub.from_env()

    assert backend.base_url == "https://backend.example.com"
    assert backend.timeout == 5.0
    assert feed.channel_prefix == "designflow"
    assert feed.poll_timeout == 0.25
