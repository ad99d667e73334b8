"""
Unit tests for the event bus and the UI event contract.
"""

import json
from unittest.mock import Mock

import pytest

from iconsync.connectors.github import GitHubContentsPublisher
from iconsync.connectors.test_connector import ContentsTestConnector
from iconsync.core.exceptions import ConfigError
from iconsync.core.models import SyncSettings
from iconsync.events import BUSY_MESSAGE, EventBus, EventName, SyncEventHandlers, coerce_settings
from iconsync.config import SyncConfig
from iconsync.runner import SyncOrchestrator, build_orchestrator
from iconsync.scene import StaticSceneProvider
from iconsync.settings import InMemorySettingsCache

from conftest import VALID_TOKEN


REPLY_EVENTS = [
    EventName.SYNC_PROGRESS,
    EventName.SYNC_TO_GITHUB_RESULT,
    EventName.MANIFEST_DATA,
    EventName.MANIFEST_ERROR,
    EventName.CACHED_SETTINGS_RESULT,
]


def record(bus):
    """Capture every reply event as (name, args) in emission order."""
    events = []
    for name in REPLY_EVENTS:
        bus.on(name, lambda *args, _name=name: events.append((_name, args)))
    return events


def wire(scene_provider, connector=None, cache=None):
    bus = EventBus()
    connector = connector or ContentsTestConnector()
    cache = cache or InMemorySettingsCache()

    def factory(progress):
        return SyncOrchestrator(
            scene_provider=scene_provider,
            publisher=GitHubContentsPublisher(connector=connector),
            progress=progress,
        )

    handlers = SyncEventHandlers(bus, factory, cache).register()
    return bus, handlers, cache


class TestEventBus:
    """Tests for EventBus."""

    def test_registration_order(self):
        bus = EventBus()
        calls = []
        bus.on(EventName.SYNC_PROGRESS, lambda m: calls.append(("first", m)))
        bus.on(EventName.SYNC_PROGRESS, lambda m: calls.append(("second", m)))

        assert bus.emit(EventName.SYNC_PROGRESS, "hello") == 2
        assert calls == [("first", "hello"), ("second", "hello")]

    def test_string_and_enum_names_match(self):
        bus = EventBus()
        calls = []
        bus.on("SYNC_PROGRESS", calls.append)

        bus.emit(EventName.SYNC_PROGRESS, "x")

        assert calls == ["x"]

    def test_unsubscribe(self):
        bus = EventBus()
        calls = []
        unsubscribe = bus.on(EventName.SYNC_PROGRESS, calls.append)

        unsubscribe()

        assert bus.emit(EventName.SYNC_PROGRESS, "x") == 0
        assert calls == []

    def test_failing_listener_isolated(self):
        bus = EventBus()
        calls = []
        bus.on(EventName.SYNC_PROGRESS, Mock(side_effect=RuntimeError("ui gone")))
        bus.on(EventName.SYNC_PROGRESS, calls.append)

        bus.emit(EventName.SYNC_PROGRESS, "x")

        assert calls == ["x"]


class TestCoerceSettings:
    """Tests for coerce_settings."""

    def test_dict_payload(self):
        settings = coerce_settings({"githubRepo": "acme/icons", "githubToken": VALID_TOKEN})
        assert settings == SyncSettings(repository="acme/icons", access_token=VALID_TOKEN)

    def test_unsupported_payload(self):
        with pytest.raises(TypeError):
            coerce_settings("acme/icons")


class TestSyncToGithub:
    """Tests for the SYNC_TO_GITHUB request."""

    def test_progress_then_result(self, sample_page, sync_settings):
        bus, handlers, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        assert events == [
            (EventName.SYNC_PROGRESS, ("Extracting icons from Figma...",)),
            (EventName.SYNC_PROGRESS, ("Syncing 4 icons to GitHub...",)),
            (EventName.SYNC_PROGRESS, ("Uploading to GitHub...",)),
            (EventName.SYNC_TO_GITHUB_RESULT, (True, "Sync successful!")),
        ]
        assert handlers.last_result.success is True
        assert handlers.busy is False

    def test_settings_saved(self, sample_page, sync_settings):
        bus, handlers, cache = wire(StaticSceneProvider(sample_page))

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)
        handlers.last_save.join(5)

        assert cache.load() == sync_settings

    def test_dict_settings(self, sample_page):
        bus, _, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, {"githubRepo": "test-owner/test-repo", "githubToken": VALID_TOKEN})

        assert events[-1] == (EventName.SYNC_TO_GITHUB_RESULT, (True, "Sync successful!"))

    def test_failure_result(self, sample_page):
        bus, _, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, SyncSettings(repository="not-a-repo", access_token=VALID_TOKEN))

        results = [args for name, args in events if name == EventName.SYNC_TO_GITHUB_RESULT]
        assert results == [(False, "Invalid GitHub repository format. Use owner/repo format.")]

    def test_overlapping_sync_refused(self, sample_page, sync_settings):
        bus, handlers, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)
        reentered = []

        def reenter(message):
            if not reentered:
                reentered.append(message)
                bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        bus.on(EventName.SYNC_PROGRESS, reenter)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        results = [args for name, args in events if name == EventName.SYNC_TO_GITHUB_RESULT]
        assert results == [(False, BUSY_MESSAGE), (True, "Sync successful!")]
        assert handlers.busy is False

    def test_factory_failure_still_answers(self, sync_settings):
        bus = EventBus()
        factory = Mock(side_effect=RuntimeError("factory broke"))
        handlers = SyncEventHandlers(bus, factory, InMemorySettingsCache()).register()
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        assert events == [(EventName.SYNC_TO_GITHUB_RESULT, (False, "factory broke"))]
        assert handlers.busy is False
        assert handlers.last_result is None

    def test_config_error_message_reported(self, sync_settings):
        bus = EventBus()
        factory = Mock(side_effect=ConfigError("Config section 'extraction' must be a mapping"))
        SyncEventHandlers(bus, factory, InMemorySettingsCache()).register()
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        assert events == [
            (EventName.SYNC_TO_GITHUB_RESULT, (False, "Config section 'extraction' must be a mapping")),
        ]

    def test_save_failure_still_answers(self, sample_page, sync_settings):
        cache = Mock()
        cache.save.side_effect = OSError("disk full")
        bus, handlers, _ = wire(StaticSceneProvider(sample_page), cache=cache)
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)
        handlers.last_save.join(5)

        results = [args for name, args in events if name == EventName.SYNC_TO_GITHUB_RESULT]
        assert results == [(True, "Sync successful!")]

    def test_save_dispatch_failure_still_answers(self, sample_page, sync_settings, monkeypatch):
        monkeypatch.setattr(
            "iconsync.events.handlers.dispatch_save",
            Mock(side_effect=RuntimeError("can't start new thread")),
        )
        bus, handlers, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        assert events == [(EventName.SYNC_TO_GITHUB_RESULT, (False, "can't start new thread"))]
        assert handlers.busy is False

    def test_unsupported_payload_answered(self, sample_page):
        bus, handlers, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, "acme/icons")

        assert events == [(EventName.SYNC_TO_GITHUB_RESULT, (False, "Unsupported settings payload: str"))]
        assert handlers.busy is False

    def test_usable_after_failure(self, sample_page, sync_settings):
        bus = EventBus()
        scene = StaticSceneProvider(sample_page)
        calls = []

        def factory(progress):
            calls.append(progress)
            if len(calls) == 1:
                raise RuntimeError("factory broke")
            return SyncOrchestrator(
                scene_provider=scene,
                publisher=GitHubContentsPublisher(connector=ContentsTestConnector()),
                progress=progress,
            )

        SyncEventHandlers(bus, factory, InMemorySettingsCache()).register()
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)
        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)

        results = [args for name, args in events if name == EventName.SYNC_TO_GITHUB_RESULT]
        assert results == [(False, "factory broke"), (True, "Sync successful!")]


class TestDownloadManifest:
    """Tests for the DOWNLOAD_MANIFEST request."""

    def test_manifest_data(self, sample_page):
        connector = ContentsTestConnector()
        bus, _, _ = wire(StaticSceneProvider(sample_page), connector=connector)
        events = record(bus)

        bus.emit(EventName.DOWNLOAD_MANIFEST)

        name, args = events[-1]
        assert name == EventName.MANIFEST_DATA
        data = json.loads(args[0])
        assert [group["name"] for group in data["groups"]] == ["Arrows", "Misc", "Empty Set"]
        assert EventName.MANIFEST_ERROR not in [n for n, _ in events]
        assert connector.request_history == []

    def test_error_reported(self):
        provider = Mock()
        provider.get_current_page.side_effect = ConfigError("Scene document not found: icons.json")
        bus, _, _ = wire(provider)
        events = record(bus)

        bus.emit(EventName.DOWNLOAD_MANIFEST)

        assert events[-2:] == [
            (EventName.SYNC_PROGRESS, ("Error: Scene document not found: icons.json",)),
            (EventName.MANIFEST_ERROR, ("Scene document not found: icons.json",)),
        ]
        assert EventName.MANIFEST_DATA not in [n for n, _ in events]

    def test_factory_failure_reported(self):
        bus = EventBus()
        factory = Mock(side_effect=RuntimeError("factory broke"))
        handlers = SyncEventHandlers(bus, factory, InMemorySettingsCache()).register()
        events = record(bus)

        bus.emit(EventName.DOWNLOAD_MANIFEST)

        assert events == [
            (EventName.SYNC_PROGRESS, ("Error: factory broke",)),
            (EventName.MANIFEST_ERROR, ("factory broke",)),
        ]
        assert handlers.busy is False

    def test_exception_without_message(self):
        bus = EventBus()
        SyncEventHandlers(bus, Mock(side_effect=RuntimeError()), InMemorySettingsCache()).register()
        events = record(bus)

        bus.emit(EventName.DOWNLOAD_MANIFEST)

        assert events[-1] == (EventName.MANIFEST_ERROR, ("Unknown error occurred",))


class TestSettingsEvents:
    """Tests for GET_CACHED_SETTINGS and SAVE_SETTINGS."""

    def test_get_empty(self, sample_page):
        bus, _, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.GET_CACHED_SETTINGS)

        assert events == [(EventName.CACHED_SETTINGS_RESULT, (None,))]

    def test_save_then_get(self, sample_page, sync_settings):
        bus, handlers, _ = wire(StaticSceneProvider(sample_page))
        events = record(bus)

        bus.emit(EventName.SAVE_SETTINGS, sync_settings)
        handlers.last_save.join(5)
        bus.emit(EventName.GET_CACHED_SETTINGS)

        assert events == [(EventName.CACHED_SETTINGS_RESULT, (sync_settings,))]


class TestConfiguredWiring:
    """Handlers wired through build_orchestrator and a YAML config."""

    def _wire(self, tmp_path, yaml_text, sample_page):
        path = tmp_path / "config.yaml"
        path.write_text(yaml_text, encoding="utf-8")
        config = SyncConfig(path)
        bus = EventBus()
        connector = ContentsTestConnector()

        def factory(progress):
            return build_orchestrator(
                config, StaticSceneProvider(sample_page), connector=connector, progress=progress
            )

        SyncEventHandlers(bus, factory, InMemorySettingsCache()).register()
        return bus, connector

    def test_empty_sections_keep_defaults(self, tmp_path, sample_page, sync_settings):
        bus, connector = self._wire(tmp_path, "github:\nextraction:\n", sample_page)
        events = record(bus)

        bus.emit(EventName.SYNC_TO_GITHUB, sync_settings)
        bus.emit(EventName.DOWNLOAD_MANIFEST)

        terminal = [(name, args) for name, args in events if name != EventName.SYNC_PROGRESS]
        assert [name for name, _ in terminal] == [EventName.SYNC_TO_GITHUB_RESULT, EventName.MANIFEST_DATA]
        assert terminal[0][1] == (True, "Sync successful!")
        assert connector.read_text("test-owner/test-repo", "figma-icons-manifest.json") is not None
