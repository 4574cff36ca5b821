"""Unit tests for djgrid.registries."""

from __future__ import annotations

import time
from threading import Thread
from typing import Optional

import kgb
from importlib_metadata import EntryPoint

from djgrid.registries import registry as registry_module
from djgrid.registries.errors import (AlreadyRegisteredError,
                                      ItemLookupError,
                                      RegistrationError)
from djgrid.registries.registry import (EntryPointRegistry,
                                        NOT_REGISTERED,
                                        Registry,
                                        RegistryState,
                                        UNREGISTER)
from djgrid.registries.signals import registry_populating
from djgrid.testing.testcases import TestCase


class Plugin:
    """A registrable item with an ID and an optional label."""

    def __init__(
        self,
        plugin_id: Optional[str] = None,
        label: str = '',
    ) -> None:
        if plugin_id is not None:
            self.plugin_id = plugin_id

        self.label = label

    def __repr__(self) -> str:
        return '<Plugin(%s)>' % getattr(self, 'plugin_id', '?')


class PluginRegistry(Registry[Plugin]):
    lookup_attrs = ('plugin_id',)


class SamplePlugin(Plugin):
    """A plugin loaded through an entry point in tests."""

    def __init__(self):
        super().__init__('sample')


class PluginEntryPointRegistry(EntryPointRegistry[Plugin]):
    entry_point = 'djgrid.test_plugins'
    lookup_attrs = ('plugin_id',)

    def process_value_from_entry_point(self, entry_point):
        return entry_point.load()()


class RegistryTests(kgb.SpyAgency, TestCase):
    """Unit tests for djgrid.registries.registry.Registry."""

    def test_init(self):
        """Testing Registry starts out empty and pending"""
        registry = PluginRegistry()

        self.assertEqual(registry.state, RegistryState.PENDING)
        self.assertEqual(len(registry), 0)
        self.assertEqual(list(registry), [])
        self.assertEqual(registry.state, RegistryState.READY)

    def test_register_and_get(self):
        """Testing Registry.register and Registry.get"""
        registry = PluginRegistry()
        plugin = Plugin('csv')

        registry.register(plugin)

        self.assertIs(registry.get('plugin_id', 'csv'), plugin)
        self.assertIn(plugin, registry)
        self.assertEqual(len(registry), 1)

    def test_get_with_unknown_value(self):
        """Testing Registry.get with an unregistered lookup value"""
        registry = PluginRegistry()

        with self.assertRaisesMessage(
                ItemLookupError,
                'No item is registered with plugin_id = json.'):
            registry.get('plugin_id', 'json')

    def test_get_with_unknown_attribute(self):
        """Testing Registry.get with an attribute that isn't indexed"""
        registry = PluginRegistry()
        registry.register(Plugin('csv', label='CSV'))

        with self.assertRaisesMessage(
                ItemLookupError,
                'Items cannot be looked up by "label".'):
            registry.get('label', 'CSV')

    def test_get_or_none(self):
        """Testing Registry.get_or_none"""
        registry = PluginRegistry()
        plugin = Plugin('csv')
        registry.register(plugin)

        self.assertIs(registry.get_or_none('plugin_id', 'csv'), plugin)
        self.assertIsNone(registry.get_or_none('plugin_id', 'json'))
        self.assertIsNone(registry.get_or_none('label', ''))

    def test_register_twice(self):
        """Testing Registry.register with an already-registered item"""
        registry = PluginRegistry()
        plugin = Plugin('csv')
        registry.register(plugin)

        with self.assertRaises(AlreadyRegisteredError):
            registry.register(plugin)

    def test_register_with_duplicate_lookup_value(self):
        """Testing Registry.register with a lookup value already in use"""
        registry = PluginRegistry()
        original = Plugin('csv', label='first')
        registry.register(original)

        with self.assertRaises(AlreadyRegisteredError):
            registry.register(Plugin('csv', label='second'))

        self.assertIs(registry.get('plugin_id', 'csv'), original)
        self.assertEqual(len(registry), 1)

    def test_register_without_lookup_attribute(self):
        """Testing Registry.register with an item missing a lookup
        attribute
        """
        registry = PluginRegistry()

        with self.assertRaisesMessage(
                RegistrationError,
                'has no "plugin_id" attribute.'):
            registry.register(Plugin())

        self.assertEqual(len(registry), 0)

    def test_unregister(self):
        """Testing Registry.unregister removes the item and its lookups"""
        registry = PluginRegistry()
        plugins = [Plugin('csv'), Plugin('json')]

        for plugin in plugins:
            registry.register(plugin)

        registry.unregister(plugins[0])

        self.assertNotIn(plugins[0], registry)
        self.assertIsNone(registry.get_or_none('plugin_id', 'csv'))
        self.assertIs(registry.get('plugin_id', 'json'), plugins[1])

        # The lookup value can be reused.
        registry.register(Plugin('csv'))

    def test_unregister_unknown(self):
        """Testing Registry.unregister with an unregistered item"""
        with self.assertRaisesMessage(ItemLookupError,
                                      'it is not registered.'):
            PluginRegistry().unregister(Plugin('csv'))

    def test_populate(self):
        """Testing Registry.populate loads the default items once"""
        defaults = [Plugin('csv'), Plugin('json')]

        class DefaultsRegistry(PluginRegistry):
            def get_defaults(self):
                yield from defaults

        registry = DefaultsRegistry()
        self.spy_on(registry.get_defaults)
        self.spy_on(registry_populating.send)

        registry.populate()
        registry.populate()

        self.assertEqual(registry.state, RegistryState.READY)
        self.assertEqual(set(registry), set(defaults))
        self.assertSpyCallCount(registry.get_defaults, 1)
        self.assertSpyCalledWith(registry_populating.send,
                                 sender=DefaultsRegistry,
                                 registry=registry)

    def test_populate_on_register(self):
        """Testing Registry.register loads the default items first"""
        class DefaultsRegistry(PluginRegistry):
            def get_defaults(self):
                yield Plugin('csv')

        registry = DefaultsRegistry()

        with self.assertRaises(AlreadyRegisteredError):
            registry.register(Plugin('csv'))

    def test_populate_from_threads(self):
        """Testing Registry.populate from multiple threads"""
        calls = []

        class SlowRegistry(PluginRegistry):
            def get_defaults(self):
                calls.append(1)
                time.sleep(0.1)

                yield Plugin('csv')

        registry = SlowRegistry()
        threads = [
            Thread(target=registry.populate)
            for i in range(3)
        ]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

        self.assertEqual(calls, [1])
        self.assertEqual(len(registry), 1)

    def test_reset(self):
        """Testing Registry.reset"""
        class DefaultsRegistry(PluginRegistry):
            def get_defaults(self):
                yield Plugin('csv')

        registry = DefaultsRegistry()
        registry.register(Plugin('json'))

        registry.reset()

        self.assertEqual(registry.state, RegistryState.PENDING)
        self.assertEqual(registry._registry, {'plugin_id': {}})

        # The defaults come back on next use, but added items don't.
        self.assertIsNotNone(registry.get_or_none('plugin_id', 'csv'))
        self.assertIsNone(registry.get_or_none('plugin_id', 'json'))

    def test_error_overrides(self):
        """Testing Registry.errors overrides the default messages"""
        class CustomRegistry(PluginRegistry):
            errors = {
                NOT_REGISTERED: 'There is no plugin "%(attr_value)s".',
                UNREGISTER: '%(item)r was never added.',
            }

        registry = CustomRegistry()

        with self.assertRaisesMessage(ItemLookupError,
                                      'There is no plugin "csv".'):
            registry.get('plugin_id', 'csv')

        with self.assertRaisesMessage(ItemLookupError,
                                      '<Plugin(csv)> was never added.'):
            registry.unregister(Plugin('csv'))

    def test_format_error_unknown(self):
        """Testing Registry.format_error with an unknown error code"""
        with self.assertRaises(ValueError):
            PluginRegistry().format_error('bogus')


class EntryPointRegistryTests(kgb.SpyAgency, TestCase):
    """Unit tests for djgrid.registries.registry.EntryPointRegistry."""

    def test_without_entry_point(self):
        """Testing EntryPointRegistry without an entry point group"""
        self.assertEqual(len(EntryPointRegistry()), 0)

    def test_loads_entry_points(self):
        """Testing EntryPointRegistry loads items from its group"""
        def _entry_points(**params):
            self.assertEqual(params, {'group': 'djgrid.test_plugins'})

            return [
                EntryPoint(name='sample',
                           value='djgrid.registries.tests:SamplePlugin',
                           group='djgrid.test_plugins'),
            ]

        self.spy_on(registry_module.entry_points, call_fake=_entry_points)

        registry = PluginEntryPointRegistry()

        self.assertIsInstance(registry.get('plugin_id', 'sample'),
                              SamplePlugin)

    def test_skips_broken_entry_points(self):
        """Testing EntryPointRegistry logs and skips entry points that fail
        to load
        """
        def _entry_points(**params):
            return [
                EntryPoint(name='broken',
                           value='djgrid.registries.tests:MissingPlugin',
                           group='djgrid.test_plugins'),
                EntryPoint(name='sample',
                           value='djgrid.registries.tests:SamplePlugin',
                           group='djgrid.test_plugins'),
            ]

        self.spy_on(registry_module.entry_points, call_fake=_entry_points)
        self.spy_on(registry_module.logger.exception)

        registry = PluginEntryPointRegistry()

        self.assertEqual(len(registry), 1)
        self.assertSpyCallCount(registry_module.logger.exception, 1)
        self.assertIn('Failed to load entry point broken',
                      registry_module.logger.exception.last_call.args[0])
