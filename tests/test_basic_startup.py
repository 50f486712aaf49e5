"""
Basic startup test to verify the metrics wiring works end to end.
"""

import pytest
import yaml

from appmetrics.health import HealthCheckRegistry
from appmetrics.metrics import MetricRegistry, TimeUnit
from appmetrics.orchestration import DEFAULT_CONFIGURATIONS, MetricsApplicationContext
from appmetrics.reporting import JmxReporter
from appmetrics.utils.beans import bean
from appmetrics.utils.config_validator import ConfigurationError
from appmetrics.web import HealthCheckServlet, MetricsServlet, ServingContextListener


def create_test_config():
    """Create a minimal test configuration."""
    return {
        'metrics': {
            'registry_name': '',
            'runtime_prefix': 'python',
            'report': {
                'jmx': True,
                'rate_unit': 'seconds',
                'duration_unit': 'milliseconds',
            },
            'filter': {
                'include': [],
                'exclude': [],
            },
        }
    }


def gauge_names(server, domain='metrics'):
    return [n.get('name') for n in server.query_names(domain=domain, type='gauges')]


class BrokenConfiguration:
    """A configuration unit whose only bean cannot be created."""

    @bean()
    def broken(self):
        raise RuntimeError('broken bean')


class BrokenListener(ServingContextListener):
    def context_initialized(self, event):
        raise RuntimeError('broken listener')


class BrokenListenerConfiguration:
    """A configuration unit whose listener fails on startup."""

    @bean()
    def broken_listener(self):
        return BrokenListener()


class TestBasicStartup:
    """Test complete startup with the default configuration units."""

    def test_startup_publishes_registries(self, server):
        """Test that both registries reach the serving context."""
        context = MetricsApplicationContext(create_test_config(), management_server=server)
        context.refresh()

        serving = context.serving_context
        registry = serving.get_attribute(MetricsServlet.METRICS_REGISTRY)
        health_checks = serving.get_attribute(HealthCheckServlet.HEALTH_CHECK_REGISTRY)

        assert registry is context.get_bean('registry')
        assert isinstance(registry, MetricRegistry)
        assert 'python.memory.rss' in registry
        assert isinstance(health_checks, HealthCheckRegistry)
        assert len(health_checks) == 0
        assert serving.initialized

        context.close()
        assert not serving.initialized

    def test_reporter_publishes_runtime_metrics(self, server):
        """Test that the reporter exposes the runtime gauges."""
        with MetricsApplicationContext(create_test_config(), management_server=server) as context:
            reporter = context.get_bean_of_type(JmxReporter)
            assert reporter.is_started

            names = gauge_names(server)
            assert 'python.gc.gen0.collections' in names
            assert 'python.memory.rss' in names
            assert server.get_attribute(
                'metrics:name=python.memory.rss,type=gauges', 'value'
            ) > 0

    def test_filter_excludes_metrics_from_reporter_only(self, server):
        """Test that excluded metrics stay registered but are not published."""
        config = create_test_config()
        config['metrics']['filter']['exclude'] = ['python.gc']

        with MetricsApplicationContext(config, management_server=server) as context:
            assert 'python.gc.gen0.collections' in context.get_bean('registry')
            names = gauge_names(server)
            assert names
            assert not any(name.startswith('python.gc.') for name in names)

    def test_health_checks_added_while_running(self, server):
        """Test that checks can be registered without touching the reporter."""
        with MetricsApplicationContext(create_test_config(), management_server=server) as context:
            reporter = context.get_bean('register_jmx_reporter')
            published = dict(reporter.object_names())

            health_checks = context.serving_context.get_attribute(
                HealthCheckServlet.HEALTH_CHECK_REGISTRY
            )
            health_checks.register('database', lambda: True)

            assert health_checks.run_health_checks()['database'].healthy
            assert context.get_bean('register_jmx_reporter') is reporter
            assert reporter.is_started
            assert reporter.object_names() == published

    def test_reporter_disabled(self, server):
        """Test that jmx=false skips the reporter but keeps the registries."""
        config = create_test_config()
        config['metrics']['report']['jmx'] = False

        with MetricsApplicationContext(config, management_server=server) as context:
            assert not context.contains_bean('register_jmx_reporter')
            assert context.contains_bean('registry')
            assert gauge_names(server) == []

    def test_reporter_enabled_when_flag_missing(self, server):
        """Test that an empty configuration enables the reporter."""
        with MetricsApplicationContext({}, management_server=server) as context:
            assert context.contains_bean('register_jmx_reporter')

    def test_invalid_config_fails_fast(self, server):
        """Test that an invalid configuration aborts startup."""
        config = create_test_config()
        config['metrics']['filter']['exclude'] = ['python..gc']

        context = MetricsApplicationContext(config, management_server=server)
        with pytest.raises(ConfigurationError):
            context.refresh()
        assert not context.active

    def test_invalid_flat_flag_fails_fast(self, server):
        """Test that an invalid dotted reporter flag is a configuration error."""
        config = {'metrics': {'report.jmx': 'maybe'}}
        context = MetricsApplicationContext(config, management_server=server)
        with pytest.raises(ConfigurationError, match='metrics.report.jmx'):
            context.refresh()
        assert not context.active

    def test_dotted_reporter_keys_applied(self, server):
        """Test that dotted reporter keys reach the reporter."""
        config = {'metrics': {'report.jmx': True, 'report.rate_unit': 'minutes'}}
        with MetricsApplicationContext(config, management_server=server) as context:
            reporter = context.get_bean('register_jmx_reporter')
            assert reporter.rate_unit is TimeUnit.MINUTES

    def test_failed_refresh_stops_reporter(self, server):
        """Test that a reporter started before a startup failure is stopped."""
        configurations = list(DEFAULT_CONFIGURATIONS) + [BrokenConfiguration]
        context = MetricsApplicationContext(
            create_test_config(), configurations=configurations, management_server=server
        )
        with pytest.raises(RuntimeError, match='broken bean'):
            context.refresh()

        assert not context.active
        assert context.bean_names() == []
        assert gauge_names(server) == []

    def test_failed_refresh_can_be_retried(self, server):
        """Test that a context whose startup failed starts once the cause is fixed."""
        configurations = list(DEFAULT_CONFIGURATIONS) + [BrokenListenerConfiguration]
        context = MetricsApplicationContext(
            create_test_config(), configurations=configurations, management_server=server
        )
        with pytest.raises(RuntimeError, match='broken listener'):
            context.refresh()
        assert context.serving_context.listeners == []

        context.configurations = list(DEFAULT_CONFIGURATIONS)
        context.refresh()

        assert context.active
        assert context.get_bean('register_jmx_reporter').is_started
        listener_types = [type(listener) for listener in context.serving_context.listeners]
        assert len(listener_types) == 2
        assert len(set(listener_types)) == 2
        context.close()

    def test_retry_after_invalid_config(self, server):
        """Test that fixing an invalid configuration allows a second refresh."""
        config = {'metrics': {'report.jmx': 'maybe'}}
        context = MetricsApplicationContext(config, management_server=server)
        with pytest.raises(ConfigurationError):
            context.refresh()

        context.config = create_test_config()
        context.refresh()
        assert context.active
        context.close()

    def test_close_leaves_reporter_running(self, server):
        """Test that closing the context does not stop the reporter."""
        context = MetricsApplicationContext(create_test_config(), management_server=server)
        context.refresh()
        reporter = context.get_bean('register_jmx_reporter')
        context.close()

        assert reporter.is_started
        assert gauge_names(server)

        reporter.stop()
        assert gauge_names(server) == []

    def test_refresh_after_close_rejected(self, server):
        """Test that a closed context cannot be started again."""
        context = MetricsApplicationContext(create_test_config(), management_server=server)
        context.refresh()
        context.close()
        with pytest.raises(RuntimeError):
            context.refresh()

    def test_second_startup_reuses_registry(self, server, empty_server):
        """Test that a second context in the same process shares the registry."""
        with MetricsApplicationContext(create_test_config(), management_server=server) as first:
            registry = first.get_bean('registry')
            size = len(registry)

            with MetricsApplicationContext(create_test_config(), management_server=empty_server) as second:
                assert second.get_bean('registry') is registry
                assert len(registry) == size

    def test_from_file(self, tmp_path, server):
        """Test startup from a YAML configuration file."""
        path = tmp_path / 'metrics.yaml'
        path.write_text(yaml.dump(create_test_config()))

        with MetricsApplicationContext.from_file(str(path), management_server=server) as context:
            assert context.active
            assert 'reporter_properties' in context.bean_names()
