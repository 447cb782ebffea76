"""Unit tests for domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from unittest.mock import MagicMock

import pytest
import structlog

from infrastructure.observability import DefaultStartupProbe, ObservationContext
from isolation.application.observability import (
    DefaultCookieProbe,
    DefaultCorsPolicyProbe,
)
from pipeline.observability import DefaultPipelineProbe
from tenancy.application.observability import (
    DefaultEnvironmentResolverProbe,
    DefaultResponseAugmenterProbe,
)
from tenancy.infrastructure.observability import DefaultTenantRegistryProbe


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock(spec=structlog.stdlib.BoundLogger)


@pytest.fixture
def context() -> ObservationContext:
    return ObservationContext(
        request_id="req-123", tenant_id=7, frontend_host="learning.csl-brands.com"
    )


class TestStartupProbe:
    """Tests for DefaultStartupProbe."""

    def test_default_probe_creates_with_default_logger(self):
        """Default probe should work without explicit logger."""
        probe = DefaultStartupProbe()
        assert probe._logger is not None

    def test_default_probe_accepts_custom_logger(self, mock_logger: MagicMock):
        probe = DefaultStartupProbe(logger=mock_logger)
        assert probe._logger is mock_logger

    def test_application_started_logs_info(self, mock_logger: MagicMock):
        probe = DefaultStartupProbe(logger=mock_logger)

        probe.application_started(app_name="Tenant Edge API", version="0.1.0", debug=False)

        mock_logger.info.assert_called_once_with(
            "application_started",
            app_name="Tenant Edge API",
            version="0.1.0",
            debug=False,
        )

    def test_tenant_registry_warmed_logs_info(self, mock_logger: MagicMock):
        probe = DefaultStartupProbe(logger=mock_logger)

        probe.tenant_registry_warmed(hostname_count=12)

        mock_logger.info.assert_called_once_with(
            "tenant_registry_warmed", hostname_count=12
        )

    def test_warmup_failure_logs_warning(self, mock_logger: MagicMock):
        probe = DefaultStartupProbe(logger=mock_logger)

        probe.tenant_registry_warmup_failed(error=ConnectionError("down"))

        mock_logger.warning.assert_called_once_with(
            "tenant_registry_warmup_failed",
            error="down",
            error_type="ConnectionError",
        )

    def test_insecure_session_secret_logs_warning(self, mock_logger: MagicMock):
        probe = DefaultStartupProbe(logger=mock_logger)

        probe.insecure_session_secret()

        mock_logger.warning.assert_called_once_with("insecure_session_secret")


class TestPipelineProbe:
    """Tests for DefaultPipelineProbe."""

    def test_with_context_includes_context_in_logs(
        self, mock_logger: MagicMock, context: ObservationContext
    ):
        """Context metadata should be attached to every event."""
        probe = DefaultPipelineProbe(logger=mock_logger).with_context(context)

        probe.request_configured(
            tenant_id=7, source="host_match", session_cookie="csl_session_x"
        )

        mock_logger.debug.assert_called_once_with(
            "request_configured",
            resolved_tenant_id=7,
            source="host_match",
            session_cookie="csl_session_x",
            request_id="req-123",
            tenant_id=7,
            frontend_host="learning.csl-brands.com",
        )

    def test_with_context_returns_new_probe(
        self, mock_logger: MagicMock, context: ObservationContext
    ):
        probe = DefaultPipelineProbe(logger=mock_logger)
        bound = probe.with_context(context)

        assert bound is not probe
        assert bound._logger is mock_logger
        assert probe._context is None

    def test_preflight_answered_logs_debug(self, mock_logger: MagicMock):
        probe = DefaultPipelineProbe(logger=mock_logger)

        probe.preflight_answered(origin="https://evil.example.com", allowed=False)

        mock_logger.debug.assert_called_once_with(
            "preflight_answered", origin="https://evil.example.com", allowed=False
        )

    def test_session_cookie_rejected_logs_info(self, mock_logger: MagicMock):
        probe = DefaultPipelineProbe(logger=mock_logger)

        probe.session_cookie_rejected(cookie_name="csl_session")

        mock_logger.info.assert_called_once_with(
            "session_cookie_rejected", cookie_name="csl_session"
        )

    def test_principal_lookup_failed_logs_warning(self, mock_logger: MagicMock):
        probe = DefaultPipelineProbe(logger=mock_logger)

        probe.principal_lookup_failed(error=TimeoutError("slow"))

        mock_logger.warning.assert_called_once_with(
            "principal_lookup_failed", error="slow", error_type="TimeoutError"
        )

    def test_pipeline_step_failed_logs_error(self, mock_logger: MagicMock):
        probe = DefaultPipelineProbe(logger=mock_logger)

        probe.pipeline_step_failed(step="CorsHeadersFinalizer", error=KeyError("x"))

        mock_logger.error.assert_called_once_with(
            "pipeline_step_failed",
            step="CorsHeadersFinalizer",
            error="'x'",
            error_type="KeyError",
        )


class TestEnvironmentResolverProbe:
    """Tests for DefaultEnvironmentResolverProbe."""

    def test_resolved_from_token_ability(self, mock_logger: MagicMock):
        probe = DefaultEnvironmentResolverProbe(logger=mock_logger)

        probe.tenant_resolved_from_token_ability(tenant_id=42, token_id="2")

        mock_logger.debug.assert_called_once_with(
            "environment_resolved_from_token_ability",
            resolved_tenant_id=42,
            token_id="2",
        )

    def test_resolved_from_host(self, mock_logger: MagicMock):
        probe = DefaultEnvironmentResolverProbe(logger=mock_logger)

        probe.tenant_resolved_from_host(tenant_id=7, host="training.acme.com")

        mock_logger.debug.assert_called_once_with(
            "environment_resolved_from_host",
            resolved_tenant_id=7,
            host="training.acme.com",
        )

    def test_unresolved(self, mock_logger: MagicMock):
        probe = DefaultEnvironmentResolverProbe(logger=mock_logger)

        probe.tenant_unresolved(declared_host=None)

        mock_logger.debug.assert_called_once_with(
            "environment_unresolved", declared_host=None
        )

    def test_frontend_domain_mismatch_logs_warning(self, mock_logger: MagicMock):
        probe = DefaultEnvironmentResolverProbe(logger=mock_logger)

        probe.frontend_domain_mismatch(
            declared_host="learning.csl-brands.com", observed_host="evil.example.com"
        )

        mock_logger.warning.assert_called_once()
        call_args = mock_logger.warning.call_args
        assert call_args[0][0] == "environment_frontend_domain_mismatch"
        assert call_args[1]["declared_host"] == "learning.csl-brands.com"
        assert call_args[1]["observed_host"] == "evil.example.com"

    def test_resolution_step_failed_logs_error(self, mock_logger: MagicMock):
        probe = DefaultEnvironmentResolverProbe(logger=mock_logger)

        probe.resolution_step_failed(step="token_ability", error=RuntimeError("db"))

        mock_logger.error.assert_called_once_with(
            "environment_resolution_step_failed",
            step="token_ability",
            error="db",
            error_type="RuntimeError",
        )


class TestResponseAugmenterProbe:
    """Tests for DefaultResponseAugmenterProbe."""

    def test_environment_attached(
        self, mock_logger: MagicMock, context: ObservationContext
    ):
        probe = DefaultResponseAugmenterProbe(logger=mock_logger).with_context(context)

        probe.environment_attached(tenant_id=7)

        call_args = mock_logger.debug.call_args
        assert call_args[0][0] == "response_environment_attached"
        assert call_args[1]["request_id"] == "req-123"

    def test_body_not_augmentable(self, mock_logger: MagicMock):
        probe = DefaultResponseAugmenterProbe(logger=mock_logger)

        probe.body_not_augmentable(reason="not_an_object")

        call_args = mock_logger.debug.call_args
        assert call_args[0][0] == "response_not_augmentable"
        assert call_args[1]["reason"] == "not_an_object"

    def test_augmentation_step_failed_logs_error(self, mock_logger: MagicMock):
        probe = DefaultResponseAugmenterProbe(logger=mock_logger)

        probe.augmentation_step_failed(step="branding", error=ValueError("bad"))

        call_args = mock_logger.error.call_args
        assert call_args[0][0] == "response_augmentation_step_failed"
        assert call_args[1]["error_type"] == "ValueError"


class TestTenantRegistryProbe:
    """Tests for DefaultTenantRegistryProbe."""

    def test_cache_hit_logs_debug(self, mock_logger: MagicMock):
        probe = DefaultTenantRegistryProbe(logger=mock_logger)

        probe.registry_cache_hit()

        mock_logger.debug.assert_called_once_with("tenant_registry_cache_hit")

    def test_refreshed_logs_info(self, mock_logger: MagicMock):
        probe = DefaultTenantRegistryProbe(logger=mock_logger)

        probe.registry_refreshed(tenant_count=3, hostname_count=5)

        mock_logger.info.assert_called_once_with(
            "tenant_registry_refreshed", tenant_count=3, hostname_count=5
        )

    def test_refresh_failed_logs_error(self, mock_logger: MagicMock):
        probe = DefaultTenantRegistryProbe(logger=mock_logger)

        probe.registry_refresh_failed(error=ConnectionError("refused"))

        mock_logger.error.assert_called_once_with(
            "tenant_registry_refresh_failed",
            error="refused",
            error_type="ConnectionError",
        )

    def test_duplicate_hostname_logs_warning(self, mock_logger: MagicMock):
        probe = DefaultTenantRegistryProbe(logger=mock_logger)

        probe.duplicate_hostname(hostname="shared.example.com", tenant_ids=[1, 2])

        call_args = mock_logger.warning.call_args
        assert call_args[0][0] == "tenant_registry_duplicate_hostname"
        assert call_args[1]["tenant_ids"] == [1, 2]


class TestCorsPolicyProbe:
    """Tests for DefaultCorsPolicyProbe."""

    def test_origin_allowed_logs_debug(self, mock_logger: MagicMock):
        probe = DefaultCorsPolicyProbe(logger=mock_logger)

        probe.origin_allowed(origin="https://app.tenant.com")

        mock_logger.debug.assert_called_once_with(
            "cors_origin_allowed", origin="https://app.tenant.com"
        )

    def test_origin_denied_logs_info(self, mock_logger: MagicMock):
        probe = DefaultCorsPolicyProbe(logger=mock_logger)

        probe.origin_denied(origin="https://evil.com", origin_host="evil.com")

        mock_logger.info.assert_called_once_with(
            "cors_origin_denied", origin="https://evil.com", origin_host="evil.com"
        )

    def test_hosts_unavailable_logs_error(
        self, mock_logger: MagicMock, context: ObservationContext
    ):
        probe = DefaultCorsPolicyProbe(logger=mock_logger).with_context(context)

        probe.stateful_hosts_unavailable(error=ConnectionError("down"))

        mock_logger.error.assert_called_once_with(
            "cors_stateful_hosts_unavailable",
            error="down",
            error_type="ConnectionError",
            request_id="req-123",
            tenant_id=7,
            frontend_host="learning.csl-brands.com",
        )


class TestCookieProbe:
    """Tests for DefaultCookieProbe."""

    def test_session_namespace_selected(self, mock_logger: MagicMock):
        probe = DefaultCookieProbe(logger=mock_logger)

        probe.session_namespace_selected(
            cookie_name="csl_session_app_tenant_com", host="app.tenant.com"
        )

        mock_logger.debug.assert_called_once_with(
            "session_namespace_selected",
            cookie_name="csl_session_app_tenant_com",
            host="app.tenant.com",
        )

    def test_xsrf_cookie_rewritten(self, mock_logger: MagicMock):
        probe = DefaultCookieProbe(logger=mock_logger)

        probe.xsrf_cookie_rewritten(domain=".csl-brands.com")

        mock_logger.debug.assert_called_once_with(
            "xsrf_cookie_rewritten", domain=".csl-brands.com"
        )

    def test_xsrf_cookie_host_scoped(self, mock_logger: MagicMock):
        probe = DefaultCookieProbe(logger=mock_logger)

        probe.xsrf_cookie_host_scoped(reason="no_root_domain")

        mock_logger.debug.assert_called_once_with(
            "xsrf_cookie_host_scoped", reason="no_root_domain"
        )
