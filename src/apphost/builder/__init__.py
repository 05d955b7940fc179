"""
Composition of the application host.

ApplicationHostBuilder lives in ``apphost.builder.host_builder`` and is also
exported from the top-level package; this package module only exposes the
service provider so that ``apphost.host`` can import it without a cycle.
"""

from apphost.builder.service_provider import ApplicationServiceProvider

__all__ = ["ApplicationServiceProvider"]
