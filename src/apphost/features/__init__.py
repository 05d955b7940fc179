"""
Feature system of the application host.

Key Components:
- IApplicationFeature / ApplicationFeature: contract and base class of a feature
- FeatureRegistration: dependencies and services of one feature type
- FeatureCollection: ordered registrations collected by the builder
- ApplicationFeatureExecutor: ordered initialize and dispose of all features

Usage:
    from apphost.features import ApplicationFeature

    class PriceTickerFeature(ApplicationFeature):
        def __init__(self, lifetime: IApplicationLifetime):
            self.lifetime = lifetime

        async def initialize(self) -> None:
            ...

    builder.configure_features(
        lambda features: features.add_feature(PriceTickerFeature).depend_on(ApplicationBaseFeature)
    )
"""

from apphost.features.collection import FeatureCollection
from apphost.features.executor import ApplicationFeatureExecutor
from apphost.features.interfaces import (
    ApplicationFeature,
    FeatureState,
    IApplicationFeature,
)
from apphost.features.registration import FeatureRegistration

__all__ = [
    "ApplicationFeature",
    "ApplicationFeatureExecutor",
    "FeatureCollection",
    "FeatureRegistration",
    "FeatureState",
    "IApplicationFeature",
]
