"""
Ordered collection of feature registrations.
"""

from typing import Iterator, Type

from apphost.features.interfaces import IApplicationFeature
from apphost.features.registration import FeatureRegistration
from apphost.utils.errors import DuplicateFeatureError


class FeatureCollection:
    """Feature registrations in the order they were added.

    The order is kept all the way to the resolved feature list.
    """

    def __init__(self):
        self._registrations: list[FeatureRegistration] = []

    @property
    def feature_registrations(self) -> list[FeatureRegistration]:
        return list(self._registrations)

    def add_feature(self, feature_type: Type[IApplicationFeature]) -> FeatureRegistration:
        """Register a feature type and return its registration for chaining.

        Raises:
            DuplicateFeatureError: If the type is already registered
        """
        if any(r.feature_type is feature_type for r in self._registrations):
            raise DuplicateFeatureError(f"Feature {feature_type.__name__} is already registered")

        registration = FeatureRegistration(feature_type)
        self._registrations.append(registration)
        return registration

    def __iter__(self) -> Iterator[FeatureRegistration]:
        return iter(list(self._registrations))

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, feature_type: object) -> bool:
        return any(r.feature_type is feature_type for r in self._registrations)
