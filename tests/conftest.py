"""Root-level pytest fixtures for the kmoni test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus small registries and pixel grids for decoder tests.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from kmoni.schemas import ParamConfig, UserConfig, resolve_config
from kmoni.points import (
    GeoLocation,
    ObservationPoint,
    ObservationPointRegistry,
    ObservationPointType,
    PixelCoordinate,
)

from tests.helpers.fake_grid import make_rgba_grid


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_distance(make_config):
    ...     config = make_config(max_color_distance=30)
    ...     assert config.classifier.max_color_distance == 30.0
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# Registry Fixtures
# =============================================================================

@pytest.fixture
def make_point():
    """Factory for observation points with sensible defaults."""
    def _make(code="A001", x=10, y=20, **overrides):
        fields = dict(
            type=ObservationPointType.K_NET,
            code=code,
            name=f"Station {code}",
            region="Tokyo",
            location=GeoLocation(latitude=35.6895, longitude=139.6917),
            point=PixelCoordinate(x=x, y=y) if x is not None and y is not None else None,
        )
        fields.update(overrides)
        return ObservationPoint(**fields)

    return _make


@pytest.fixture
def sample_points(make_point):
    """Three stations: mapped, unmapped, and mapped-but-suspended."""
    return [
        make_point("A001", 10, 20, classification_id=3, prefecture_classification_id=13),
        make_point("A002", None, None, type=ObservationPointType.KIK_NET, region="Chiba"),
        make_point("B001", 30, 5, is_suspended=True, name="Suspended"),
    ]


@pytest.fixture
def sample_registry(sample_points):
    return ObservationPointRegistry.from_points(sample_points)


# =============================================================================
# Grid Fixtures
# =============================================================================

@pytest.fixture
def make_grid():
    """Factory for RGBA pixel grids, see helpers.fake_grid.make_rgba_grid."""
    return make_rgba_grid
