import pytest

from kmoni.schemas.user import UserConfig
from kmoni.schemas.cli import CLIConfig
from kmoni.schemas.param import ParamConfig
from kmoni.schemas.resolve import resolve_config

pytestmark = pytest.mark.unit


def test_cli_overrides_do_not_mutate_user():
    user = UserConfig.model_validate({"REGISTRY_PATH": "a.csv", "MODE": "realtime"})

    cli = CLIConfig.model_validate({"registry_path": "b.pbf"})

    internal = resolve_config(ParamConfig(), user, cli)

    # CLI should take precedence
    assert internal.registry.path == "b.pbf"

    # But the original user model should remain unchanged
    assert user.registry_path == "a.csv"


def test_cli_minimal_overrides_mode():
    """CLI mode override should work correctly."""
    user = UserConfig(
        registry_path="a.csv",
        mode="realtime",
        start_time="2024-01-01T00:00:00Z",
        end_time="2024-01-01T00:01:00Z",
    )
    cli = CLIConfig(mode="historical")

    config = resolve_config(ParamConfig(), user, cli)

    assert config.mode == "historical"  # CLI wins
    assert config.registry.path == "a.csv"  # User value preserved


def test_cli_times_infer_historical():
    cli = CLIConfig(start_time="2024-01-01T00:00:00Z", end_time="2024-01-01T00:00:10Z")
    assert cli.mode == "historical"

    config = resolve_config(ParamConfig(), UserConfig(mode="realtime"), cli)
    assert config.mode == "historical"


def test_cli_only_overrides_specified_fields():
    """CLI should only override fields that are explicitly set."""
    user = UserConfig(
        registry_path="a.csv",
        results_path="out.parquet",
        max_color_distance=30,
        log_level="WARNING",
    )

    # CLI only sets the output path
    cli = CLIConfig(results_path="other.csv")

    config = resolve_config(ParamConfig(), user, cli)

    assert config.output.results_path == "other.csv"  # CLI override
    assert config.registry.path == "a.csv"  # User value preserved
    assert config.classifier.max_color_distance == 30.0
    assert config.logging.level == "WARNING"


def test_cli_log_level():
    config = resolve_config(ParamConfig(), UserConfig(log_level="WARNING"), CLIConfig(log_level="DEBUG"))
    assert config.logging.level == "DEBUG"


def test_cli_rejects_unknown_fields():
    with pytest.raises(ValueError):
        CLIConfig(station_code="TKY007")
