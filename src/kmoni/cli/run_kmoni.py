"""Core kmoni command execution logic.

This module contains the actual command runners, separated from argument
parsing. Scripts are thin wrappers; this is the real implementation.
"""

import sys
import json
import queue
import logging
import argparse
import importlib.util
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, List, Union

from pydantic import ValidationError

from kmoni.codec import CodecFatalError, detect_format, load_points, save_points
from kmoni.image.analysis import summarize_results
from kmoni.points import ObservationPointRegistry
from kmoni.pipeline import (
    IntensityMonitor,
    classifier_from_config,
    client_from_config,
    cycles_to_dataframe,
    parse_intensity_from_parameter,
    save_results,
)
from kmoni.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig, InternalConfig
from kmoni.web.client import FetchError
from kmoni.image.grid import ImageDecodeError


logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level: str = "INFO", log_path: Optional[Union[str, Path]] = None) -> None:
    """Configure the root logger with console and optional file handlers.

    Existing root handlers are removed so repeated calls do not duplicate
    output.

    Parameters
    ----------
    level : str
        Logging level name ("DEBUG", "INFO", ...).
    log_path : str or Path, optional
        If given, also log to this file (parent directories are created).
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def build_config(user_config_path: Optional[str] = None,
                 cli_args: Optional[Dict[str, Any]] = None,
                 verbose: bool = False) -> InternalConfig:
    """Resolve runtime configuration (Param < User < CLI)."""
    param_cfg = ParamConfig()  # Expert defaults

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and not cli_args.get("log_level"):
        cli_args["log_level"] = "DEBUG"

    # Filter None values
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    return resolve_config(param_cfg, user_cfg, cli_cfg)


def load_registry(config: InternalConfig) -> ObservationPointRegistry:
    """Load the observation point registry named by ``config.registry``."""
    if not config.registry.path:
        raise ValueError("No registry path configured (set REGISTRY_PATH or pass --registry)")

    loaded = load_points(config.registry.path, config.registry.format, config.registry.encoding)
    registry = ObservationPointRegistry.from_points(loaded.points, replace_duplicates=True)
    if len(registry) != len(loaded.points):
        logger.warning("Registry %s: %d duplicate codes replaced",
                       config.registry.path, len(loaded.points) - len(registry))
    logger.info("Loaded %d points from %s (%d lines skipped)",
                len(registry), config.registry.path, loaded.error)
    return registry


def convert_registry(src: Union[str, Path], dst: Union[str, Path],
                     src_format: Optional[str] = None, dst_format: Optional[str] = None,
                     encoding: str = "utf-8") -> int:
    """Convert a registry file between CSV, binary and JSON encodings.

    Returns
    -------
    int
        Number of records written.
    """
    src_format = src_format or detect_format(src)
    dst_format = dst_format or detect_format(dst)

    loaded = load_points(src, src_format, encoding)
    if loaded.error:
        logger.warning("%s: %d unparseable lines skipped", src, loaded.error)

    points = sorted(loaded.points)
    written = save_points(points, dst, dst_format, encoding)
    logger.info("Converted %s (%s) -> %s (%s): %d records",
                src, src_format, dst, dst_format, written)
    return written


def run_analysis(config: InternalConfig, timestamp: Optional[datetime] = None,
                 max_runtime: Optional[int] = None, client=None) -> List[tuple]:
    """Decode intensities for one timestamp, or run the monitor.

    With ``timestamp``, a single fetch/decode cycle runs in the calling
    thread. Otherwise an IntensityMonitor runs in ``config.mode``: a
    historical run ends with its time range, a realtime run after
    ``max_runtime`` minutes or on Ctrl+C.

    Returns
    -------
    list of (datetime, list of AnalysisResult)
        One entry per successful cycle. Results are also written to
        ``config.output.results_path`` when set.
    """
    registry = load_registry(config)
    client = client or client_from_config(config)
    classifier = classifier_from_config(config)

    cycles = []
    if timestamp is not None:
        results = parse_intensity_from_parameter(
            client, registry, timestamp,
            include_subsurface=config.client.include_subsurface,
            data_kind=config.client.data_kind,
            classifier=classifier,
        )
        logger.info("%s: %s", timestamp.isoformat(), summarize_results(results))
        cycles.append((timestamp, results))
    else:
        result_queue = queue.Queue()
        monitor = IntensityMonitor(config, registry, result_queue=result_queue,
                                   client=client, classifier=classifier)
        monitor.start()
        try:
            monitor.join(timeout=max_runtime * 60 if max_runtime else None)
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping monitor")
        finally:
            monitor.stop()
            monitor.join(timeout=10)
        while not result_queue.empty():
            cycles.append(result_queue.get_nowait())

    if config.output.results_path:
        save_results(cycles_to_dataframe(cycles), config.output.results_path,
                     compression=config.output.compression)
    return cycles


def _parse_time(text: str) -> datetime:
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kmoni", description="Kyoshin monitor map decoding tools")
    sub = parser.add_subparsers(dest="command", required=True)

    conv = sub.add_parser("convert", help="Convert a registry file between encodings")
    conv.add_argument("src", help="Input registry file")
    conv.add_argument("dst", help="Output registry file")
    conv.add_argument("--src-format", choices=["csv", "pbf", "json"], help="Input format (default: from suffix)")
    conv.add_argument("--dst-format", choices=["csv", "pbf", "json"], help="Output format (default: from suffix)")
    conv.add_argument("--encoding", default="utf-8", help="Text encoding for CSV/JSON")
    conv.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    ana = sub.add_parser("analyze", help="Decode station intensities from map images")
    ana.add_argument("config", help="Path to user config file")
    ana.add_argument("--time", type=_parse_time, help="Decode a single timestamp (ISO format)")
    ana.add_argument("--registry", help="Override registry path")
    ana.add_argument("--output", help="Results file (.parquet or .csv)")
    ana.add_argument("--mode", choices=["realtime", "historical"], help="Override mode")
    ana.add_argument("--start-time", help="Start time (ISO format)")
    ana.add_argument("--end-time", help="End time (ISO format)")
    ana.add_argument("--max-runtime", type=int, help="Max runtime in minutes (realtime)")
    ana.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "convert":
        configure_logging("DEBUG" if args.verbose else "INFO")
        try:
            convert_registry(args.src, args.dst, args.src_format, args.dst_format, args.encoding)
        except (CodecFatalError, ValueError) as e:
            logger.error("Conversion failed: %s", e)
            return 1
        return 0

    try:
        config = build_config(args.config, {
            "registry_path": args.registry,
            "results_path": args.output,
            "mode": args.mode,
            "start_time": args.start_time,
            "end_time": args.end_time,
        }, verbose=args.verbose)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.logging.level, config.logging.log_file)
    if args.verbose:
        logger.debug("Resolved configuration:\n%s",
                     json.dumps(config.model_dump(mode="json"), indent=2))

    try:
        cycles = run_analysis(config, timestamp=args.time, max_runtime=args.max_runtime)
    except (CodecFatalError, FetchError, ImageDecodeError, ValueError) as e:
        logger.error("Analysis failed: %s", e)
        return 1

    logger.info("Completed %d cycles", len(cycles))
    return 0
