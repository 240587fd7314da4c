import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from timex_pipeline import __version__
from timex_pipeline.annotator import CLEAR_FEATURES_CHOICES
from timex_pipeline.client import AnnotationClient
from timex_pipeline.config import (
    DEFAULT_HOST,
    DEFAULT_SERVER_HOST,
    ISOLATION_MODES,
    OUTPUT_FORMATS,
    TARGETS,
    ClientConfig,
    ServerConfig,
    TaggerConfig,
)
from timex_pipeline.errors import ConfigError, TimexPipelineError
from timex_pipeline.pipeline import TimexPipeline
from timex_pipeline.server import AnnotationServer

ENCODING = "utf-8"


def add_tagging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        help="Optional config JSON file; command line options override it.",
    )
    parser.add_argument(
        "-m",
        "--model",
        type=str,
        help="Model passed to the labeler (pattern JSON file, spaCy or HF model name).",
    )
    parser.add_argument(
        "--labeler",
        type=str,
        help="Labeler component: pattern, spacy or transformers (default: pattern).",
    )
    parser.add_argument(
        "--clear-features",
        "--clearFeatures",
        dest="clear_features",
        choices=CLEAR_FEATURES_CHOICES,
        help="Reset the adaptive features every sentence ('yes'), at -DOCSTART- marks "
        "('docstart') or never ('no', default).",
    )
    parser.add_argument(
        "-l",
        "--language",
        type=str,
        help="Language; defaults to the language of the incoming NAF document, or 'en' for text.",
    )
    parser.add_argument(
        "-o",
        "--output-format",
        "--outputFormat",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        help="Output format; defaults to naf.",
    )
    parser.add_argument(
        "--target",
        choices=TARGETS,
        help="Annotate time expressions over tokens (timex, default) or entities over terms.",
    )
    parser.add_argument(
        "--reader",
        choices=("auto", "text", "naf"),
        help="Input reader; auto detects NAF XML and falls back to plain text.",
    )


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timex-pipeline",
        description=f"timex-pipeline {__version__}: temporal expression tagger.",
    )
    parser.add_argument(
        "--log",
        type=str.upper,
        default="WARNING",
        choices=LOG_LEVELS,
        help="Logging level (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="sub-command help")

    tag = subparsers.add_parser("tag", help="Tag a document read from stdin")
    add_tagging_arguments(tag)

    server = subparsers.add_parser(
        "server",
        help="Start TCP socket server",
        description="The --config file may also set port, host and isolation; "
        "tagger settings go at top level or under 'tagger'.",
    )
    add_tagging_arguments(server)
    server.add_argument("-p", "--port", help="Port to be assigned to the server.")
    server.add_argument(
        "--host",
        help=f"Interface to listen on (default: {DEFAULT_SERVER_HOST}).",
    )
    server.add_argument(
        "--isolation",
        choices=ISOLATION_MODES,
        help="Share one annotator across connections (shared, default) or load one per connection.",
    )

    client = subparsers.add_parser("client", help="Send stdin to the TCP socket server")
    client.add_argument(
        "--config",
        type=str,
        help="Optional client config JSON file (port, host, timeout); options override it.",
    )
    client.add_argument("-p", "--port", help="Port of the TCP server.")
    client.add_argument(
        "--host",
        help=f"Hostname or IP where the TCP server is running (default: {DEFAULT_HOST}).",
    )
    client.add_argument("--timeout", type=float, help="Socket timeout in seconds.")
    return parser


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    data = json.loads(Path(path).read_text(encoding=ENCODING))
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    return data


def override(data: Dict[str, Any], args: argparse.Namespace, keys) -> Dict[str, Any]:
    """Copy of ``data`` with every option in ``keys`` that was given on the command line."""
    merged = dict(data)
    for key in keys:
        value = getattr(args, key)
        if value is not None:
            merged[key] = value
    return merged


def tagger_config_from_args(
    args: argparse.Namespace, data: Optional[Dict[str, Any]] = None
) -> TaggerConfig:
    if data is None:
        data = load_config_file(args.config)
    data = dict(data.get("tagger", data))

    labeler = data.get("labeler") or {"name": "pattern"}
    if isinstance(labeler, str):
        labeler = {"name": labeler}
    labeler = {"name": labeler["name"], "params": dict(labeler.get("params", {}))}
    if args.labeler:
        if args.labeler != labeler["name"]:
            labeler = {"name": args.labeler, "params": {}}
    if args.model:
        labeler["params"]["model"] = args.model
    data["labeler"] = labeler

    if args.reader:
        data["reader"] = {"name": args.reader}
    data = override(data, args, ("language", "clear_features", "output_format", "target"))
    return TaggerConfig.from_dict(data)


def server_config_from_args(args: argparse.Namespace) -> ServerConfig:
    data = override(load_config_file(args.config), args, ("port", "host", "isolation"))
    return ServerConfig.from_dict(data, tagger=tagger_config_from_args(args, data))


def client_config_from_args(args: argparse.Namespace) -> ClientConfig:
    data = override(load_config_file(args.config), args, ("port", "host", "timeout"))
    return ClientConfig.from_dict(data)


def run_tag(args: argparse.Namespace) -> None:
    config = tagger_config_from_args(args)
    pipeline = TimexPipeline(config)
    text = sys.stdin.buffer.read().decode(ENCODING)
    result = pipeline.annotate_text(text)
    sys.stdout.buffer.write(result.encode(ENCODING))
    sys.stdout.flush()


def run_server(args: argparse.Namespace) -> None:
    server = AnnotationServer(server_config_from_args(args))
    server.serve()


def run_client(args: argparse.Namespace) -> None:
    config = client_config_from_args(args)
    client = AnnotationClient(host=config.host, port=config.port, timeout=config.timeout)
    text = sys.stdin.buffer.read().decode(ENCODING)
    result = client.annotate(text)
    sys.stdout.buffer.write(result.encode(ENCODING))
    sys.stdout.flush()


COMMANDS = {
    "tag": run_tag,
    "server": run_server,
    "client": run_client,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log)
    logger = logging.getLogger(__name__)
    logger.debug(f"CLI options: {vars(args)}")

    try:
        COMMANDS[args.command](args)
    except (TimexPipelineError, OSError, json.JSONDecodeError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
