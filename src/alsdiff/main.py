import asyncio
import json
import logging
import signal
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional

from .constants import ParserConstants, ServerConstants
from .diff import diff_projects
from .errors import AlsDiffError
from .model import ModelVisitor, NodeType, PrettyPrintVisitor, serialize_project
from .parser import ParserConfig
from .server import FileWatcher, ProjectService
from .snapshot import compare_with_snapshot, load_any, save_snapshot
from .websocket import ProjectWebSocketServer

logger = logging.getLogger(__name__)

USAGE = """Usage: alsdiff <command> <path> [<path>] [OPTIONS]

Commands:
  parse <file>               - Print the project model as JSON
  tree <file>                - Print the project as an indented tree
  info <file>                - Print track and branch counts
  diff <old> <new>           - Print the changes from old to new
  compare <file> <old.json>  - Print {"summary", "project"} JSON
  watch <file>               - Print (and broadcast) changes on every save

Files may be .als, .xml or, where a model is only read, .json snapshots.

Parser Options:
  --permissive-names         - Accept name tags outside <Name> blocks
  --max-anomalies=N          - Give up after N anomalies ('none' to never give up, default: 100)
  --save-snapshot=PATH       - Write the (new) project model to PATH

Watch Options:
  --ws-host=HOST             - WebSocket host (default: localhost)
  --ws-port=PORT             - WebSocket port (default: 8765)
  --no-websocket             - Only print changes
  --no-signals               - Do not install signal handlers

Logging Options:
  --log-file=PATH            - Log to file (default: stderr only)
  --log-level=LEVEL          - Logging level: DEBUG, INFO, WARNING, ERROR (default: WARNING)"""

COMMAND_ARITY = {"parse": 1, "tree": 1, "info": 1, "diff": 2, "compare": 2, "watch": 1}


def setup_logging(log_file: Path = None, level: str = "WARNING"):
    """
    Configure logging to stderr and, optionally, a file.

    Stdout is reserved for command output, so the console handler writes
    to stderr.

    Args:
        log_file: Path to log file (optional)
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    simple_formatter = logging.Formatter('%(levelname)s: %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else getattr(logging, level.upper()))
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    return root_logger


def parse_arguments(argv: List[str]) -> Optional[Dict]:
    """
    Split argv into command, paths and options.

    Returns:
        Options dictionary, or None when the command line is unusable
    """
    try:
        return _parse_arguments(argv)
    except ValueError:
        return None


def _parse_arguments(argv: List[str]) -> Optional[Dict]:
    positional = [arg for arg in argv if not arg.startswith("--")]
    if not positional or positional[0] not in COMMAND_ARITY:
        return None

    command, paths = positional[0], positional[1:]
    if len(paths) != COMMAND_ARITY[command]:
        return None

    options = {
        "command": command,
        "paths": [Path(p) for p in paths],
        "require_name_block": True,
        "max_anomalies": ParserConstants.DEFAULT_MAX_ANOMALIES,
        "save_snapshot": None,
        "ws_host": ServerConstants.DEFAULT_HOST,
        "ws_port": ServerConstants.DEFAULT_PORT,
        "use_websocket": True,
        "use_signals": True,
        "log_file": None,
        "log_level": "WARNING",
    }

    for arg in argv:
        if not arg.startswith("--"):
            continue
        if arg == "--permissive-names":
            options["require_name_block"] = False
        elif arg.startswith("--max-anomalies="):
            value = arg.split("=", 1)[1]
            options["max_anomalies"] = None if value.lower() == "none" else int(value)
        elif arg.startswith("--save-snapshot="):
            options["save_snapshot"] = Path(arg.split("=", 1)[1])
        elif arg.startswith("--ws-host="):
            options["ws_host"] = arg.split("=", 1)[1]
        elif arg.startswith("--ws-port="):
            options["ws_port"] = int(arg.split("=", 1)[1])
        elif arg == "--no-websocket":
            options["use_websocket"] = False
        elif arg == "--no-signals":
            options["use_signals"] = False
        elif arg.startswith("--log-file="):
            options["log_file"] = Path(arg.split("=", 1)[1])
        elif arg.startswith("--log-level="):
            options["log_level"] = arg.split("=", 1)[1]
        else:
            logger.warning(f"Ignoring unknown option: {arg}")

    return options


def project_info(project) -> Dict:
    """Count tracks by type and rack branches in a project."""
    nodes = ModelVisitor().traverse(project)
    tracks_by_type: Dict[str, int] = {}
    for track in project.tracks:
        tracks_by_type[track.track_type] = tracks_by_type.get(track.track_type, 0) + 1
    return {
        "num_tracks": len(project.tracks),
        "tracks_by_type": tracks_by_type,
        "num_branches": sum(1 for node in nodes if node.node_type is NodeType.BRANCH),
        "tracks_with_racks": sum(1 for track in project.tracks if track.branches is not None),
    }


async def run_watch(path: Path, options: Dict, config: ParserConfig) -> None:
    """Watch a project file, printing and broadcasting changes on every save."""
    websocket_server = None
    if options["use_websocket"]:
        websocket_server = ProjectWebSocketServer(options["ws_host"], options["ws_port"])
        await websocket_server.start()

    service = ProjectService(websocket_server, config, snapshot_path=options["save_snapshot"])
    result = await service.reload_and_broadcast(path)
    if result is not None:
        print(f"Project loaded: {result['root_hash'][:8]}... ({len(service.current_project.tracks)} tracks)")

    loop = asyncio.get_running_loop()

    def on_change(changed: Path):
        # watchdog calls this from its observer thread
        future = asyncio.run_coroutine_threadsafe(service.reload_and_broadcast(changed), loop)
        reloaded = future.result()
        if reloaded and reloaded["summary"]:
            print(reloaded["summary"], flush=True)

    watcher = FileWatcher(on_change)
    watcher.watch(path)
    watcher.start()
    print(f"Watching {path}. Press Ctrl+C to stop.")

    stop_event = asyncio.Event()
    if options["use_signals"]:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
    finally:
        # The observer thread may be blocked on a future from this loop
        await asyncio.to_thread(watcher.stop)
        if websocket_server:
            await websocket_server.stop()
        print("Watcher stopped.")


def run_command(options: Dict) -> int:
    config = ParserConfig(
        require_name_block=options["require_name_block"],
        max_anomalies=options["max_anomalies"],
    )
    command = options["command"]
    paths = options["paths"]

    if command == "watch":
        try:
            asyncio.run(run_watch(paths[0], options, config))
        except KeyboardInterrupt:
            print("\nShutdown complete.")
        return 0

    if command == "compare":
        response = compare_with_snapshot(paths[0], paths[1], config)
        print(json.dumps(response, indent=2))
        if options["save_snapshot"]:
            with open(options["save_snapshot"], "w", encoding="utf-8") as f:
                json.dump(response["project"], f, indent=2)
        return 0

    if command == "diff":
        old = load_any(paths[0], config)
        project = load_any(paths[1], config)
        for change in diff_projects(old, project):
            print(change.describe())
    else:
        project = load_any(paths[0], config)
        if command == "parse":
            print(json.dumps(serialize_project(project), indent=2))
        elif command == "tree":
            print(PrettyPrintVisitor().print(project))
        elif command == "info":
            print(json.dumps(project_info(project), indent=2))

    if options["save_snapshot"]:
        save_snapshot(project, options["save_snapshot"])
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    options = parse_arguments(argv)
    if options is None:
        print(USAGE)
        return 1

    setup_logging(log_file=options["log_file"], level=options["log_level"])

    try:
        return run_command(options)
    except (AlsDiffError, OSError, ValueError, ET.ParseError, EOFError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
