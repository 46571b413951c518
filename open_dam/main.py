import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import DamEngine, Empty
from .database.db import marker_path
from .exceptions import AlreadyInitializedError, DamError, NotInitializedError
from .models import CatalogEntry

def setup_logging(log_file: Optional[Path], verbose: bool):
    """Sets up logging to the console and, for an existing catalog, a file at its root."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("PIL").setLevel(logging.WARNING)

def existing_dir(value: str) -> Path:
    path = Path(value)
    if not path.is_dir():
        raise argparse.ArgumentTypeError("Must be a valid directory!")
    return path

def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="dam", description="Open DAM: Digital Asset Manager")

    p.add_argument("-d", "--dir", type=existing_dir, default=Path("."), help="Sets the DAM home dir")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="init folder as dam")
    sub.add_parser("list", help="list all files")
    sub.add_parser("scan", help="scan for new files and sort them into the catalog")

    p_open = sub.add_parser("open", help="open a file with its default application")
    p_open.add_argument("name", help="Part of the file name")

    p_find = sub.add_parser("find", help="show the first file whose name matches")
    p_find.add_argument("name", help="Part of the file name")

    p_info = sub.add_parser("info", help="show all details of a file")
    p_info.add_argument("name", help="Part of the file name")

    p_add = sub.add_parser("add", help="move a single file into the catalog")
    p_add.add_argument("path", type=Path, help="File to add")

    return p.parse_args(argv)

def format_entry(entry: CatalogEntry) -> str:
    return f"{entry.id:10d} | {entry.created.isoformat(sep=' ', timespec='seconds')} | {entry.name.ljust(24)} | {entry.path}"

def print_details(entry: CatalogEntry):
    print(f"  id:         {entry.id}")
    print(f"  name:       {entry.name}")
    print(f"  path:       {entry.path}")
    print(f"  created:    {entry.created.isoformat(sep=' ', timespec='seconds')}")
    thumb = f"{len(entry.thumbnail)} bytes" if entry.thumbnail else "none"
    print(f"  thumbnail:  {thumb}")

def run(args) -> int:
    root = args.dir.resolve()

    if args.command == "init":
        engine = DamEngine.init(root)
        engine.close()
        logging.info(f"Initialized empty catalog in {root}")
        return 0

    status = DamEngine.check(root)
    if isinstance(status, Empty):
        raise NotInitializedError(f"No catalog found at {root}")

    with status.engine as engine:
        if args.command == "scan":
            engine.scan()
        elif args.command == "list":
            entries = engine.list()
            for entry in entries:
                print(format_entry(entry))
            logging.info(f"{engine.store.count()} entries in catalog")
        elif args.command == "find":
            print(format_entry(engine.find(args.name)))
        elif args.command == "info":
            print_details(engine.info(args.name))
        elif args.command == "open":
            engine.open(args.name)
        elif args.command == "add":
            entry = engine.add(args.path)
            logging.info(f"Added {entry.name} -> {entry.path}")
    return 0

def main(argv=None) -> int:
    args = parse_args(argv)

    root = args.dir.resolve()
    log_file = None
    if args.command == "init" or marker_path(root).exists():
        log_file = root / config.LOG_NAME
    setup_logging(log_file, args.verbose)

    try:
        return run(args)
    except AlreadyInitializedError:
        logging.error(f"{root} is already set up as a catalog.")
        return 1
    except NotInitializedError:
        logging.error(f"No catalog at {root}. Run 'dam init' there first.")
        return 1
    except DamError as e:
        logging.error(str(e))
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error.")
        return 1

if __name__ == "__main__":
    sys.exit(main())
