import argparse
import os
import sys

from errors import TorrentError
from torrent import Torrent
from ui import ui
from utils import logger, setup_logging


def build_parser():
    parser = argparse.ArgumentParser(
        prog="tor2mag",
        description="Show what a .torrent file contains and convert it to a magnet link."
    )
    parser.add_argument("torrent_files", nargs="+", metavar="FILE", help="Path to a .torrent file.")
    parser.add_argument("-t", "--trackers", action="store_true",
                        help="Append the torrent's trackers to the magnet link.")
    parser.add_argument("-m", "--magnet-only", action="store_true",
                        help="Print only the magnet link.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def convert(torrent_file, include_trackers=False, magnet_only=False):
    """Reads one file and prints it. Returns True when it converted."""
    if not torrent_file.lower().endswith(".torrent"):
        logger.warning(f"{torrent_file} does not have a .torrent extension")

    try:
        torrent = Torrent.from_file(torrent_file)
    except OSError as e:
        ui.print_log(f"Cannot read {torrent_file}: {e.strerror or e}", "ERROR")
        return False
    except TorrentError as e:
        ui.print_log(f"{os.path.basename(torrent_file)} is not a valid torrent: {e}", "ERROR")
        return False

    if magnet_only:
        ui.show_magnet(torrent, include_trackers)
    else:
        ui.show_torrent(torrent, include_trackers)
    return True


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if not args.magnet_only:
        ui.console.print(ui.header())

    results = [convert(path, args.trackers, args.magnet_only) for path in args.torrent_files]
    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
