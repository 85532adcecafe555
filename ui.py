from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from datetime import datetime

console = Console()


class TorrentUI:
    def __init__(self):
        self.console = console

    def header(self):
        """Returns the branding header."""
        title = Text("tor2mag", style="bold cyan", justify="center")
        subtitle = Text("torrent to magnet", style="bold magenta", justify="center")

        grid = Table.grid(expand=True)
        grid.add_column(justify="center", ratio=1)
        grid.add_row(title)
        grid.add_row(subtitle)

        return Panel(grid, style="white on black")

    def print_log(self, message, level="INFO"):
        """Prints a styled log message."""
        color = "green" if level == "INFO" else "red"
        if level == "WARNING": color = "yellow"

        time_str = f"[{datetime.now().strftime('%H:%M:%S')}]"
        self.console.print(f"{escape(time_str)} [bold {color}]{level}[/]: {escape(message)}")

    def show_torrent(self, torrent, include_trackers=False):
        """Displays everything read from one torrent in a table."""
        table = Table(box=None, show_header=False)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="white", overflow="fold")

        table.add_row("Name", Text(torrent.name))
        table.add_row("Info hash", Text(torrent.info_hash))
        table.add_row("Size", Text(torrent.size))
        table.add_row("Pieces", Text(torrent.pieces_summary))
        table.add_row("Files", Text(f"{torrent.file_count} ({'multi' if torrent.is_multi_file else 'single'}-file)"))
        if torrent.creation_date is not None:
            table.add_row("Created", Text(torrent.creation_date.strftime('%Y-%m-%d %H:%M:%S UTC')))
        if torrent.created_by is not None:
            table.add_row("Created by", Text(torrent.created_by))
        if torrent.comment is not None:
            table.add_row("Comment", Text(torrent.comment))

        self.console.print(Panel(table, title=escape(torrent.name), border_style="blue"))
        self.show_files(torrent)
        self.show_trackers(torrent)
        self.show_magnet(torrent, include_trackers)

    def show_files(self, torrent):
        table = Table(title="Files", box=None)
        table.add_column("Path", style="cyan", overflow="fold")
        for label in torrent.file_labels:
            table.add_row(Text(label))
        self.console.print(table)

    def show_trackers(self, torrent):
        if not torrent.trackers:
            self.console.print("[yellow]No trackers[/]")
            return
        table = Table(title="Trackers", box=None)
        table.add_column("Tier", style="magenta")
        table.add_column("URL", style="green", overflow="fold")
        for tier_index, tier in enumerate(torrent.tracker_tiers):
            for url in tier:
                table.add_row(str(tier_index), Text(url))
        self.console.print(table)

    def show_magnet(self, torrent, include_trackers=False):
        # soft_wrap keeps the link on one line so it can be copied as is
        self.console.print(Text(torrent.magnet_link(include_trackers)), soft_wrap=True)


ui = TorrentUI()
