from __future__ import annotations
import argparse
import logging
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from libwipeout.errors import WipeoutReadError
from libwipeout.model import DecodeStatus, PrimitiveType
from libwipeout.prm import load_object, scan_prm
from libwipeout.summary import summarize_prm, summarize_track

console = Console()


def _tag_name(tag: int) -> str:
    try:
        return PrimitiveType(tag).name
    except ValueError:
        return f"#{tag}"


def cmd_scan(args: argparse.Namespace) -> int:
    objects = scan_prm(args.prm)
    t = Table(title=f"Objects with vertices in {args.prm}")
    t.add_column("Index", justify="right")
    t.add_column("Name", overflow="fold")
    if objects:
        for index, name in objects:
            t.add_row(str(index), name)
    else:
        t.add_row("-", "(no objects with vertices found)")
    console.print(t)
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    s = summarize_prm(args.prm)
    console.print(f"[bold]File:[/bold] {s.path}")
    console.print(f"[bold]Size:[/bold] {s.file_size} bytes")
    console.print(f"[bold]Objects:[/bold] {len(s.objects)}")

    ot = Table(title="Objects")
    ot.add_column("Index", justify="right")
    ot.add_column("Name", overflow="fold")
    ot.add_column("Verts", justify="right")
    ot.add_column("Normals", justify="right")
    ot.add_column("Prims", justify="right")
    ot.add_column("Flags", justify="right")
    for o in s.objects:
        ot.add_row(
            str(o.index), o.name, str(o.vertex_count), str(o.normal_count),
            str(o.primitive_count), f"0x{o.flags & 0xFFFF:04X}",
        )
    console.print(ot)

    tt = Table(title="Primitive types")
    tt.add_column("Type")
    tt.add_column("Count", justify="right")
    for tag, n in s.tag_counts.items():
        tt.add_row(_tag_name(tag), str(n))
    console.print(tt)

    if s.status is not DecodeStatus.OK:
        console.print(f"[yellow]Decode {s.status.value}:[/yellow] {s.reason}")
        return 1
    return 0


def cmd_object(args: argparse.Namespace) -> int:
    m = load_object(args.prm, args.index)
    console.print(f"[bold]Name:[/bold] {m.name}")
    console.print(f"[bold]Origin:[/bold] {m.origin}")
    console.print(f"[bold]Radius:[/bold] {m.radius}")
    console.print(f"[bold]Flags:[/bold] 0x{m.flags & 0xFFFF:04X}")
    console.print(
        f"[bold]Vertices:[/bold] {len(m.vertices)}   [bold]Normals:[/bold] {len(m.normals)}   "
        f"[bold]Polygons:[/bold] {len(m.primitives)}"
    )

    pt = Table(title="Polygons by type")
    pt.add_column("Kind")
    pt.add_column("Source type")
    pt.add_column("Count", justify="right")
    counts = {}
    for p in m.primitives:
        key = (type(p).__name__, p.type.name)
        counts[key] = counts.get(key, 0) + 1
    for (kind, src), n in sorted(counts.items()):
        pt.add_row(kind, src, str(n))
    console.print(pt)
    return 0


def cmd_track(args: argparse.Namespace) -> int:
    s = summarize_track(args.trv, args.trf, args.sections)
    console.print(f"[bold]Vertices:[/bold] {s.vertex_count}   [bold]Faces:[/bold] {s.face_count}")
    console.print(f"[bold]Triangles:[/bold] {s.triangle_count}   [bold]Skipped faces:[/bold] {s.skipped_faces}")
    console.print(f"[bold]Radius:[/bold] {s.radius}")
    if s.section_count is not None:
        console.print(f"[bold]Sections:[/bold] {s.section_count}   [bold]Linked forward:[/bold] {s.linked_sections}")

    ft = Table(title="Face flags")
    ft.add_column("Flag")
    ft.add_column("Faces", justify="right")
    if s.flag_counts:
        for name, n in s.flag_counts.items():
            ft.add_row(name, str(n))
    else:
        ft.add_row("(none)", "-")
    console.print(ft)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="wipeoutcli")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("scan", help="List vertex-bearing objects in a PRM file")
    s.add_argument("prm")
    s.set_defaults(fn=cmd_scan)

    m = sub.add_parser("summary", help="Print every object header and primitive type counts")
    m.add_argument("prm")
    m.set_defaults(fn=cmd_summary)

    o = sub.add_parser("object", help="Decode one object and print its mesh stats")
    o.add_argument("prm")
    o.add_argument("--index", type=int, default=0)
    o.set_defaults(fn=cmd_object)

    t = sub.add_parser("track", help="Decode TRACK.TRV/TRF (and optionally TRACK.TRS)")
    t.add_argument("trv")
    t.add_argument("trf")
    t.add_argument("--sections", default=None, metavar="TRS")
    t.set_defaults(fn=cmd_track)

    return p


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return int(args.fn(args))
    except OSError as e:
        console.print(f"[red]Cannot read {e.filename}:[/red] {e.strerror or e}")
        return 2
    except WipeoutReadError as e:
        console.print(f"[red]Decode failed:[/red] {e}")
        return 1

if __name__ == "__main__":
    raise SystemExit(main())
