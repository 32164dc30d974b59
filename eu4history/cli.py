#!/usr/bin/env python3
"""
EU4 Save History Tool
Prints wars, building history, ledgers and player histories of a melted
EU4 save as JSON, or renders them as charts.
"""

import argparse
import dataclasses
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from . import charts
from .config import LEDGER_TAG_LIMIT, NATION_SIZE_TOP, STATISTICS, load_human_countries
from .parser import ParseError
from .query import SaveQuery
from .tag_filter import AI_STATES, PLAYER_STATES, TagFilter
from .wars import WarNotFoundError


def to_jsonable(value):
    if dataclasses.is_dataclass(value):
        return dataclasses.asdict(value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, set):
        return sorted(value)
    return value


def print_json(value):
    print(json.dumps(to_jsonable(value), indent=2, ensure_ascii=False))


def add_filter_arguments(parser: argparse.ArgumentParser):
    parser.add_argument('--players', choices=PLAYER_STATES, default='all', help='Player countries to include')
    parser.add_argument('--ai', choices=AI_STATES, default='alive', help='AI countries to include')
    parser.add_argument('--include', nargs='*', default=[], metavar='TAG', help='Always include these tags')
    parser.add_argument('--exclude', nargs='*', default=[], metavar='TAG', help='Never include these tags')
    parser.add_argument('--include-subjects', action='store_true', help='Also include subjects of matched countries')


def tag_filter_from_args(args) -> TagFilter:
    return TagFilter(
        players=args.players,
        ai=args.ai,
        include=tuple(args.include),
        exclude=tuple(args.exclude),
        include_subjects=args.include_subjects,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Derive history views from a melted EU4 save')
    parser.add_argument('save_file', help='Melted (plain text) EU4 save to analyze')
    parser.add_argument('--humans', help='HUMANS.txt file with extra player tag histories')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    add_filter_arguments(sub.add_parser('wars', help='List wars of the filtered countries'))

    war = sub.add_parser('war', help='Battles and participants of one war')
    war.add_argument('name', help='War name as written in the save')

    casualties = sub.add_parser('casualties', help='Losses of one country in finished wars')
    casualties.add_argument('tag')

    add_filter_arguments(sub.add_parser('losses', help='Lifetime war losses of the filtered countries'))

    sub.add_parser('buildings', help='Yearly building counts')

    province = sub.add_parser('province', help='Owner and building history of one province')
    province.add_argument('province_id', type=int)

    ledger = sub.add_parser('ledger', help='Gap filled annual ledger')
    ledger.add_argument('statistic', choices=STATISTICS)
    ledger.add_argument('--limit', type=int, default=LEDGER_TAG_LIMIT, help='Max countries in the series')
    add_filter_arguments(ledger)

    size = sub.add_parser('nation-size', help='Largest nations per year')
    size.add_argument('--top', type=int, default=NATION_SIZE_TOP)

    sub.add_parser('players', help='Tag histories of player nations')

    chart = sub.add_parser('charts', help='Render ledger, building and war charts')
    chart.add_argument('-o', '--output', help='Output directory (default: charts/)')
    chart.add_argument('--no-timestamp', action='store_true', help="Don't create timestamped subfolder")
    chart.add_argument('--war', action='append', default=[], help='War to render a losses treemap for')
    add_filter_arguments(chart)

    return parser


def render_charts(query: SaveQuery, args):
    output_dir = Path(args.output) if args.output else Path.cwd() / 'charts'
    if not args.no_timestamp:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        output_dir = output_dir / f"{str(query.save.date).replace('.', '_')}_{timestamp}"
    output_dir.mkdir(parents=True, exist_ok=True)
    print(f"Output: {output_dir}", file=sys.stderr)

    payload = tag_filter_from_args(args)
    for statistic in STATISTICS:
        charts.create_ledger_chart(query.annual_ledger(statistic, payload), statistic, output_dir)
    charts.create_building_chart(query.building_history(), output_dir)
    for name in args.war:
        charts.create_war_losses_treemap(query.get_war(name), name, output_dir)


def run(query: SaveQuery, args):
    command = args.command
    if command == 'wars':
        print_json(query.wars(tag_filter_from_args(args)))
    elif command == 'war':
        print_json(query.get_war(args.name))
    elif command == 'casualties':
        print_json(query.country_casualties(args.tag))
    elif command == 'losses':
        print_json(query.countries_war_losses(tag_filter_from_args(args)))
    elif command == 'buildings':
        print_json(query.building_history())
    elif command == 'province':
        print_json(query.province_history(args.province_id))
    elif command == 'ledger':
        print_json(query.annual_ledger(args.statistic, tag_filter_from_args(args), args.limit))
    elif command == 'nation-size':
        print_json(query.nation_size_statistics(args.top))
    elif command == 'players':
        print_json(query.player_histories())
    elif command == 'charts':
        render_charts(query, args)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    save_file = Path(args.save_file)
    extra_players = load_human_countries(Path(args.humans)) if args.humans else None

    print(f"Loading: {save_file.name}", file=sys.stderr)
    try:
        query = SaveQuery.from_file(save_file, extra_players=extra_players)
        run(query, args)
    except FileNotFoundError:
        print(f"Save file not found: {save_file}", file=sys.stderr)
        return 1
    except WarNotFoundError as e:
        print(f"No war named {e.args[0]!r} in save", file=sys.stderr)
        return 1
    except (ParseError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
