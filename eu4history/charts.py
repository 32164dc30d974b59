"""
EU4 save history charts
Renders ledger lines, building stacks and war loss treemaps with matplotlib.
"""

import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import squarify

from .buildings import BuildingCount
from .ledger import LocalizedLedger
from .wars import WarInfo

STATISTIC_LABELS = {
    'income': 'Income',
    'inflation': 'Inflation',
    'score': 'Score',
    'nation_size': 'Provinces',
}


def ledger_series(ledger: LocalizedLedger) -> dict[str, tuple[np.ndarray, np.ndarray]]:
    """Per tag (years, values) arrays with gaps as NaN so lines break there."""
    series = {}
    for point in ledger.points:
        years, values = series.setdefault(point.tag, ([], []))
        years.append(point.year)
        values.append(np.nan if point.value is None else point.value)
    return {
        tag: (np.array(years), np.array(values, dtype=float))
        for tag, (years, values) in series.items()
    }


def create_ledger_chart(ledger: LocalizedLedger, statistic: str, output_dir: Path) -> Path | None:
    """Line chart of one annual ledger, one line per country."""
    series = ledger_series(ledger)
    if not series:
        return None

    names = {loc.tag: loc.name for loc in ledger.localization}
    label = STATISTIC_LABELS.get(statistic, statistic.title())

    fig, ax = plt.subplots(figsize=(14, 7))
    for tag, (years, values) in series.items():
        ax.plot(years, values, label=names.get(tag, tag), linewidth=2)
    ax.set_xlabel('Year')
    ax.set_ylabel(label)
    ax.set_title(f'{label} Over Time')
    ax.legend(loc='upper left', fontsize=8, ncol=2)
    ax.grid(True, alpha=0.3)
    plt.tight_layout()

    path = output_dir / f'ledger_{statistic}.png'
    plt.savefig(path, dpi=150)
    plt.close(fig)
    print(f"  Saved: {path.name}", file=sys.stderr)
    return path


def create_building_chart(history: list[BuildingCount], output_dir: Path) -> Path | None:
    """Stacked area chart of building counts per year."""
    if not history:
        return None

    years = sorted({h.year for h in history})
    year_index = {year: i for i, year in enumerate(years)}
    names = {}
    counts = {}
    for h in history:
        names[h.building] = h.name
        row = counts.setdefault(h.building, np.zeros(len(years)))
        row[year_index[h.year]] = h.count

    buildings = sorted(counts)
    fig, ax = plt.subplots(figsize=(14, 7))
    ax.stackplot(years, np.vstack([counts[b] for b in buildings]),
                 labels=[names[b] for b in buildings], alpha=0.85)
    ax.set_xlabel('Year')
    ax.set_ylabel('Buildings')
    ax.set_title('Buildings Over Time')
    ax.legend(loc='upper left', fontsize=8, ncol=2)
    ax.margins(x=0)
    plt.tight_layout()

    path = output_dir / 'buildings_history.png'
    plt.savefig(path, dpi=150)
    plt.close(fig)
    print(f"  Saved: {path.name}", file=sys.stderr)
    return path


def create_war_losses_treemap(info: WarInfo, war_name: str, output_dir: Path) -> Path | None:
    """Treemap of total losses per war participant, attackers in red, defenders in blue."""
    rows = [(p, plt.cm.Reds) for p in info.attacker_participants]
    rows += [(p, plt.cm.Blues) for p in info.defender_participants]
    rows = [(p, cmap) for p, cmap in rows if sum(p.losses) > 0]
    if not rows:
        return None

    rows.sort(key=lambda x: sum(x[0].losses), reverse=True)
    sizes = [sum(p.losses) for p, _ in rows]
    labels = [f"{p.name}\n{total:,}" for (p, _), total in zip(rows, sizes)]
    shades = np.linspace(0.8, 0.4, len(rows))
    colors = [cmap(shade) for (_, cmap), shade in zip(rows, shades)]

    fig, ax = plt.subplots(figsize=(14, 10))
    squarify.plot(sizes=sizes, label=labels, color=colors, alpha=0.8, ax=ax,
                  text_kwargs={'fontsize': 10, 'fontweight': 'bold'})
    ax.set_title(f'{war_name}: Losses by Participant', fontsize=14, fontweight='bold')
    ax.axis('off')
    plt.tight_layout()

    slug = ''.join(c if c.isalnum() else '_' for c in war_name).strip('_').lower()
    path = output_dir / f'war_losses_{slug or "war"}.png'
    plt.savefig(path, dpi=150)
    plt.close(fig)
    print(f"  Saved: {path.name}", file=sys.stderr)
    return path
