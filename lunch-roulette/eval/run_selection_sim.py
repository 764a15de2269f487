"""Offline simulation harness for the weighted restaurant picker.

Runs the selector many times against a catalog with a seeded random source
and compares empirical pick frequencies with ``score / total``.

Usage:
  python run_selection_sim.py --catalog backend/data/restaurants.json \
      --lat 47.6062 --lon -122.3321 --radius 5 --trials 20000 --out eval/sim_v1
"""

from __future__ import annotations

import argparse
import csv
import random
import sys
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "backend" / "src"))

from models import SelectionConstraints  # noqa: E402
from services.catalog import load_catalog  # noqa: E402
from services.scoring import eligible_candidates, score_candidates  # noqa: E402
from services.selection import pick_weighted  # noqa: E402


@dataclass
class SimRow:
    restaurant_id: str
    name: str
    score: float
    expected: float
    observed: float
    picks: int


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('--catalog', required=True, help='Path to catalog JSON')
    parser.add_argument('--lat', type=float, required=True)
    parser.add_argument('--lon', type=float, required=True)
    parser.add_argument('--radius', type=float, default=5.0, help='Radius in miles')
    parser.add_argument('--dietary', nargs='*', default=[], help='Required dietary tags')
    parser.add_argument('--price', nargs='*', default=[], help='Accepted price tiers')
    parser.add_argument('--trials', type=int, default=10000)
    parser.add_argument('--seed', type=int, default=7)
    parser.add_argument('--out', default='eval/sim_report', help='Output directory')
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    restaurants = load_catalog(args.catalog)
    constraints = SelectionConstraints.build(
        args.lat,
        args.lon,
        args.radius,
        dietary_restrictions=args.dietary,
        price_range=args.price,
    )

    started = time.perf_counter()
    eligible = eligible_candidates(score_candidates(constraints, restaurants), constraints.radius)
    if not eligible:
        print('No eligible restaurants for these constraints.')
        sys.exit(1)
    eligible.sort(key=lambda c: c.score, reverse=True)

    rng = random.Random(args.seed)
    counts: Counter[str] = Counter()
    for _ in range(max(1, args.trials)):
        counts[pick_weighted(eligible, rng).restaurant.id] += 1
    elapsed_ms = (time.perf_counter() - started) * 1000

    total_score = sum(c.score for c in eligible)
    trials = sum(counts.values())
    rows = [
        SimRow(
            restaurant_id=c.restaurant.id,
            name=c.restaurant.name,
            score=c.score,
            expected=c.score / total_score,
            observed=counts[c.restaurant.id] / trials,
            picks=counts[c.restaurant.id],
        )
        for c in eligible
    ]

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path = out_dir / 'frequencies.csv'
    with csv_path.open('w', encoding='utf-8', newline='') as fh:
        writer = csv.writer(fh)
        writer.writerow(['restaurant_id', 'name', 'score', 'expected', 'observed', 'picks'])
        for row in rows:
            writer.writerow([row.restaurant_id, row.name, f'{row.score:.4f}', f'{row.expected:.4f}', f'{row.observed:.4f}', row.picks])

    max_dev = max(abs(r.expected - r.observed) for r in rows)
    print(f'Trials: {trials}  eligible: {len(rows)}  elapsed: {elapsed_ms:.1f} ms')
    print(f'Max |expected - observed|: {max_dev:.4f}')
    print(f'Frequencies written to {csv_path}')


if __name__ == '__main__':
    main()
