from __future__ import annotations

from typing import List

from models import ScoredCandidate, SelectionConstraints


def _price_label(level: int) -> str:
    return "$" * level


def build_report(constraints: SelectionConstraints, ranked: List[ScoredCandidate]) -> str:
    loc = constraints.location
    header = [
        "## Lunch Recommendations",
        "",
        f"- Anchor: {loc.address or f'{loc.lat:.4f}, {loc.lon:.4f}'}",
        f"- Search radius: {constraints.radius:.1f} miles",
        f"- Dietary needs: {', '.join(sorted(constraints.dietary_restrictions)) or 'None'}",
        f"- Price range: {', '.join(_price_label(int(p)) if p.isdigit() else p for p in sorted(constraints.price_range)) or 'Any'}",
    ]
    if constraints.exclude_restaurants:
        header.append(f"- Excluded: {len(constraints.exclude_restaurants)} restaurant(s)")
    header.append("")

    if not ranked:
        header.append("_No eligible restaurants matched these constraints._")
        return "\n".join(header) + "\n"

    lines = ["### Top Picks", ""]
    for idx, c in enumerate(ranked, start=1):
        r = c.restaurant
        cuisine = ", ".join(r.cuisine) if r.cuisine else "Unknown cuisine"
        line = (
            f"{idx}. **{r.name}** ({cuisine}) - score {c.score:.1f}, "
            f"{c.distance_miles:.1f} mi, {r.rating:.1f}★ ({r.review_count} reviews), {_price_label(r.price_level)}"
        )
        if c.debug_scores.get("recency", 1.0) < 1.0:
            line += " _(picked recently)_"
        lines.append(line)

    return "\n".join(header + lines) + "\n"
