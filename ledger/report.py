"""Human-readable reports: a plain-text election report and topic results."""

from collections.abc import Iterable
from datetime import datetime
from html import escape

from ledger.models import Candidate, VoteTopic, utcnow
from ledger.stats import (
    average_votes,
    distribution_bars,
    max_votes,
    min_votes,
    percentage,
    rank_options,
    sort_candidates,
    topic_winner,
    total_votes,
    vote_distribution,
)

RULE = "=" * 40
THIN_RULE = "-" * 40


def render_election_report(
    candidates: list[Candidate],
    winner_id: int | None,
    generated_at: datetime | None = None,
    history: Iterable[int] | None = None,
) -> str:
    """Render the roster's standings as a plain-text report.

    Candidates are listed from most to fewest votes, followed by either the
    majority winner's details or a line saying nobody has a majority, then
    per-candidate statistics. With ``history``, the report ends with a bar
    chart of how often each id was voted for, including ids that matched
    no candidate.
    """
    generated_at = generated_at or utcnow()
    total = total_votes(candidates)

    lines = [
        RULE,
        "      Election Report",
        RULE,
        f"Generated: {generated_at:%Y-%m-%d %H:%M:%S %Z}".rstrip(),
        THIN_RULE,
        "",
        f"Total votes: {total}",
        f"Candidates: {len(candidates)}",
        "",
        "Standings:",
        THIN_RULE,
        f"{'ID':<8}{'Name':<20}{'Department':<20}{'Votes':<10}{'Share':<15}",
        THIN_RULE,
    ]
    for c in sort_candidates(candidates, "votes-desc"):
        share = f"{percentage(c.vote_count, total):.2f}%"
        lines.append(f"{c.id:<8}{c.name:<20}{c.department:<20}{c.vote_count:<10}{share:<15}".rstrip())

    lines += ["", THIN_RULE]
    winner = next((c for c in candidates if c.id == winner_id), None) if winner_id is not None else None
    if winner is not None:
        lines += [
            f"Winner: candidate {winner.id}",
            f"Name: {winner.name}",
            f"Department: {winner.department}",
            f"Votes: {winner.vote_count}",
            f"Share: {percentage(winner.vote_count, total):.2f}%",
        ]
    else:
        lines.append("No candidate received more than half of the votes.")

    lines += [
        "",
        "Statistics:",
        THIN_RULE,
        f"Average votes: {average_votes(candidates):.2f}",
        f"Most votes: {max_votes(candidates)}",
        f"Fewest votes: {min_votes(candidates)}",
    ]

    if history is not None:
        names = {c.id: c.name for c in candidates}
        items = [
            (names.get(vote_id, f"#{vote_id} (invalid)"), count)
            for vote_id, count in vote_distribution(history).items()
        ]
        lines += ["", "Vote distribution:", THIN_RULE]
        lines += distribution_bars(items) if items else ["(no votes)"]

    lines.append(RULE)
    return "\n".join(lines) + "\n"


def render_topic_result_html(topic: VoteTopic) -> str:
    """Render a topic's results as an HTML fragment.

    Includes the title, the total, the per-voter quota, the majority winner
    (if any) and a table of options ranked by votes. All user text is
    escaped.
    """
    total = topic.total_votes
    parts = [
        "<h2>Topic results</h2>",
        f"<p><b>Topic:</b> {escape(topic.title)}</p>",
        f"<p><b>Total votes:</b> {total}</p>",
        f"<p><b>Votes per voter:</b> {topic.votes_per_voter}</p>",
    ]

    winner = topic_winner(topic)
    if winner is not None:
        parts.append(
            f'<p class="winner"><b>Winner:</b> [{winner.id}] {escape(winner.text)}</p>'
        )
    elif total == 0:
        parts.append('<p class="no-winner"><b>No winner:</b> no votes have been cast.</p>')
    else:
        parts.append('<p class="no-winner"><b>No winner:</b> no option has more than 50% of the votes.</p>')

    parts.append("<table>")
    parts.append("<tr><th>Rank</th><th>Option</th><th>Text</th><th>Votes</th><th>Share</th></tr>")
    for rank, option in enumerate(rank_options(topic), start=1):
        parts.append(
            f"<tr><td>{rank}</td><td>{option.id}</td><td>{escape(option.text)}</td>"
            f"<td>{option.vote_count}</td><td>{percentage(option.vote_count, total):.2f}%</td></tr>"
        )
    parts.append("</table>")
    return "\n".join(parts)
