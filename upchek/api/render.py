"""HTML dashboard rendering.

Output is built from plain string templates; every value from a script or
peer is escaped.
"""

from __future__ import annotations

from collections.abc import Iterable
from html import escape
from string import Template

from upchek.health.models import TimestampedResult
from upchek.health.status import DerivedStatus

_PAGE = Template("""<!DOCTYPE html>
<html>
<head>
<title>upchek</title>
<style>
body { font-family: monospace; }
table { border-collapse: collapse; width: 100%; margin-bottom: 1em; }
th, td { border: 1px solid black; padding: 8px; vertical-align: top; }
.ok { background-color: #7c7; }
.fail { background-color: #e66; }
</style>
</head>
<body>
<h1>upchek</h1>
<p class="$global_class">Overall: $global_label</p>
<h2 class="$local_class">Local</h2>
$local_table
$peers
</body>
</html>
""")

_ROW = Template("""  <tr>
    <td>$name</td>
    <td class="$css">$exit_code</td>
    <td><pre>$stdout</pre></td>
    <td><pre>$stderr</pre></td>
    <td>$last_run</td>
  </tr>""")


def _css(ok: bool) -> str:
    return "ok" if ok else "fail"


def render_results_table(results: Iterable[TimestampedResult]) -> str:
    rows = [
        _ROW.substitute(
            name=escape(r.name),
            css=_css(r.success),
            exit_code=r.exit_code,
            stdout=escape(r.stdout),
            stderr=escape(r.stderr),
            last_run=r.last_run.strftime("%Y-%m-%d %H:%M:%S UTC"),
        )
        for r in results
    ]
    if not rows:
        return "<p>No results.</p>"
    return (
        "<table>\n  <thead><tr><th>Script</th><th>Exit Code</th><th>Output</th>"
        "<th>Error</th><th>Last Run</th></tr></thead>\n  <tbody>\n"
        + "\n".join(rows)
        + "\n  </tbody>\n</table>"
    )


def render_index(status: DerivedStatus) -> str:
    """Render the dashboard for one snapshot."""
    snap = status.snapshot
    sections = []
    for addr in snap.peer_addrs:
        state = snap.peer(addr)
        ok = status.peer_ok[addr]
        parts = [f'<h2 class="{_css(ok)}">Peer {escape(addr)}</h2>']
        if state.error is not None:
            parts.append(f"<p>Last fetch failed: <code>{escape(state.error)}</code></p>")
        elif not state.fetched:
            parts.append("<p>Not fetched yet.</p>")
        parts.append(render_results_table(state.results))
        sections.append("\n".join(parts))

    return _PAGE.substitute(
        global_class=_css(status.global_ok),
        global_label="healthy" if status.global_ok else "unhealthy",
        local_class=_css(status.local_ok),
        local_table=render_results_table(snap.local),
        peers="\n".join(sections),
    )


def render_healthz(status: DerivedStatus, verbose: bool = False) -> str:
    """Body for /healthz; verbose mode lists every check and peer."""
    lines = []
    if verbose:
        for r in status.snapshot.local:
            lines.append(f"[+]{r.name} ok" if r.success else f"[-]{r.name} failed")
        for addr, ok in status.peer_ok.items():
            lines.append(f"[+]peer:{addr} ok" if ok else f"[-]peer:{addr} failed")
    lines.append("ok" if status.global_ok else "unhealthy")
    return "\n".join(lines) + "\n"
