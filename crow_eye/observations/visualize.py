"""
observations/visualize.py

Watch the crows watch the forest.

Threats are fixed marks sized by severity; crows are coloured by
alarm and veterans drawn larger; fractal searchers show the part
of their path still ahead of them.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from crow_eye.core.threat import ThreatCategory

if TYPE_CHECKING:
    from crow_eye.environments.threat_field import ThreatField


ALERT_COLORS = ['#4cc9f0', '#f8961e', '#f72585']   # CALM, ALERT, ALARMED
THREAT_MARKERS = {
    ThreatCategory.PRIMARY_ALERT: ('X', '#ff4d4d'),
    ThreatCategory.SECONDARY_ALERT: ('^', '#ffb703'),
}


class SwarmVisualizer:
    """
    Draws a ThreatField after each tick.

    matplotlib is imported on first render, so headless runs that
    never render do not need a display.
    """

    def __init__(self, field: ThreatField, figsize: tuple = (10, 10)):
        self.field = field
        self.figsize = figsize
        self._plt = None
        self._fig = None
        self._ax = None

    def render(self, show_paths: bool = True, pause: float = 0.01) -> None:
        """
        Redraw threats, crows and (optionally) remaining fractal waypoints.

        `pause` yields to the GUI loop; pass 0 on a headless backend.
        """
        if self._plt is None:
            import matplotlib.pyplot as plt
            self._plt = plt
            self._fig, self._ax = plt.subplots(figsize=self.figsize)
            self._fig.patch.set_facecolor('#16213e')

        ax = self._ax
        ax.clear()
        ax.set_xlim(self.field.config.bounds)
        ax.set_ylim(self.field.config.bounds)
        ax.set_aspect('equal')
        ax.set_facecolor('#1a1a2e')

        self._render_threats()
        if show_paths:
            self._render_paths()

        positions = self.field.get_positions()
        if len(positions) > 0:
            ax.scatter(
                positions[:, 0], positions[:, 1],
                c=[ALERT_COLORS[level] for level in self.field.get_alert_levels()],
                s=[90 if crow.is_veteran else 40 for crow in self.field.crows],
                alpha=0.9, edgecolors='white', linewidths=0.5
            )

        stats = self.field.stats()
        ax.set_title(
            f"Tick {self.field.time} | {len(self.field.crows)} crows | "
            f"{stats.fractal_crows} fractal | {stats.alert_crows} alert | "
            f"energy {stats.average_energy:.1f}",
            color='white', fontsize=12
        )

        if pause > 0:
            self._plt.pause(pause)

    def _render_threats(self) -> None:
        for category, (marker, color) in THREAT_MARKERS.items():
            points = [(t.x, t.y, t.severity) for t in self.field.threats if t.category is category]
            if not points:
                continue
            xs, ys, severities = zip(*points)
            self._ax.scatter(
                xs, ys, marker=marker, c=color,
                s=[80 + 160 * s for s in severities], alpha=0.8
            )

    def _render_paths(self) -> None:
        for crow in self.field.crows:
            if not crow.is_using_fractal_path:
                continue
            ahead = crow.state.active_path[crow.state.path_cursor:]
            if len(ahead) > 0:
                self._ax.plot(ahead[:, 0], ahead[:, 1], color='#b5179e', alpha=0.4, linewidth=0.8)

    def save_frame(self, path: str) -> None:
        """Write the last rendered frame as an image; no-op before the first render."""
        if self._fig is not None:
            self._fig.savefig(path, dpi=150, facecolor=self._fig.get_facecolor())

    def close(self) -> None:
        if self._fig is not None:
            self._plt.close(self._fig)
            self._fig = self._ax = self._plt = None
